"""Unit tests for URL composition and query/body encoding."""

from __future__ import annotations

import json

import pytest

from packages.networking_kit import (
    GenericError,
    InvalidURLError,
    encode_json_body,
    encode_query,
    join_url,
    render_value,
    validate_url,
)


@pytest.mark.parametrize(
    ("base", "endpoint"),
    [
        ("https://example.test", "users"),
        ("https://example.test", "/users"),
        ("https://example.test/", "users"),
        ("https://example.test/", "/users"),
    ],
)
def test_join_url_uses_exactly_one_separator(base: str, endpoint: str) -> None:
    """Base and endpoint should always be joined by a single slash."""
    assert join_url(base, endpoint) == "https://example.test/users"


def test_encode_query_empty_mapping_has_no_suffix() -> None:
    """An empty or missing query mapping should add nothing to the URL."""
    assert encode_query({}) == ""
    assert encode_query(None) == ""


def test_encode_query_joins_pairs_without_trailing_separator() -> None:
    """Pairs should be ``&``-joined after a leading ``?``."""
    assert encode_query({"a": 1, "b": 2}) == "?a=1&b=2"


def test_encode_query_does_not_escape_values() -> None:
    """Values are interpolated verbatim; escaping is the caller's job."""
    assert encode_query({"q": "a%20b"}) == "?q=a%20b"


def test_render_value_formats_primitives() -> None:
    """Booleans render lowercase and None renders empty."""
    assert render_value(True) == "true"
    assert render_value(False) == "false"
    assert render_value(None) == ""
    assert render_value(2.5) == "2.5"
    assert render_value("x") == "x"


def test_encode_json_body_round_trips_mapping() -> None:
    """Encoded bodies should decode back into an equivalent mapping."""
    params = {"title": "x", "body": "y", "userId": 1, "tags": ["a", "b"]}

    assert json.loads(encode_json_body(params)) == params


def test_encode_json_body_falls_back_to_empty_bytes() -> None:
    """Unserializable values produce an empty body in the default mode."""
    assert encode_json_body({"blob": object()}) == b""


def test_encode_json_body_strict_mode_raises_generic_error() -> None:
    """Strict mode should surface serialization failures as GenericError."""
    with pytest.raises(GenericError) as exc_info:
        encode_json_body({"blob": object()}, strict=True)

    assert "Unable to encode request body as JSON" in exc_info.value.message
    assert isinstance(exc_info.value.cause, TypeError)


def test_validate_url_accepts_absolute_http_urls() -> None:
    """Absolute http(s) URLs should parse without error."""
    assert validate_url("https://example.test/users?a=1").host == "example.test"


@pytest.mark.parametrize(
    "url",
    ["", "/users", "not a url/users", "ftp://example.test/file", "https://"],
)
def test_validate_url_rejects_unusable_urls(url: str) -> None:
    """Relative, non-http, or host-less URLs should raise InvalidURLError."""
    with pytest.raises(InvalidURLError):
        validate_url(url)

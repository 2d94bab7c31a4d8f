"""URL composition, query strings, and JSON request bodies."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from .errors import GenericError, InvalidURLError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def join_url(base: str, endpoint: str) -> str:
    """Join base URL and endpoint path with exactly one ``/`` between them."""
    return f"{base.rstrip('/')}/{endpoint.lstrip('/')}"


def render_value(value: object) -> str:
    """Render one primitive parameter value the way it is interpolated on the wire."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query(params: Mapping[str, Any] | None) -> str:
    """Render a mapping into a ``?k=v&k=v`` query suffix.

    Values are not percent-escaped; callers pass pre-escaped values when they
    contain characters unsafe in a URL. An empty mapping yields ``""``.
    """
    if not params:
        return ""
    pairs = "&".join(f"{key}={render_value(value)}" for key, value in params.items())
    return f"?{pairs}"


def encode_json_body(
    params: Mapping[str, Any] | None, *, strict: bool = False
) -> bytes:
    """Serialize a mapping as a pretty-printed JSON object.

    When the mapping cannot be serialized the result is ``b""`` and a warning
    is logged, unless ``strict`` is set, in which case ``GenericError`` is
    raised instead.
    """
    try:
        return json.dumps(dict(params or {}), indent=2).encode("utf-8")
    except (TypeError, ValueError) as exc:
        if strict:
            raise GenericError(
                message=f"Unable to encode request body as JSON: {exc}",
                cause=exc,
            ) from exc
        logger.warning("json body encoding failed; sending empty body: %s", exc)
        return b""


def validate_url(url: str) -> httpx.URL:
    """Parse ``url`` as an absolute http(s) URL or raise ``InvalidURLError``."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise InvalidURLError(url=str(url)) from exc
    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.host:
        raise InvalidURLError(url=url)
    return parsed

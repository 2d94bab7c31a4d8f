"""Per-request log fields for records emitted by the executor and uploader.

While a request is in flight its method and URL are attached to every record
as ``request_method`` and ``request_url`` attributes (via ``extra``), so a
host's own handlers and formatters can pick them up. The library installs no
handlers of its own.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

REQUEST_METHOD = "request_method"
REQUEST_URL = "request_url"


@dataclass(frozen=True, slots=True)
class RequestLogFields:
    """Method and URL of the request currently being executed."""

    method: str
    url: str

    def as_extra(self) -> dict[str, str]:
        """Return the fields keyed by their record attribute names."""
        return {REQUEST_METHOD: self.method, REQUEST_URL: self.url}


_CURRENT_REQUEST: ContextVar[RequestLogFields | None] = ContextVar(
    "networking_kit_current_request", default=None
)


def current_request() -> RequestLogFields | None:
    """Return the request bound in the current context, if any."""
    return _CURRENT_REQUEST.get()


@contextmanager
def request_context(method: str, url: str) -> Iterator[RequestLogFields]:
    """Bind ``method`` and ``url`` for the duration of a block."""
    request = RequestLogFields(method=method, url=url)
    token = _CURRENT_REQUEST.set(request)
    try:
        yield request
    finally:
        _CURRENT_REQUEST.reset(token)


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Merge the bound request fields into each call's ``extra``."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        request = current_request()
        if request is not None:
            kwargs["extra"] = {**request.as_extra(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str) -> RequestLoggerAdapter:
    """Return a logger that tags records with the in-flight request."""
    return RequestLoggerAdapter(logging.getLogger(name), {})

"""Request-scoped log fields for networking_kit."""

from .context import (
    REQUEST_METHOD,
    REQUEST_URL,
    RequestLogFields,
    RequestLoggerAdapter,
    current_request,
    get_logger,
    request_context,
)

__all__ = [
    "current_request",
    "get_logger",
    "REQUEST_METHOD",
    "REQUEST_URL",
    "request_context",
    "RequestLogFields",
    "RequestLoggerAdapter",
]

"""Closed error taxonomy for networking_kit calls.

Every failure surfaced by the executor, uploader, or streams is one of the
four ``NetworkError`` subclasses below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class NetworkErrorKind(str, Enum):
    """Stable names for the four failure kinds."""

    INVALID_URL = "invalid_url"
    DECODING_ERROR = "decoding_error"
    GENERIC_ERROR = "generic_error"
    INVALID_RESPONSE_CODE = "invalid_response_code"


@dataclass(frozen=True)
class NetworkError(Exception):
    """Base error type for networking_kit failures.

    A bare ``NetworkError`` carries no finer classification and reports
    ``generic_error``.
    """

    kind: ClassVar[NetworkErrorKind] = NetworkErrorKind.GENERIC_ERROR

    message: str

    @property
    def error_message(self) -> str:
        """Return the human-readable message for display to end users."""
        return self.message

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(frozen=True)
class InvalidURLError(NetworkError):
    """URL composition produced something unparsable; no I/O was attempted."""

    kind: ClassVar[NetworkErrorKind] = NetworkErrorKind.INVALID_URL

    message: str = "Invalid URL encountered. Can't proceed with the request"
    url: str = ""


@dataclass(frozen=True)
class DecodingError(NetworkError):
    """Response body did not decode into the requested result type."""

    kind: ClassVar[NetworkErrorKind] = NetworkErrorKind.DECODING_ERROR

    message: str = "Encountered an error while decoding server response."
    detail: str = ""

    def __str__(self) -> str:
        """Return the message followed by decoder diagnostics, when present."""
        if not self.detail:
            return self.message
        return f"{self.message} {self.detail}"


@dataclass(frozen=True)
class GenericError(NetworkError):
    """Transport, serialization, or otherwise unclassified failure."""

    kind: ClassVar[NetworkErrorKind] = NetworkErrorKind.GENERIC_ERROR

    cause: Exception | None = field(default=None, compare=False)


@dataclass(frozen=True)
class InvalidResponseCodeError(NetworkError):
    """Server answered with a status code outside the accepted set."""

    kind: ClassVar[NetworkErrorKind] = NetworkErrorKind.INVALID_RESPONSE_CODE

    message: str = ""
    code: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(
                self,
                "message",
                f"Invalid response code. Expected 200, received {self.code}",
            )


def as_network_error(error: BaseException) -> NetworkError:
    """Reduce any exception to a member of the error taxonomy."""
    if isinstance(error, NetworkError):
        return error
    message = str(error) or type(error).__name__
    return GenericError(
        message=message,
        cause=error if isinstance(error, Exception) else None,
    )

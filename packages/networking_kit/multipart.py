"""Multipart form-data uploads with progress reporting.

Form encoding is done by httpx from ``files=`` tuples; this module only maps
upload parameters onto that shape and meters the encoded body as the
transport consumes it.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Mapping

import httpx

from .encoding import render_value, validate_url
from .errors import GenericError, NetworkError, as_network_error
from .logging import get_logger, request_context
from .models import Attachment, MultipartResult, ParameterValue, ProgressObserver
from .streams import cancellation_requested

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024

# Set by httpx from the encoded form; caller values would corrupt the framing.
_FORM_MANAGED_HEADERS = frozenset({"content-type", "content-length", "transfer-encoding"})

# httpx ``files=`` entry: (filename, content, content_type). A part without a
# filename or content type renders as a plain form field.
FormFile = tuple[str | None, str | bytes, str | None]


def attachment_file(attachment: Attachment) -> FormFile:
    """Return the ``(filename, content, content_type)`` tuple for one attachment."""
    kind = attachment.kind
    return (f"{uuid.uuid4()}.{kind.extension}", attachment.data, kind.mime_type)


def build_parts(
    parameters: Mapping[str, ParameterValue],
) -> list[tuple[str, FormFile]]:
    """Translate upload parameters into httpx ``files=`` entries, in mapping order.

    Attachments (alone or in a list) become file parts with a generated
    filename. Raw ``bytes``/``bytearray`` values are sent as-is and other
    primitives as their rendered text. Nested containers are rejected.
    """
    parts: list[tuple[str, FormFile]] = []
    for key, value in parameters.items():
        if isinstance(value, Attachment):
            parts.append((key, attachment_file(value)))
        elif isinstance(value, (bytes, bytearray)):
            parts.append((key, (None, bytes(value), None)))
        elif isinstance(value, (list, tuple)) and all(
            isinstance(item, Attachment) for item in value
        ):
            parts.extend((key, attachment_file(item)) for item in value)
        elif isinstance(value, (Mapping, list, tuple, set)):
            raise GenericError(
                message=(
                    f"Unsupported multipart value for '{key}': "
                    f"{type(value).__name__}"
                )
            )
        else:
            logger.debug("form field %s=%s", key, value)
            parts.append((key, (None, render_value(value), None)))
    if not parts:
        raise GenericError(message="Multipart upload needs at least one part")
    return parts


class ProgressStream(httpx.AsyncByteStream):
    """Re-chunk an encoded request body and report the sent fraction.

    The observer receives a value in ``(0, 1]`` after each chunk is handed to
    the transport. When the total is unknown only ``1.0`` is reported, once
    the body is exhausted. Iteration stops with ``CancelledError`` as soon as
    the surrounding work is cancelled, so no report follows a cancellation.
    """

    def __init__(
        self,
        inner: httpx.AsyncByteStream,
        total: int | None,
        on_progress: ProgressObserver | None,
    ) -> None:
        self._inner = inner
        self._total = total
        self._on_progress = on_progress

    async def __aiter__(self) -> AsyncIterator[bytes]:
        sent = 0
        async for block in self._inner:
            for start in range(0, len(block), CHUNK_SIZE):
                chunk = block[start : start + CHUNK_SIZE]
                _stop_if_cancelled()
                yield chunk
                sent += len(chunk)
                if self._total:
                    self._report(min(sent / self._total, 1.0))
        if not self._total:
            self._report(1.0)

    def _report(self, fraction: float) -> None:
        _stop_if_cancelled()
        logger.debug("upload progress %.1f%%", fraction * 100)
        if self._on_progress is not None:
            self._on_progress(fraction)

    async def aclose(self) -> None:
        await self._inner.aclose()


def _stop_if_cancelled() -> None:
    if cancellation_requested():
        raise asyncio.CancelledError()


def _caller_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Drop framing headers the encoded form must own."""
    kept: dict[str, str] = {}
    for name, value in (headers or {}).items():
        if name.lower() in _FORM_MANAGED_HEADERS:
            logger.debug("ignoring caller header %s on multipart upload", name)
            continue
        kept[name] = value
    return kept


class MultipartUploader:
    """Send multipart uploads through one injected ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Create an uploader bound to ``client``."""
        self._client = client

    async def upload(
        self,
        url: str,
        parameters: Mapping[str, ParameterValue],
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressObserver | None = None,
    ) -> MultipartResult:
        """Upload ``parameters`` and return the raw body and response.

        The status code is not checked and the body is not decoded; callers
        inspect ``MultipartResult.response`` themselves.
        """
        method = method.upper()
        with request_context(method, url):
            try:
                validate_url(url)
                request = self._build_request(method, url, parameters, headers)
                response = await self._send(request, on_progress)
            except NetworkError as exc:
                logger.warning("upload failed kind=%s: %s", exc.kind.value, exc)
                raise
            except Exception as exc:
                error = as_network_error(exc)
                logger.warning("upload failed: %s", error)
                raise error from exc
            logger.debug("upload finished status=%s", response.status_code)
            return MultipartResult(body=response.content, response=response)

    def _build_request(
        self,
        method: str,
        url: str,
        parameters: Mapping[str, ParameterValue],
        headers: Mapping[str, str] | None,
    ) -> httpx.Request:
        """Let httpx encode the form; it sets boundary and length headers."""
        return self._client.build_request(
            method,
            url,
            files=build_parts(parameters),
            headers=_caller_headers(headers),
        )

    async def _send(
        self, request: httpx.Request, on_progress: ProgressObserver | None
    ) -> httpx.Response:
        """Meter the body, issue the upload, and map transport failures."""
        length = request.headers.get("Content-Length")
        request.stream = ProgressStream(
            request.stream, int(length) if length else None, on_progress
        )
        try:
            return await self._client.send(request)
        except httpx.TransportError as exc:
            raise GenericError(message=f"Network issue: {exc}", cause=exc) from exc
        except httpx.RequestError as exc:
            raise GenericError(message=f"HTTP client error: {exc}", cause=exc) from exc

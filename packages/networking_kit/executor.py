"""GET/POST execution with status validation and typed JSON decoding."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from .encoding import encode_json_body, encode_query, join_url, validate_url
from .errors import (
    DecodingError,
    GenericError,
    InvalidResponseCodeError,
    NetworkError,
    as_network_error,
)
from .logging import get_logger, request_context

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


class RequestExecutor:
    """Build, send, validate, and decode one JSON request per call."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str,
        accepted_status_codes: Iterable[int] = (),
        strict_json_body: bool = False,
    ) -> None:
        """Create an executor bound to one injected ``httpx.AsyncClient``."""
        self._client = client
        self._base_url = base_url
        self._accepted_status_codes = frozenset(accepted_status_codes)
        self._strict_json_body = strict_json_body

    @property
    def accepted_status_codes(self) -> frozenset[int]:
        """Return status codes accepted in addition to 200..299."""
        return self._accepted_status_codes

    async def get(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> Any:
        """Issue one GET and decode the response into ``result_type``."""
        url = join_url(self._base_url, endpoint) + encode_query(query)
        return await self._execute(
            "GET",
            url,
            headers=dict(headers or {}),
            content=None,
            result_type=result_type,
        )

    async def post(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> Any:
        """Issue one JSON POST and decode the response into ``result_type``."""
        url = join_url(self._base_url, endpoint)
        request_headers = {"Content-Type": JSON_CONTENT_TYPE}
        request_headers.update(headers or {})
        try:
            body = encode_json_body(params, strict=self._strict_json_body)
        except NetworkError as exc:
            logger.warning("request body rejected: %s", exc)
            raise
        return await self._execute(
            "POST",
            url,
            headers=request_headers,
            content=body,
            result_type=result_type,
        )

    def is_accepted(self, status_code: int) -> bool:
        """Return whether ``status_code`` counts as a successful response."""
        return 200 <= status_code <= 299 or status_code in self._accepted_status_codes

    async def _execute(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        content: bytes | None,
        result_type: Any,
    ) -> Any:
        """Send one request and reduce every failure to a ``NetworkError``."""
        with request_context(method, url):
            try:
                validate_url(url)
                response = await self._send(
                    method, url, headers=headers, content=content
                )
                self._check_status(response)
                return _decode(response, result_type)
            except NetworkError as exc:
                logger.warning("request failed kind=%s: %s", exc.kind.value, exc)
                raise
            except Exception as exc:
                error = as_network_error(exc)
                logger.warning("request failed: %s", error)
                raise error from exc

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        content: bytes | None,
    ) -> httpx.Response:
        """Issue the request and map transport failures to ``GenericError``."""
        logger.debug("sending request")
        try:
            return await self._client.request(
                method, url, headers=headers, content=content
            )
        except httpx.RequestError as exc:
            message = str(exc) or type(exc).__name__
            raise GenericError(message=message, cause=exc) from exc

    def _check_status(self, response: httpx.Response) -> None:
        """Raise ``InvalidResponseCodeError`` for unaccepted status codes."""
        if not self.is_accepted(response.status_code):
            raise InvalidResponseCodeError(code=response.status_code)
        logger.debug("response accepted status=%s", response.status_code)


def _decode(response: httpx.Response, result_type: Any) -> Any:
    """Validate the JSON body of ``response`` against ``result_type``."""
    try:
        return TypeAdapter(result_type).validate_json(response.content)
    except ValidationError as exc:
        raise DecodingError(detail=str(exc)) from exc

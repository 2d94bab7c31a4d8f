"""Networking facade exposing suspending and streaming request helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

import httpx

from .config import NetworkingSettings
from .executor import RequestExecutor
from .models import MultipartResult, ParameterValue, ProgressObserver
from .multipart import MultipartUploader
from .streams import ResultStream


class NetworkingProtocol(Protocol):
    """Public surface of ``Networking``, for callers that substitute fakes."""

    async def get(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> Any:
        """Issue one GET and return the decoded body."""

    async def post(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> Any:
        """Issue one JSON POST and return the decoded body."""

    def get_stream(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> ResultStream[Any]:
        """Return a stream emitting one decoded GET result."""

    def post_stream(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> ResultStream[Any]:
        """Return a stream emitting one decoded POST result."""

    def multipart(
        self,
        url: str,
        parameters: Mapping[str, ParameterValue],
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressObserver | None = None,
    ) -> ResultStream[MultipartResult]:
        """Return a stream emitting one raw upload result."""


class Networking:
    """Entry point for GET, POST, and multipart calls against one base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        accepted_status_codes: Iterable[int] = (),
        strict_json_body: bool = False,
        callback_loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Create a facade; a private client is created only when none is given."""
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._callback_loop = callback_loop
        self._executor = RequestExecutor(
            self._client,
            base_url=base_url,
            accepted_status_codes=accepted_status_codes,
            strict_json_body=strict_json_body,
        )
        self._uploader = MultipartUploader(self._client)

    @classmethod
    def from_settings(
        cls,
        settings: NetworkingSettings,
        *,
        client: httpx.AsyncClient | None = None,
        callback_loop: asyncio.AbstractEventLoop | None = None,
    ) -> Networking:
        """Build a facade from resolved ``NetworkingSettings``."""
        return cls(
            settings.base_url,
            client=client,
            accepted_status_codes=settings.accepted_status_codes,
            strict_json_body=settings.strict_json_body,
            callback_loop=callback_loop,
        )

    async def aclose(self) -> None:
        """Close the HTTP client when this facade created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Networking:
        """Enter async context manager scope."""
        return self

    async def __aexit__(self, *_: object) -> None:
        """Exit async context manager scope and close owned resources."""
        await self.aclose()

    async def get(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> Any:
        """Issue one GET and return the body decoded as ``result_type``."""
        return await self._executor.get(
            endpoint, headers=headers, query=query, result_type=result_type
        )

    async def post(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> Any:
        """Issue one JSON POST and return the body decoded as ``result_type``."""
        return await self._executor.post(
            endpoint, headers=headers, params=params, result_type=result_type
        )

    async def upload(
        self,
        url: str,
        parameters: Mapping[str, ParameterValue],
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressObserver | None = None,
    ) -> MultipartResult:
        """Send one multipart upload to an absolute ``url``."""
        return await self._uploader.upload(
            url,
            parameters,
            method=method,
            headers=headers,
            on_progress=on_progress,
        )

    def get_stream(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> ResultStream[Any]:
        """Return a stream emitting one decoded GET result."""
        return ResultStream(
            lambda: self.get(
                endpoint, headers=headers, query=query, result_type=result_type
            ),
            callback_loop=self._callback_loop,
        )

    def post_stream(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        result_type: Any = Any,
    ) -> ResultStream[Any]:
        """Return a stream emitting one decoded POST result."""
        return ResultStream(
            lambda: self.post(
                endpoint, headers=headers, params=params, result_type=result_type
            ),
            callback_loop=self._callback_loop,
        )

    def multipart(
        self,
        url: str,
        parameters: Mapping[str, ParameterValue],
        *,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
        on_progress: ProgressObserver | None = None,
    ) -> ResultStream[MultipartResult]:
        """Return a stream emitting one raw upload result."""
        return ResultStream(
            lambda: self.upload(
                url,
                parameters,
                method=method,
                headers=headers,
                on_progress=on_progress,
            ),
            callback_loop=self._callback_loop,
        )

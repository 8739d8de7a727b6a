"""
HTTP client utilities for calls to upstream speech and translation services.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp


class UpstreamResponseError(Exception):
    """Raised when an upstream service answers with a non-success status.

    The raw response body is kept verbatim so callers can surface
    provider-specific diagnostics.
    """

    def __init__(self, status: int, body: str, url: str = "") -> None:
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"{status} {body}")


class AsyncHTTPClient:
    """Async HTTP client shared by the provider and translation clients.

    One instance owns one pooled ``aiohttp.ClientSession`` and is safe to use
    from many concurrent tasks.
    """

    def __init__(self, timeout: float = 30, connection_limit: int = 20) -> None:
        """Initialize HTTP client."""
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.connection_limit = connection_limit
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def open(self) -> None:
        """Create the underlying session if it is not open yet."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(limit=self.connection_limit),
            )

    async def close(self) -> None:
        """Close the underlying session."""
        if self.session:
            await self.session.close()
            self.session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if not self.session:
            raise RuntimeError("HTTP client not initialized. Use async context manager.")
        return self.session

    @staticmethod
    async def _prepare_request(coro_or_ctx: Any) -> Any:
        """Normalize aiohttp request result to an async context manager."""
        if asyncio.iscoroutine(coro_or_ctx):
            return await coro_or_ctx
        return coro_or_ctx

    @staticmethod
    async def _ensure_response_ok(response: Any) -> None:
        """Raise UpstreamResponseError carrying the raw body on non-2xx."""
        if 200 <= response.status < 300:
            return
        body = await response.text()
        raise UpstreamResponseError(response.status, body, str(getattr(response, "url", "")))

    async def get(
        self,
        url: str,
        headers: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Perform GET request and decode the JSON body."""
        session = self._require_session()

        request_ctx = await self._prepare_request(
            session.get(url, headers=headers, params=params)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            return await response.json()

    async def post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Perform POST request with a JSON body and decode the JSON response."""
        session = self._require_session()

        request_ctx = await self._prepare_request(
            session.post(url, json=data, headers=headers, params=params)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            return await response.json()

    @asynccontextmanager
    async def stream_post(
        self,
        url: str,
        data: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[Any]:
        """POST a JSON body and yield the open response for streamed reading.

        The status check happens before the response is handed out, so the
        caller only ever sees successful responses.
        """
        session = self._require_session()

        request_ctx = await self._prepare_request(
            session.post(url, json=data, headers=headers, params=params)
        )
        async with request_ctx as response:
            await self._ensure_response_ok(response)
            yield response

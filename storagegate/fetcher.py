"""Outbound HTTP fetcher for remote-URL uploads.

Responses are streamed: the body is read chunk by chunk as the storage
write consumes it, never buffered in full.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from .errors import UpstreamFetchError

logger = logging.getLogger(__name__)

# Chunk size for streamed reads (8KB)
CHUNK_SIZE = 8192


class RemoteStream:
    """An open streaming response for a remote URL."""

    def __init__(self, url: str, response: httpx.Response, chunk_size: int = CHUNK_SIZE):
        self.url = url
        self._response = response
        self._chunk_size = chunk_size

    @property
    def content_type(self) -> str | None:
        """Upstream Content-Type header, if any."""
        value = self._response.headers.get("content-type", "").strip()
        return value or None

    @property
    def content_length(self) -> int | None:
        value = self._response.headers.get("content-length")
        return int(value) if value and value.isdigit() else None

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Yield body chunks, mapping transport errors to UpstreamFetchError."""
        try:
            async for chunk in self._response.aiter_bytes(chunk_size=self._chunk_size):
                yield chunk
        except httpx.HTTPError as e:
            raise UpstreamFetchError(self.url, f"Stream interrupted: {e}") from e


class HttpFetcher:
    """
    Streaming HTTP GET client.

    Owns an ``httpx.AsyncClient`` unless one is injected.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        chunk_size: int = CHUNK_SIZE,
        client: httpx.AsyncClient | None = None,
    ):
        self._chunk_size = chunk_size
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client:
            await self._http.aclose()

    @asynccontextmanager
    async def stream(self, url: str) -> AsyncIterator[RemoteStream]:
        """
        Open a streaming GET for ``url``.

        The response is closed when the context exits, whether or not the
        body was fully consumed.

        Raises:
            UpstreamFetchError: If the request fails or returns a non-2xx status
        """
        logger.info(f"Fetching remote content from {url}")
        try:
            request = self._http.build_request("GET", url)
            response = await self._http.send(request, stream=True)
        except httpx.RequestError as e:
            raise UpstreamFetchError(url, f"Request failed: {e}") from e

        try:
            if not response.is_success:
                raise UpstreamFetchError(url, f"HTTP {response.status_code}")
            yield RemoteStream(url, response, self._chunk_size)
        finally:
            await response.aclose()

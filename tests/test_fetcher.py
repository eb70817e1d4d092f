"""Tests for the streaming HTTP fetcher."""

import httpx
import pytest
from pytest_httpx import HTTPXMock

from storagegate import HttpFetcher, UpstreamFetchError


class TestHttpFetcherStream:
    """Test HttpFetcher.stream."""

    @pytest.mark.asyncio
    async def test_stream_success(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            method="GET",
            url="https://cdn.example.com/logo.png",
            content=b"\x89PNG" * 100,
            headers={"Content-Type": "image/png"},
        )

        fetcher = HttpFetcher(chunk_size=64)
        try:
            async with fetcher.stream("https://cdn.example.com/logo.png") as remote:
                assert remote.content_type == "image/png"
                assert remote.content_length == 400
                chunks = [chunk async for chunk in remote.iter_bytes()]
        finally:
            await fetcher.close()

        assert b"".join(chunks) == b"\x89PNG" * 100
        assert all(len(chunk) <= 64 for chunk in chunks)

    @pytest.mark.asyncio
    async def test_stream_without_content_type(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url="https://cdn.example.com/blob", content=b"data")

        fetcher = HttpFetcher()
        try:
            async with fetcher.stream("https://cdn.example.com/blob") as remote:
                assert remote.content_type is None
        finally:
            await fetcher.close()

    @pytest.mark.asyncio
    async def test_stream_not_found(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url="https://cdn.example.com/missing", status_code=404)

        fetcher = HttpFetcher()
        try:
            with pytest.raises(UpstreamFetchError, match="HTTP 404") as exc_info:
                async with fetcher.stream("https://cdn.example.com/missing"):
                    pass
        finally:
            await fetcher.close()

        assert exc_info.value.url == "https://cdn.example.com/missing"

    @pytest.mark.asyncio
    async def test_stream_connection_error(self, httpx_mock: HTTPXMock):
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        fetcher = HttpFetcher()
        try:
            with pytest.raises(UpstreamFetchError, match="Request failed"):
                async with fetcher.stream("https://unreachable.example.com/a"):
                    pass
        finally:
            await fetcher.close()

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url="https://cdn.example.com/a", content=b"a")

        http = httpx.AsyncClient()
        fetcher = HttpFetcher(client=http)
        async with fetcher.stream("https://cdn.example.com/a") as remote:
            assert [chunk async for chunk in remote.iter_bytes()] == [b"a"]
        await fetcher.close()

        assert not http.is_closed
        await http.aclose()

"""Tests for the HTTP spec source used by the watcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from tasc.exceptions import SpecFetchError
from tasc.models import hash_content
from tasc.watch import HttpSpecSource

URL = "https://api.example.com/doc/openapi.json"


class TestHttpSpecSource:
    @pytest.mark.asyncio
    async def test_returns_bytes_and_hash(self, users_spec_bytes: bytes) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, content=users_spec_bytes)

        source = HttpSpecSource(URL, transport=httpx.MockTransport(handler))
        fetched = await source.fetch()

        assert requested == [URL]
        assert fetched.content == users_spec_bytes
        assert fetched.hash == hash_content(users_spec_bytes)

    @pytest.mark.asyncio
    async def test_follows_redirects(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": URL})
            return httpx.Response(200, content=b"{}")

        source = HttpSpecSource(
            "https://api.example.com/old", transport=httpx.MockTransport(handler)
        )
        assert (await source.fetch()).content == b"{}"

    @pytest.mark.asyncio
    async def test_error_status(self) -> None:
        source = HttpSpecSource(
            URL, transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        with pytest.raises(SpecFetchError, match="HTTP 500"):
            await source.fetch()

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        source = HttpSpecSource(URL, transport=httpx.MockTransport(handler))
        with pytest.raises(SpecFetchError, match="refused"):
            await source.fetch()

    @pytest.mark.asyncio
    async def test_malformed_url(self) -> None:
        source = HttpSpecSource("http://a:bad/x")
        with pytest.raises(SpecFetchError, match="http://a:bad/x"):
            await source.fetch()

    @pytest.mark.asyncio
    async def test_overall_timeout(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, content=b"{}")

        source = HttpSpecSource(URL, timeout=0.05, transport=httpx.MockTransport(handler))
        with pytest.raises(SpecFetchError, match="Timed out after 0.05s"):
            await source.fetch()

"""Where the watcher gets the API description from."""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

import httpx

from tasc.exceptions import SpecFetchError
from tasc.models import FetchedSpec


class SpecSource(Protocol):
    """Produces the current API description on demand."""

    async def fetch(self) -> FetchedSpec:
        """Return the raw description and its digest.

        Raises:
            SpecFetchError: If the description cannot be obtained.
        """
        ...


class HttpSpecSource:
    """:class:`SpecSource` that GETs a URL with :class:`httpx.AsyncClient`.

    The whole fetch is bounded by *timeout* seconds; exceeding it counts as a
    :class:`~tasc.exceptions.SpecFetchError` like any other failure.

    Args:
        url: Location of the API description.
        timeout: Upper bound in seconds for one fetch.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`.
    """

    def __init__(self, url: str, timeout: float = 30.0, transport: Optional[Any] = None) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self) -> FetchedSpec:
        try:
            content = await asyncio.wait_for(self._get(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise SpecFetchError(
                f"Timed out after {self.timeout:g}s fetching API description from {self.url}"
            ) from exc
        return FetchedSpec.from_bytes(content)

    async def _get(self) -> bytes:
        kwargs: dict[str, Any] = {"timeout": self.timeout, "follow_redirects": True}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                response = await client.get(self.url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SpecFetchError(
                f"HTTP {exc.response.status_code} fetching API description from {self.url}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise SpecFetchError(
                f"Timed out fetching API description from {self.url}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SpecFetchError(
                f"Failed to fetch API description from {self.url}: {exc}"
            ) from exc
        return response.content

    def __repr__(self) -> str:
        return f"HttpSpecSource({self.url!r})"

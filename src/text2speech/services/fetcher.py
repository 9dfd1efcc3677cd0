"""HTTP transport for retrieving audio fragments."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

import httpx

from ..errors import FetchError
from .request_builder import RequestDescriptor

logger = logging.getLogger(__name__)

FragmentFetcher = Callable[[RequestDescriptor], Awaitable[bytes]]


class HttpFragmentFetcher:
    """
    Fetch one audio fragment per request descriptor.

    Uses a shared httpx.AsyncClient for connection pooling across fragments and
    synthesis calls. The client may be injected (tests, app lifespan) or is
    created lazily and owned by this fetcher.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = 30.0,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0),
                follow_redirects=True,
            )
            logger.info("Created httpx.AsyncClient for fragment fetching")
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.info("Closed fragment HTTP client")

    async def __call__(self, descriptor: RequestDescriptor) -> bytes:
        client = self._get_http_client()
        index = descriptor.chunk_index
        try:
            response = await client.get(descriptor.url, headers=dict(descriptor.headers))
        except httpx.TimeoutException as exc:
            logger.warning(f"Fragment {index}/{descriptor.total_chunks} timed out: {exc}")
            raise FetchError(index, "request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning(
                f"Network error fetching fragment {index}/{descriptor.total_chunks}: {exc}"
            )
            raise FetchError(index, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            logger.error(
                f"Fragment {index}/{descriptor.total_chunks} rejected "
                f"with status {response.status_code}"
            )
            raise FetchError(
                index,
                f"remote endpoint returned {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(
            f"Fetched fragment {index}/{descriptor.total_chunks} ({len(response.content)} bytes)"
        )
        return response.content


__all__ = ["FragmentFetcher", "HttpFragmentFetcher"]

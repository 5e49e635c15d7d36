"""HTTP client for the remote asset content host."""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from core import settings

logger = logging.getLogger(__name__)


class ContentDownloadError(Exception):
    """Raised when the content host answers with a non-success status."""

    def __init__(self, content_id: str, status_code: int) -> None:
        super().__init__(f"Downloading {content_id} failed with HTTP {status_code}")
        self.content_id = content_id
        self.status_code = status_code


class ContentHostUnavailableError(Exception):
    """Raised when the content host cannot be reached at all."""


class ContentHostClient:
    """Downloads content blobs by id from the environment's asset host."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.content_host_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.content_host_timeout_seconds,
            follow_redirects=True,
        )

    def content_url(self, content_id: str) -> str:
        return f"{self.base_url}/{content_id}"

    async def fetch(self, content_id: str) -> bytes:
        """Return the full body for ``content_id``, buffered in memory."""
        url = self.content_url(content_id)
        logger.info("Downloading %s", url)
        try:
            async with self._client.stream("GET", url) as response:
                if response.is_error:
                    raise ContentDownloadError(content_id, response.status_code)
                chunks = [chunk async for chunk in response.aiter_bytes()]
        except httpx.TransportError as exc:
            raise ContentHostUnavailableError(f"Could not reach {url}: {exc}") from exc
        return b"".join(chunks)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ContentHostClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

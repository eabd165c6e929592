"""HTTP client for downloading source images."""

from dataclasses import dataclass

import httpx

from image_catalog.domain.contributions import FetchedImage
from image_catalog.services.contributions import ImageFetcher


@dataclass
class HttpxImageFetcher(ImageFetcher):
    """Image fetcher using httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 20.0

    @classmethod
    def create(cls, timeout: float) -> "HttpxImageFetcher":
        """Create an image fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def fetch(self, url: str) -> FetchedImage:
        """Download an image, failing on non-success responses."""
        response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return FetchedImage(
            content=response.content,
            content_type=response.headers.get("content-type"),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

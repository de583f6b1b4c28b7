"""Link metadata fetching for the document capture core.

This module contains the LinkMetadataFetcher class that resolves the
title and preview image of a web page. Fetching never raises: failures
are reported through ``LinkMetadata.error``.
"""

import contextlib
import io
import logging
from dataclasses import dataclass
from typing import Any, ContextManager, Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from PIL import Image, UnidentifiedImageError

from ..config import Config
from ..exceptions import MetadataFetchError

__all__ = ["LinkMetadata", "LinkMetadataFetcher"]

logger = logging.getLogger(__name__)


@dataclass
class LinkMetadata:
    """Metadata of a web page.

    Attributes:
        title: Page title, if found
        preview_image: Decoded preview image, if found
        error: Failure description when the page could not be fetched
    """
    title: Optional[str] = None
    preview_image: Optional[Any] = None
    error: Optional[str] = None


class LinkMetadataFetcher:
    """Fetches ``og:title``/``<title>`` and ``og:image`` of a URL.

    Responses are streamed and abandoned once they exceed the byte limit
    for their kind, so a huge page or image is never held in memory.

    Attributes:
        timeout: Request timeout in seconds
        max_page_bytes: Largest HTML body that is parsed
        max_image_bytes: Largest preview image that is decoded
    """

    def __init__(self, timeout: float = Config.LINK_FETCH_TIMEOUT,
                 client: Optional[httpx.Client] = None,
                 max_page_bytes: int = Config.LINK_MAX_PAGE_BYTES,
                 max_image_bytes: int = Config.LINK_MAX_IMAGE_BYTES) -> None:
        self.timeout: float = timeout
        self.max_page_bytes: int = max_page_bytes
        self.max_image_bytes: int = max_image_bytes
        self._client: Optional[httpx.Client] = client

    def fetch(self, url: str) -> LinkMetadata:
        """Resolve metadata for ``url``.

        Returns:
            Metadata; on failure only ``error`` is set
        """
        try:
            return self._fetch(url)
        except MetadataFetchError as e:
            logger.info("Link metadata unavailable for %s: %s", url, e)
            return LinkMetadata(error=str(e))

    def _fetch(self, url: str) -> LinkMetadata:
        with self._open_client() as client:
            html = self._get(client, url, self.max_page_bytes)
            soup = BeautifulSoup(html, "html.parser")

            title = self._meta_content(soup, "og:title")
            if not title and soup.title and soup.title.string:
                title = soup.title.string.strip()

            preview_image = None
            image_url = self._meta_content(soup, "og:image")
            if image_url:
                preview_image = self._load_image(client, urljoin(url, image_url))

        return LinkMetadata(title=title or None, preview_image=preview_image)

    def _load_image(self, client: httpx.Client, image_url: str) -> Optional[Any]:
        try:
            data = self._get(client, image_url, self.max_image_bytes)
            image = Image.open(io.BytesIO(data))
            image.load()
            return image
        except (MetadataFetchError, UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.debug("Preview image %s unavailable: %s", image_url, e)
            return None

    def _get(self, client: httpx.Client, url: str, limit: int) -> bytes:
        """Download at most ``limit`` bytes of ``url``.

        Raises:
            MetadataFetchError: On HTTP errors or when the body exceeds ``limit``
        """
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                declared = response.headers.get("Content-Length", "")
                if declared.isdigit() and int(declared) > limit:
                    raise MetadataFetchError(f"Response from {url} declares {declared} bytes, limit is {limit}")
                body = bytearray()
                for chunk in response.iter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise MetadataFetchError(f"Response from {url} exceeds {limit} bytes")
                return bytes(body)
        except httpx.HTTPError as e:
            raise MetadataFetchError(f"Request to {url} failed: {str(e)}") from e

    def _open_client(self) -> ContextManager[httpx.Client]:
        if self._client is not None:
            # Borrowed clients are not closed by this fetcher
            return contextlib.nullcontext(self._client)
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": Config.LINK_USER_AGENT},
        )

    @staticmethod
    def _meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
        tag = soup.find("meta", attrs={"property": name}) or soup.find("meta", attrs={"name": name})
        if tag is None:
            return None
        content = tag.get("content")
        return content.strip() if content and content.strip() else None


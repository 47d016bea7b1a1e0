"""Image fetchers used by the frame loader.

A fetcher is an async callable that turns a URL into a decoded Pillow image
or raises :class:`~scrollstag.exceptions.FrameFetchError`. The loader does
not care where the bytes come from, which keeps it testable without a
network.

Example:
    async with httpx.AsyncClient() as client:
        fetcher = HttpImageFetcher(client)
        image = await fetcher("https://cdn.example.org/hero/frame_000.webp")
"""

from __future__ import annotations

import asyncio
import io
import os
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

import PIL.Image
import filetype
import httpx

from .exceptions import FrameFetchError

HTTP_PROTOCOL_URL_HEADER = "http://"
HTTPS_PROTOCOL_URL_HEADER = "https://"


class ImageFetcher(Protocol):
    """Async callable returning a decoded image for a URL."""

    async def __call__(self, url: str) -> PIL.Image.Image: ...


def decode_image(data: bytes, url: str = "") -> PIL.Image.Image:
    """Decode compressed image data.

    The content is sniffed first so HTML error pages served with status 200
    are rejected before Pillow sees them. Pixel data is loaded eagerly so
    truncated files fail here and not later while drawing.

    :param data: The compressed image data
    :param url: Source URL, used in error messages only
    :return: The decoded image
    :raises FrameFetchError: If the data is not a decodable image
    """
    if not data:
        raise FrameFetchError(url, "empty response")
    if not filetype.is_image(data):
        mime = filetype.guess_mime(data) or "unknown"
        raise FrameFetchError(url, f"not an image ({mime})")
    try:
        image = PIL.Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, SyntaxError, EOFError, PIL.Image.DecompressionBombError) as e:
        raise FrameFetchError(url, f"decode failed: {e}") from e
    return image


class HttpImageFetcher:
    """Fetch images over HTTP(S) using a shared :class:`httpx.AsyncClient`.

    If no client is passed, one is created lazily and closed by
    :meth:`aclose`. A client passed in is owned by the caller.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0):
        """
        :param client: Shared client (owned by the caller) or None
        :param timeout: Request timeout in seconds for a lazily created client
        """
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def __call__(self, url: str) -> PIL.Image.Image:
        try:
            response = await self._get_client().get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FrameFetchError(url, f"request failed: {e}") from e
        if not response.is_success:
            raise FrameFetchError(url, f"HTTP {response.status_code}")
        return decode_image(response.content, url)

    async def aclose(self) -> None:
        """Close the client if it was created by this fetcher."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class FileImageFetcher:
    """Fetch images from the local file system.

    URLs are mapped onto paths below ``root``; for http(s) URLs only the
    URL path is used, so exported sequences can be previewed offline with
    the same slide records.
    """

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def resolve(self, url: str) -> Path:
        """Map a URL or relative path onto a file below the root.

        :raises FrameFetchError: If the path points outside the root
        """
        relative = url
        if url.startswith(HTTP_PROTOCOL_URL_HEADER) or url.startswith(
            HTTPS_PROTOCOL_URL_HEADER
        ):
            relative = urlparse(url).path
        root = self.root.resolve()
        path = (root / relative.lstrip("/")).resolve()
        if not path.is_relative_to(root):
            raise FrameFetchError(url, "path outside the assets directory")
        return path

    def _load(self, url: str) -> PIL.Image.Image:
        path = self.resolve(url)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FrameFetchError(url, f"cannot read {path}: {e.strerror}") from e
        return decode_image(data, url)

    async def __call__(self, url: str) -> PIL.Image.Image:
        # File reads and decoding run off the event loop
        return await asyncio.to_thread(self._load, url)

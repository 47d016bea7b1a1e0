"""Access to the hero slides stored in the hosted content store.

The store speaks the PostgREST dialect. The client is constructed explicitly
at application start and closed at shutdown; there is no module-level client.

Example:
    async with ContentClient.from_settings(settings) as content:
        slides = await content.fetch_active_slides()
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import httpx

from .config import HeroSettings
from .exceptions import ContentError, DecodeError
from .slides import Slide, active_slides, decode_slides

logger = logging.getLogger(__name__)


class ContentClient:
    """Read-only client for the ``hero_services`` table."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        table: str = "hero_services",
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        :param base_url: Project URL of the content store
        :param api_key: Anonymous (public) API key
        :param table: Table holding the hero slides
        :param timeout: Request timeout in seconds
        :param transport: Custom transport, e.g. ``httpx.MockTransport`` in tests
        """
        if not base_url:
            raise ValueError("A content store URL is required")
        self.base_url = base_url.rstrip("/")
        self.table = table
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: HeroSettings, **kwargs) -> "ContentClient":
        return cls(
            settings.CONTENT_URL,
            settings.CONTENT_KEY,
            settings.CONTENT_TABLE,
            timeout=settings.FETCH_TIMEOUT,
            **kwargs,
        )

    async def __aenter__(self) -> "ContentClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_active_slides(self) -> list[Slide]:
        """Fetch active slides ordered by ``sort_order``.

        :raises ContentError: If the store cannot be reached or answers with
            an error status
        :raises DecodeError: If the payload does not match the slide schema
        """
        params = {"select": "*", "active": "eq.true", "order": "sort_order.asc"}
        try:
            response = await self._client.get(f"/rest/v1/{self.table}", params=params)
        except httpx.HTTPError as e:
            raise ContentError(f"Error fetching hero slides: {e}") from e
        if response.is_error:
            raise ContentError(
                f"Error fetching hero slides: HTTP {response.status_code} {response.text[:200]}"
            )
        try:
            rows = response.json()
        except ValueError as e:
            raise DecodeError(f"Hero slides response is not JSON: {e}") from e
        slides = active_slides(decode_slides(rows))
        logger.info("Fetched %d active hero slides", len(slides))
        return slides


def load_slides_file(path: str | os.PathLike) -> list[Slide]:
    """Read slide rows from a JSON file (offline preview).

    :param path: File containing a JSON array of slide rows
    :return: Active slides ordered by ``sort_order``
    :raises DecodeError: If the file is not valid JSON or rows are invalid
    """
    try:
        rows = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DecodeError(f"{path} is not valid JSON: {e}") from e
    return active_slides(decode_slides(rows))

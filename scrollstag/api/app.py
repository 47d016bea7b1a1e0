"""Preview application.

Builds the content client, the image fetcher and one
:class:`~scrollstag.hero.CinematicHero` at startup and releases them at
shutdown.

Mount in your app:
    from scrollstag.api import create_app
    app.mount("/hero-preview", create_app())
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING, Sequence

import httpx
from fastapi import FastAPI

from ..config import HeroSettings, settings as default_settings
from ..content import ContentClient, load_slides_file
from ..exceptions import ContentError, DecodeError
from ..fetch import FileImageFetcher, HttpImageFetcher
from ..hero import CinematicHero
from .hero import router as hero_router

if TYPE_CHECKING:
    from ..fetch import ImageFetcher
    from ..slides import Slide

logger = logging.getLogger(__name__)


async def _load_slides(settings: HeroSettings, stack: AsyncExitStack) -> list["Slide"]:
    if settings.CONTENT_URL:
        content = ContentClient.from_settings(settings)
        stack.push_async_callback(content.aclose)
        try:
            return await content.fetch_active_slides()
        except (ContentError, DecodeError) as e:
            logger.error("Error fetching hero slides: %s", e)
            return []
    if settings.SLIDES_FILE:
        try:
            return load_slides_file(settings.SLIDES_FILE)
        except (OSError, DecodeError) as e:
            logger.error("Error reading hero slides from %s: %s", settings.SLIDES_FILE, e)
            return []
    logger.warning("Neither SCROLLSTAG_CONTENT_URL nor SCROLLSTAG_SLIDES_FILE is set")
    return []


def create_app(
    settings: HeroSettings | None = None,
    *,
    slides: Sequence["Slide"] | None = None,
    fetcher: "ImageFetcher | None" = None,
) -> FastAPI:
    """Create the preview application.

    :param settings: Settings, the module defaults if None
    :param slides: Slides to show instead of loading them from the store
    :param fetcher: Image fetcher instead of HTTP/file fetching
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with AsyncExitStack() as stack:
            hero_slides = list(slides) if slides is not None else await _load_slides(settings, stack)
            image_fetcher = fetcher
            if image_fetcher is None:
                if settings.ASSETS_DIR:
                    image_fetcher = FileImageFetcher(settings.ASSETS_DIR)
                else:
                    client = httpx.AsyncClient(timeout=settings.FETCH_TIMEOUT, follow_redirects=True)
                    stack.push_async_callback(client.aclose)
                    image_fetcher = HttpImageFetcher(client)

            hero = CinematicHero(hero_slides, image_fetcher, settings)
            hero.mount()
            stack.push_async_callback(hero.aclose)
            app.state.settings = settings
            app.state.hero = hero
            yield

    app = FastAPI(title="ScrollStag Hero Preview", docs_url="/docs", lifespan=lifespan)
    app.include_router(hero_router)
    return app

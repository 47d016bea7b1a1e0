"""Cinematic hero: slides, frame loading and scroll rendering combined.

The hero owns one canvas and, for the active slide, one
:class:`~scrollstag.loader.FrameLoader` and one
:class:`~scrollstag.renderer.HeroRenderer`. Switching slides tears both down
and starts over for the new slide; late results of the old slide's fetches
are ignored.

Example:
    async with httpx.AsyncClient() as client:
        hero = CinematicHero(slides, HttpImageFetcher(client))
        hero.mount()
        hero.on_resize(1920, 1080)
        await hero.wait_until_loaded()
        hero.on_progress(0.5)
        png = hero.canvas.to_bytes("png")
        hero.next()
        ...
        hero.unmount()
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Sequence

from .canvas import FrameCanvas
from .config import HeroSettings, settings as default_settings
from .loader import FrameLoader, LoadState
from .navigation import SlideNavigator
from .renderer import HeroRenderer, HeroState

if TYPE_CHECKING:
    from PIL import Image

    from .fetch import ImageFetcher
    from .slides import Slide

logger = logging.getLogger(__name__)


class DisplayState(Enum):
    """What the host page shows in place of the hero."""

    LOADING = "loading"  # Spinner while the active slide loads
    EMPTY = "empty"  # No active slides
    CONTENT = "content"  # Slide content over canvas or static image


HeroListener = Callable[["Slide", HeroState], None]


class CinematicHero:
    """Scroll-driven hero over an ordered list of slides."""

    def __init__(
        self,
        slides: Sequence["Slide"],
        fetcher: "ImageFetcher",
        settings: HeroSettings | None = None,
        *,
        frame_count: int | None = None,
        load_timeout: float | None = None,
        canvas_size: tuple[int, int] | None = None,
    ):
        """
        :param slides: Active slides in display order
        :param fetcher: Async callable turning URLs into images
        :param settings: Settings, the module defaults if None
        :param frame_count: Frames per sequence, overrides the settings
        :param load_timeout: Load timeout in seconds, overrides the settings
        :param canvas_size: Initial canvas size, overrides the settings
        """
        self.settings = settings or default_settings
        self.fetcher = fetcher
        self.frame_count = frame_count if frame_count is not None else self.settings.FRAME_COUNT
        self.load_timeout = (
            load_timeout if load_timeout is not None else self.settings.LOAD_TIMEOUT
        )
        width, height = canvas_size or (self.settings.CANVAS_WIDTH, self.settings.CANVAS_HEIGHT)
        self.canvas = FrameCanvas(width, height)
        self.navigator = SlideNavigator(slides)
        self.navigator.on_change(self._on_slide_change)

        self._loader: FrameLoader | None = None
        self._renderer: HeroRenderer | None = None
        self._progress = 0.0
        self._mounted = False
        self._listeners: list[HeroListener] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def slides(self) -> tuple["Slide", ...]:
        return self.navigator.slides

    @property
    def current_index(self) -> int:
        return self.navigator.current_index

    @property
    def active_slide(self) -> "Slide | None":
        return self.navigator.current

    @property
    def loader(self) -> FrameLoader | None:
        """Loader of the active slide."""
        return self._loader

    @property
    def renderer(self) -> HeroRenderer | None:
        """Renderer of the active slide."""
        return self._renderer

    @property
    def load_state(self) -> LoadState | None:
        return self._loader.state if self._loader is not None else None

    @property
    def state(self) -> HeroState:
        """Render state of the active slide."""
        if self._renderer is None:
            return HeroState.UNRESOLVED
        return self._renderer.state

    @property
    def display_state(self) -> DisplayState:
        if self.navigator.is_empty:
            return DisplayState.EMPTY
        if self._loader is None or not self._loader.state.is_complete:
            return DisplayState.LOADING
        return DisplayState.CONTENT

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def frame_index(self) -> int:
        """Frame index mapped from the current progress."""
        if self._renderer is None:
            return 0
        return self._renderer.render_state.current_frame_index

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def mount(self) -> None:
        """Activate the current slide. Must run inside an event loop."""
        if self._mounted:
            return
        self._mounted = True
        if self.navigator.is_empty:
            logger.info("No active hero slides")
            return
        self._activate()

    def unmount(self) -> None:
        """Cancel loading and stop rendering."""
        self._teardown()
        self._mounted = False

    async def aclose(self) -> None:
        """Unmount and wait until the fetches of the active slide stopped."""
        if self._loader is not None:
            await self._loader.aclose()
        self.unmount()

    async def wait_until_loaded(self) -> LoadState | None:
        """Wait until the active slide finished loading (or timed out)."""
        if self._loader is None:
            return None
        return await self._loader.wait()

    def subscribe(self, listener: HeroListener) -> Callable[[], None]:
        """Register a listener for render state transitions.

        :param listener: Function(slide, new_state)
        :return: Function removing the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def next(self) -> int | None:
        return self.navigator.next()

    def previous(self) -> int | None:
        return self.navigator.previous()

    def go_to(self, index: int) -> int | None:
        return self.navigator.go_to(index)

    # -------------------------------------------------------------------------
    # Host inputs
    # -------------------------------------------------------------------------

    def on_progress(self, progress: float) -> int:
        """Forward a scroll progress update to the active slide."""
        self._progress = progress
        if self._renderer is None:
            return 0
        return self._renderer.on_progress(progress)

    def on_resize(self, width: int, height: int) -> None:
        """Resize the canvas and redraw the active slide."""
        if self._renderer is None:
            self.canvas.resize(width, height)
            return
        self._renderer.on_resize(width, height)

    def compose(self) -> "Image.Image":
        """The hero background as currently displayed."""
        if self._renderer is None:
            return self.canvas.snapshot()
        return self._renderer.compose()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _on_slide_change(self, index: int) -> None:
        if self._mounted:
            self._activate()

    def _activate(self) -> None:
        self._teardown()
        slide = self.navigator.current
        logger.debug("Activating hero slide %s (%s)", slide.id, slide.source_url)

        loader = FrameLoader(
            slide.source_url,
            self.fetcher,
            frame_count=self.frame_count,
            timeout=self.load_timeout,
            frame_pattern=self.settings.FRAME_PATTERN,
        )
        self.canvas.clear()
        renderer = HeroRenderer(loader.state, self.canvas)
        renderer.subscribe(lambda state: self._emit(slide, state))
        loader.subscribe(renderer.on_load_event)
        self._loader = loader
        self._renderer = renderer

        renderer.activate()
        renderer.on_progress(self._progress)
        loader.start()

    def _teardown(self) -> None:
        if self._loader is not None:
            self._loader.cancel()
            self._loader = None
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    def _emit(self, slide: "Slide", state: HeroState) -> None:
        for listener in list(self._listeners):
            listener(slide, state)

"""Frame loader.

Preloads the frames of a sequence folder (or the single image of a static
source) for one slide activation. All fetches are issued at once as asyncio
tasks; completion is reached when every frame has resolved or the load
timeout elapsed, whichever comes first.

Example:
    loader = FrameLoader("https://cdn.example.org/hero/passport", fetcher)
    loader.subscribe(lambda event, index: print(event, index))
    loader.start()
    state = await loader.wait()
    print(state.loaded_count, state.all_failed)

    # Slide switched or component unmounted
    loader.cancel()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from .sources import DEFAULT_FRAME_PATTERN, SourceKind, classify_source, frame_urls

if TYPE_CHECKING:
    import PIL.Image

    from .fetch import ImageFetcher

logger = logging.getLogger(__name__)

DEFAULT_FRAME_COUNT = 60
"Number of frames in a sequence folder"

DEFAULT_LOAD_TIMEOUT = 5.0
"Seconds after which rendering proceeds with whatever frames arrived"


class FrameStatus(Enum):
    """Load status of a single frame."""

    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


class LoadEvent(Enum):
    """Notifications sent to loader subscribers."""

    FRAME = "frame"  # A frame resolved, index given
    COMPLETE = "complete"  # Loading is complete for rendering purposes


@dataclass
class LoadState:
    """Frames and per-frame status of one slide activation.

    Owned by a single :class:`FrameLoader`; never mutated after the loader
    was cancelled.

    Attributes:
        mode: How the source is loaded and rendered
        source_url: The slide source the frames belong to
        frames: Decoded frames, None where not (yet) available
        frame_status: Status per frame index
        is_complete: True once all frames resolved or the timeout elapsed
        timed_out: True if completion was forced by the timeout
    """

    mode: SourceKind
    source_url: str = ""
    frames: list["PIL.Image.Image | None"] = field(default_factory=list)
    frame_status: list[FrameStatus] = field(default_factory=list)
    is_complete: bool = False
    timed_out: bool = False

    @classmethod
    def create(cls, mode: SourceKind, frame_count: int, source_url: str = "") -> "LoadState":
        """Create a state with ``frame_count`` pending frames."""
        return cls(
            mode=mode,
            source_url=source_url,
            frames=[None] * frame_count,
            frame_status=[FrameStatus.PENDING] * frame_count,
        )

    @property
    def frame_count(self) -> int:
        """Number of frame slots."""
        return len(self.frame_status)

    @property
    def loaded_count(self) -> int:
        return self.frame_status.count(FrameStatus.LOADED)

    @property
    def failed_count(self) -> int:
        return self.frame_status.count(FrameStatus.FAILED)

    @property
    def pending_count(self) -> int:
        return self.frame_status.count(FrameStatus.PENDING)

    @property
    def all_failed(self) -> bool:
        """True iff loading is complete and every frame failed.

        A source without URL counts as failed. Frames still pending after a
        timeout do not count as failed.
        """
        if not self.is_complete:
            return False
        if self.mode is SourceKind.UNRESOLVED:
            return True
        return self.failed_count == self.frame_count

    def is_usable(self, index: int) -> bool:
        """Whether the frame at ``index`` can be drawn."""
        return (
            0 <= index < self.frame_count
            and self.frame_status[index] is FrameStatus.LOADED
        )

    def first_loaded_index(self) -> int | None:
        """Lowest index with a loaded frame, None if there is none."""
        try:
            return self.frame_status.index(FrameStatus.LOADED)
        except ValueError:
            return None


@dataclass
class CancelToken:
    """Cancellation flag shared by all fetch tasks of one loader."""

    cancelled: bool = False


LoadListener = Callable[[LoadEvent, "int | None"], None]


class FrameLoader:
    """Load all frames of one slide source concurrently.

    One instance per slide activation. :meth:`start` must be called from a
    running event loop; it returns immediately. Subscribers are notified on
    the event loop for every resolved frame and once on completion.
    """

    def __init__(
        self,
        source_url: str | None,
        fetcher: "ImageFetcher",
        frame_count: int = DEFAULT_FRAME_COUNT,
        timeout: float = DEFAULT_LOAD_TIMEOUT,
        frame_pattern: str = DEFAULT_FRAME_PATTERN,
    ):
        """
        :param source_url: Sequence folder or static image URL
        :param fetcher: Async callable turning URLs into images
        :param frame_count: Number of frames of a sequence source
        :param timeout: Seconds until loading counts as complete anyway
        :param frame_pattern: File name pattern of sequence frames
        """
        if frame_count < 1:
            raise ValueError(f"frame_count must be at least 1, got {frame_count}")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.source_url = (source_url or "").strip()
        self.fetcher = fetcher
        self.timeout = timeout
        self.frame_pattern = frame_pattern
        self.kind = classify_source(self.source_url)

        slots = {
            SourceKind.SEQUENCE: frame_count,
            SourceKind.STATIC: 1,
            SourceKind.UNRESOLVED: 0,
        }[self.kind]
        self.state = LoadState.create(self.kind, slots, self.source_url)

        self._token = CancelToken()
        self._tasks: set[asyncio.Task] = set()
        self._timer: asyncio.TimerHandle | None = None
        self._done: asyncio.Future | None = None
        self._listeners: list[LoadListener] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def is_started(self) -> bool:
        return self._done is not None

    @property
    def is_cancelled(self) -> bool:
        return self._token.cancelled

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def subscribe(self, listener: LoadListener) -> Callable[[], None]:
        """Register a listener for frame and completion events.

        :param listener: Function(event, frame_index or None)
        :return: Function removing the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> LoadState:
        """Issue all fetches and arm the timeout. Does not block.

        :return: The (still loading) state
        """
        if self._done is not None:
            return self.state
        loop = asyncio.get_running_loop()
        self._done = loop.create_future()

        if self.kind is SourceKind.UNRESOLVED:
            logger.warning("No source URL provided for hero slide")
            self._complete()
            return self.state

        if self.kind is SourceKind.STATIC:
            logger.info("Detected static/animated image source: %s", self.source_url)
            urls = [self.source_url]
        else:
            urls = frame_urls(self.source_url, self.state.frame_count, self.frame_pattern)

        token = self._token
        for index, url in enumerate(urls):
            task = loop.create_task(self._fetch(index, url, token))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        self._timer = loop.call_later(self.timeout, self._on_timeout, token)
        return self.state

    async def wait(self) -> LoadState:
        """Wait until loading is complete (or the loader was cancelled)."""
        if self._done is None:
            self.start()
        return await asyncio.shield(self._done)

    def cancel(self) -> None:
        """Abandon the load.

        In-flight fetches are cancelled and their late results ignored; the
        state is left exactly as it is.
        """
        if self._token.cancelled:
            return
        self._token.cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._listeners.clear()
        if self._done is not None and not self._done.done():
            self._done.set_result(self.state)
        logger.debug("Cancelled frame loading for %s", self.source_url or "<no source>")

    async def aclose(self) -> None:
        """Cancel and wait until all fetch tasks have finished."""
        tasks = list(self._tasks)
        self.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    async def _fetch(self, index: int, url: str, token: CancelToken) -> None:
        try:
            image = await self.fetcher(url)
        except Exception as e:
            # Any fetcher error only fails this frame
            if token.cancelled:
                return
            logger.debug("Frame %d failed: %s", index, e)
            self._resolve(index, None)
            return
        if token.cancelled:
            return
        self._resolve(index, image)

    def _resolve(self, index: int, image: "PIL.Image.Image | None") -> None:
        state = self.state
        if state.timed_out:
            # Frames still pending at the timeout stay pending
            return
        state.frames[index] = image
        state.frame_status[index] = (
            FrameStatus.LOADED if image is not None else FrameStatus.FAILED
        )
        self._emit(LoadEvent.FRAME, index)
        if not state.is_complete and state.pending_count == 0:
            self._complete()

    def _on_timeout(self, token: CancelToken) -> None:
        self._timer = None
        if token.cancelled or self.state.is_complete:
            return
        logger.warning(
            "Image loading timed out after %.1fs (%d/%d pending). Forcing render.",
            self.timeout,
            self.state.pending_count,
            self.state.frame_count,
        )
        self.state.timed_out = True
        self._complete()

    def _complete(self) -> None:
        state = self.state
        state.is_complete = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if state.all_failed and state.mode is not SourceKind.UNRESOLVED:
            logger.error("All frames failed to load: %s", self.source_url)
        else:
            logger.info(
                "Loading complete. Errors: %d/%d", state.failed_count, state.frame_count
            )
        if self._done is not None and not self._done.done():
            self._done.set_result(state)
        self._emit(LoadEvent.COMPLETE, None)

    def _emit(self, event: LoadEvent, index: int | None) -> None:
        for listener in list(self._listeners):
            listener(event, index)


async def load_frames(
    source_url: str | None,
    fetcher: "ImageFetcher",
    frame_count: int = DEFAULT_FRAME_COUNT,
    timeout: float = DEFAULT_LOAD_TIMEOUT,
    frame_pattern: str = DEFAULT_FRAME_PATTERN,
) -> LoadState:
    """Load a slide source and return its state once complete.

    Cancelling the awaiting task cancels the load.
    """
    loader = FrameLoader(source_url, fetcher, frame_count, timeout, frame_pattern)
    loader.start()
    try:
        return await loader.wait()
    except asyncio.CancelledError:
        loader.cancel()
        raise

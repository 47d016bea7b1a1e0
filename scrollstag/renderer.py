"""Scroll-to-frame renderer.

Maps a normalized scroll progress onto a frame of the active slide's
sequence and draws it onto the hero canvas. The renderer is a small state
machine driven by two host inputs, :meth:`HeroRenderer.on_progress` and
:meth:`HeroRenderer.on_resize`, plus the events of the slide's
:class:`~scrollstag.loader.FrameLoader`.

State machine (one renderer per slide activation)::

    UNRESOLVED --(no source)---------> FAILED_NO_SOURCE
    UNRESOLVED --(static)------------> LOADING_STATIC --> READY_STATIC | FAILED_STATIC
    UNRESOLVED --(sequence)----------> LOADING_SEQUENCE --> READY_SEQUENCE | FAILED_SEQUENCE

``READY_SEQUENCE`` is entered with the first loaded frame, even while other
frames are still loading. ``FAILED_*`` states show the placeholder.

Example:
    renderer = HeroRenderer(loader.state, canvas)
    loader.subscribe(renderer.on_load_event)
    renderer.activate()
    loader.start()

    # Scroll-driven, once per animation frame
    renderer.on_progress(0.42)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from .canvas import Placement, cover_placement, render_cover
from .exceptions import RendererStateError
from .loader import FrameStatus, LoadEvent, LoadState
from .placeholder import render_placeholder
from .sources import SourceKind

if TYPE_CHECKING:
    from PIL import Image

    from .canvas import FrameCanvas

logger = logging.getLogger(__name__)


class HeroState(Enum):
    """Render state of one slide activation."""

    UNRESOLVED = "unresolved"
    LOADING_STATIC = "loading_static"
    LOADING_SEQUENCE = "loading_sequence"
    READY_STATIC = "ready_static"
    READY_SEQUENCE = "ready_sequence"
    FAILED_NO_SOURCE = "failed_no_source"
    FAILED_STATIC = "failed_static"
    FAILED_SEQUENCE = "failed_sequence"

    @property
    def is_loading(self) -> bool:
        return self in (HeroState.LOADING_STATIC, HeroState.LOADING_SEQUENCE)

    @property
    def is_ready(self) -> bool:
        return self in (HeroState.READY_STATIC, HeroState.READY_SEQUENCE)

    @property
    def is_failed(self) -> bool:
        return self in (
            HeroState.FAILED_NO_SOURCE,
            HeroState.FAILED_STATIC,
            HeroState.FAILED_SEQUENCE,
        )


def frame_index_for_progress(progress: float, frame_count: int) -> int:
    """Map scroll progress onto a frame index.

    ``clamp(floor(progress * (frame_count - 1)), 0, frame_count - 1)``; values
    outside 0.0-1.0 are clamped, NaN maps to the first frame.

    :param progress: Scroll progress, 0.0 (hero enters) to 1.0 (hero leaves)
    :param frame_count: Number of frames, at least 1
    :return: Frame index
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be at least 1, got {frame_count}")
    if math.isnan(progress):
        return 0
    last = frame_count - 1
    if progress <= 0.0:
        return 0
    if progress >= 1.0:
        return last
    return max(0, min(last, math.floor(progress * last)))


@dataclass
class RenderState:
    """Renderer bookkeeping.

    Attributes:
        canvas_size: Current canvas size in device pixels
        current_frame_index: Frame mapped from the latest progress value
        drawn_frame_index: Frame actually drawn last (may be a substitute)
        placeholder_draws: How often the placeholder was drawn
    """

    canvas_size: tuple[int, int] = (0, 0)
    current_frame_index: int = 0
    drawn_frame_index: int | None = None
    placeholder_draws: int = 0

    @property
    def placeholder_drawn(self) -> bool:
        return self.placeholder_draws > 0


StateListener = Callable[[HeroState], None]


class HeroRenderer:
    """Draw the frame matching the scroll position of one slide activation."""

    def __init__(self, load_state: LoadState, canvas: "FrameCanvas | None" = None):
        """
        :param load_state: State of the slide's frame loader (read only)
        :param canvas: The drawing surface. May be attached later.
        """
        self.load_state = load_state
        self.canvas = canvas
        self.render_state = RenderState(canvas_size=canvas.size if canvas else (0, 0))
        self._state = HeroState.UNRESOLVED
        self._progress = 0.0
        self._listeners: list[StateListener] = []
        self._closed = False

        # Re-entrancy guard for draws triggered from within listeners
        self._drawing = False
        self._redraw_pending = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> HeroState:
        return self._state

    @property
    def mode(self) -> SourceKind:
        return self.load_state.mode

    @property
    def frame_count(self) -> int:
        """Frames of the sequence (1 for static and unresolved sources)."""
        return max(1, self.load_state.frame_count)

    @property
    def progress(self) -> float:
        """The latest progress value received."""
        return self._progress

    @property
    def static_image(self) -> "Image.Image | None":
        """The loaded image of a static source, displayed directly."""
        if self._state is HeroState.READY_STATIC:
            return self.load_state.frames[0]
        return None

    @property
    def static_placement(self) -> Placement | None:
        """Cover placement of the static image for the current canvas size."""
        image = self.static_image
        if image is None:
            return None
        return cover_placement(self.render_state.canvas_size, image.size)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def attach(self, canvas: "FrameCanvas") -> None:
        """Attach the drawing surface."""
        self.canvas = canvas
        self.render_state.canvas_size = canvas.size
        if self._state.is_failed and not self.render_state.placeholder_drawn:
            self._draw_placeholder()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for state transitions.

        :param listener: Function(new_state)
        :return: Function removing the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def activate(self) -> HeroState:
        """Leave ``UNRESOLVED`` according to the source kind.

        Catches up with the load state, so activating after frames arrived
        is fine.
        """
        if self._state is not HeroState.UNRESOLVED:
            return self._state
        if self.mode is SourceKind.UNRESOLVED:
            self._set_state(HeroState.FAILED_NO_SOURCE)
            self._draw_placeholder()
            return self._state
        if self.mode is SourceKind.STATIC:
            self._set_state(HeroState.LOADING_STATIC)
        else:
            self._set_state(HeroState.LOADING_SEQUENCE)
        self._sync_with_load_state()
        return self._state

    def close(self) -> None:
        """Stop reacting to any input. Terminal for this activation."""
        self._closed = True
        self._listeners.clear()

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def on_progress(self, progress: float) -> int:
        """Handle a scroll progress update.

        Cheap enough to be called once per animation frame: computes the
        index and, for sequences, draws one frame if the frame to show changed.

        :param progress: Scroll progress 0.0 - 1.0
        :return: The mapped frame index
        """
        if self.canvas is None:
            raise RendererStateError("on_progress called before a canvas was attached")
        self._progress = progress
        index = frame_index_for_progress(progress, self.frame_count)
        self.render_state.current_frame_index = index
        if (
            not self._closed
            and self._state is HeroState.READY_SEQUENCE
            and self._target_index() != self.render_state.drawn_frame_index
        ):
            self._request_draw()
        return index

    def on_resize(self, width: int, height: int) -> None:
        """Resize the canvas and redraw the current frame immediately."""
        if self.canvas is None:
            raise RendererStateError("on_resize called before a canvas was attached")
        if (width, height) != self.canvas.size:
            self.canvas.resize(width, height)
        self.render_state.canvas_size = self.canvas.size
        if self._closed:
            return
        if self._state is HeroState.READY_SEQUENCE:
            self._request_draw()
        elif self._state.is_failed:
            # Resizing cleared the surface
            self._draw_placeholder()

    def on_load_event(self, event: LoadEvent, index: int | None) -> None:
        """Loader listener: react to resolved frames and completion."""
        if self._closed:
            return
        if self._state is HeroState.UNRESOLVED:
            # Not activated yet, catch up in activate()
            return
        if event is LoadEvent.FRAME and self._state is HeroState.READY_SEQUENCE:
            # Redraw only if the arrival changes what should be on screen
            if self._target_index() != self.render_state.drawn_frame_index:
                self._request_draw()
            return
        self._sync_with_load_state()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def compose(self) -> "Image.Image":
        """The hero as currently displayed, as a single image.

        For static sources this is the directly placed image, otherwise the
        canvas content.
        """
        if self.canvas is None:
            raise RendererStateError("compose called before a canvas was attached")
        image = self.static_image
        if image is not None:
            return render_cover(image, self.canvas.size)
        return self.canvas.snapshot()

    def _sync_with_load_state(self) -> None:
        load = self.load_state
        if self._state is HeroState.LOADING_STATIC:
            if load.frame_status and load.frame_status[0] is FrameStatus.LOADED:
                self._set_state(HeroState.READY_STATIC)
            elif load.is_complete:
                self._set_state(HeroState.FAILED_STATIC)
                self._draw_placeholder()
        elif self._state is HeroState.LOADING_SEQUENCE:
            if load.first_loaded_index() is not None:
                self._set_state(HeroState.READY_SEQUENCE)
                self._request_draw()
            elif load.is_complete:
                # All frames failed, or the timeout left nothing usable
                self._set_state(HeroState.FAILED_SEQUENCE)
                self._draw_placeholder()

    def _request_draw(self) -> None:
        if self._drawing:
            self._redraw_pending = True
            return
        self._drawing = True
        try:
            self._draw_current_frame()
            while self._redraw_pending:
                self._redraw_pending = False
                self._draw_current_frame()
        finally:
            self._drawing = False

    def _target_index(self) -> int | None:
        index = self.render_state.current_frame_index
        if self.load_state.is_usable(index):
            return index
        # Nearest available substitute: the lowest loaded frame
        return self.load_state.first_loaded_index()

    def _draw_current_frame(self) -> None:
        index = self._target_index()
        if index is None or self.canvas is None:
            return
        image = self.load_state.frames[index]
        self.canvas.clear()
        self.canvas.draw_cover(image)
        self.render_state.drawn_frame_index = index

    def _draw_placeholder(self) -> None:
        if self.canvas is None:
            return
        width, height = self.canvas.size
        image = render_placeholder((width, height), self.load_state.source_url)
        self.canvas.draw_image(image, Placement(0, 0, width, height, 1.0))
        self.render_state.drawn_frame_index = None
        self.render_state.placeholder_draws += 1
        logger.debug("Drew placeholder for %s", self.load_state.source_url or "<no source>")

    def _set_state(self, state: HeroState) -> None:
        old_state = self._state
        self._state = state
        if old_state != state:
            logger.debug("Hero state %s -> %s", old_state.value, state.value)
            for listener in list(self._listeners):
                listener(state)

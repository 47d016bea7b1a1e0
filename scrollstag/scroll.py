"""Scroll position to hero progress.

The hero lives in a tall scroll container (by default three viewport heights)
with a sticky, viewport-sized stage. Progress is 0.0 when the container's top
reaches the top of the viewport and 1.0 when its bottom reaches the bottom of
the viewport.
"""

from __future__ import annotations

from typing import Callable


def scroll_progress(
    scroll_y: float, container_top: float, container_height: float, viewport_height: float
) -> float:
    """Progress of the viewport through the hero container.

    :param scroll_y: Current document scroll offset
    :param container_top: Document offset of the container's top edge
    :param container_height: Height of the container
    :param viewport_height: Height of the viewport
    :return: Progress clamped to 0.0 - 1.0
    """
    scrollable = container_height - viewport_height
    if scrollable <= 0:
        return 0.0 if scroll_y < container_top else 1.0
    return max(0.0, min(1.0, (scroll_y - container_top) / scrollable))


class ScrollTracker:
    """Turn raw scroll offsets into progress notifications.

    Listeners are only called when the progress value actually changes.
    """

    def __init__(
        self,
        viewport_height: float,
        container_top: float = 0.0,
        height_factor: float = 3.0,
    ):
        self.viewport_height = viewport_height
        self.container_top = container_top
        self.height_factor = height_factor
        self._progress: float | None = None
        self._listeners: list[Callable[[float], None]] = []

    @property
    def container_height(self) -> float:
        return self.viewport_height * self.height_factor

    @property
    def progress(self) -> float:
        return self._progress if self._progress is not None else 0.0

    def on_change(self, listener: Callable[[float], None]) -> Callable[[], None]:
        """Register a progress listener; returns a function removing it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, scroll_y: float) -> float:
        """Feed a new scroll offset."""
        progress = scroll_progress(
            scroll_y, self.container_top, self.container_height, self.viewport_height
        )
        if progress != self._progress:
            self._progress = progress
            for listener in list(self._listeners):
                listener(progress)
        return progress

    def set_viewport_height(self, viewport_height: float, scroll_y: float | None = None) -> None:
        """Update the viewport height, e.g. on window resize."""
        self.viewport_height = viewport_height
        if scroll_y is not None:
            self.update(scroll_y)

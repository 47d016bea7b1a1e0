"""Circular navigation over the hero's slides."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Sequence

if TYPE_CHECKING:
    from .slides import Slide


class SlideNavigator:
    """Track the active slide of a fixed, ordered slide list.

    ``next`` and ``previous`` wrap around. Change callbacks are invoked with
    the new index whenever the active slide changes.

    Example:
        navigator = SlideNavigator(slides)
        navigator.on_change(lambda index: print("now showing", index))
        navigator.next()
    """

    def __init__(self, slides: Sequence["Slide"]):
        self._slides: tuple["Slide", ...] = tuple(slides)
        self._index = 0
        self._on_change: list[Callable[[int], None]] = []

    @property
    def slides(self) -> tuple["Slide", ...]:
        return self._slides

    @property
    def count(self) -> int:
        return len(self._slides)

    @property
    def is_empty(self) -> bool:
        return not self._slides

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current(self) -> "Slide | None":
        """The active slide, None if there are no slides."""
        if self.is_empty:
            return None
        return self._slides[self._index]

    def next(self) -> int | None:
        """Activate the following slide, wrapping to the first one."""
        if self.is_empty:
            return None
        return self._set_index((self._index + 1) % self.count)

    def previous(self) -> int | None:
        """Activate the preceding slide, wrapping to the last one."""
        if self.is_empty:
            return None
        return self._set_index((self._index - 1 + self.count) % self.count)

    def go_to(self, index: int) -> int | None:
        """Activate the slide at ``index``.

        :raises IndexError: If the index is out of range
        """
        if self.is_empty:
            return None
        if not 0 <= index < self.count:
            raise IndexError(f"Slide index {index} out of range (0-{self.count - 1})")
        return self._set_index(index)

    def on_change(self, callback: Callable[[int], None]) -> None:
        """Register a callback for slide changes."""
        self._on_change.append(callback)

    def _set_index(self, index: int) -> int:
        old_index = self._index
        self._index = index
        if old_index != index:
            for callback in self._on_change:
                callback(index)
        return index

"""Exception classes for ScrollStag."""


class ScrollStagError(Exception):
    """Base exception for ScrollStag errors."""

    pass


class FrameFetchError(ScrollStagError):
    """Raised by fetchers when a single frame could not be fetched or decoded.

    Handled inside the frame loader; it never reaches the host page.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not load {url}: {reason}")
        self.url = url
        self.reason = reason


class DecodeError(ScrollStagError):
    """Raised when a content record does not match its typed schema."""

    pass


class ContentError(ScrollStagError):
    """Raised when the content store is unreachable or answers with an error."""

    pass


class RendererStateError(ScrollStagError):
    """Raised when the renderer is used before it was attached to a canvas."""

    pass

"""
ScrollStag - Scroll-synchronized frame-sequence hero rendering for Python
"""

from .canvas import FrameCanvas, Placement, cover_placement, render_cover
from .config import HeroSettings
from .exceptions import (
    ContentError,
    DecodeError,
    FrameFetchError,
    RendererStateError,
    ScrollStagError,
)
from .fetch import FileImageFetcher, HttpImageFetcher, ImageFetcher, decode_image
from .hero import CinematicHero, DisplayState
from .loader import (
    DEFAULT_FRAME_COUNT,
    DEFAULT_LOAD_TIMEOUT,
    FrameLoader,
    FrameStatus,
    LoadEvent,
    LoadState,
    load_frames,
)
from .navigation import SlideNavigator
from .placeholder import render_placeholder
from .renderer import HeroRenderer, HeroState, RenderState, frame_index_for_progress
from .scroll import ScrollTracker, scroll_progress
from .slides import Slide, active_slides, decode_slide, decode_slides
from .sources import SourceKind, classify_source, frame_url, frame_urls

__all__ = [
    # Slides
    "Slide",
    "decode_slide",
    "decode_slides",
    "active_slides",
    # Source resolution
    "SourceKind",
    "classify_source",
    "frame_url",
    "frame_urls",
    # Loading
    "FrameLoader",
    "FrameStatus",
    "LoadEvent",
    "LoadState",
    "load_frames",
    "DEFAULT_FRAME_COUNT",
    "DEFAULT_LOAD_TIMEOUT",
    "ImageFetcher",
    "HttpImageFetcher",
    "FileImageFetcher",
    "decode_image",
    # Rendering
    "HeroRenderer",
    "HeroState",
    "RenderState",
    "frame_index_for_progress",
    "FrameCanvas",
    "Placement",
    "cover_placement",
    "render_cover",
    "render_placeholder",
    # Hero
    "CinematicHero",
    "DisplayState",
    "SlideNavigator",
    "ScrollTracker",
    "scroll_progress",
    # Configuration and errors
    "HeroSettings",
    "ScrollStagError",
    "FrameFetchError",
    "DecodeError",
    "ContentError",
    "RendererStateError",
]

__version__ = "0.1.0"

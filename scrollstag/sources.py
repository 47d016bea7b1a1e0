"""Sequence source resolution.

Decides how a slide's ``source_url`` is loaded and rendered:

- ``STATIC``: a single raster image (jpg, jpeg, png, webp, gif), optionally
  followed by a query string. Animated GIF/WebP files are static sources too.
- ``SEQUENCE``: anything else, interpreted as a folder containing numbered
  frames ``frame_000.webp`` .. ``frame_059.webp``.
- ``UNRESOLVED``: empty or missing source.

Classification never touches the network.
"""

from __future__ import annotations

import re
from enum import Enum

DEFAULT_FRAME_PATTERN = "frame_{index:03d}.webp"
"File name pattern of a single frame inside a sequence folder"

STATIC_IMAGE_FILETYPES = ["jpeg", "jpg", "png", "webp", "gif"]
"File extensions which are displayed directly instead of as a sequence"

_STATIC_URL_RE = re.compile(
    r"\.(" + "|".join(STATIC_IMAGE_FILETYPES) + r")(\?.*)?$", re.IGNORECASE
)


class SourceKind(Enum):
    """Loading/rendering strategy of a slide source."""

    SEQUENCE = "sequence"
    STATIC = "static"
    UNRESOLVED = "unresolved"


def classify_source(source_url: str | None) -> SourceKind:
    """Classify a slide source.

    :param source_url: Folder base path or direct image URL
    :return: The source kind
    """
    if source_url is None or not source_url.strip():
        return SourceKind.UNRESOLVED
    if _STATIC_URL_RE.search(source_url.strip()):
        return SourceKind.STATIC
    return SourceKind.SEQUENCE


def frame_url(base_url: str, index: int, pattern: str = DEFAULT_FRAME_PATTERN) -> str:
    """Build the URL of a single frame in a sequence folder.

    >>> frame_url("https://cdn/hero", 7)
    'https://cdn/hero/frame_007.webp'

    :param base_url: The folder base path
    :param index: Zero-based frame index
    :param pattern: File name pattern, formatted with ``index``
    :return: The frame URL
    """
    return f"{base_url.rstrip('/')}/{pattern.format(index=index)}"


def frame_urls(
    base_url: str, frame_count: int, pattern: str = DEFAULT_FRAME_PATTERN
) -> list[str]:
    """All frame URLs of a sequence folder in index order."""
    return [frame_url(base_url, i, pattern) for i in range(frame_count)]

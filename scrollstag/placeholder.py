"""Fallback placeholder shown when a slide has no usable frames.

The pattern is deterministic: a diagonal gradient, a faint grid and a small
diagnostic label naming the missing source.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import numpy as np
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

GRADIENT_EDGE = (0x1A, 0x1A, 0x1A)
GRADIENT_CENTER = (0x2D, 0x2D, 0x2D)
GRID_SIZE = 50
GRID_COLOR = (255, 255, 255, round(255 * 0.03))
LABEL_COLOR = (255, 255, 255, round(255 * 0.1))
LABEL_FONT_SIZE = 10
LABEL_MARGIN = 20
LABEL_PREFIX = "ASSET SEQUENCE MISSING: "
MONOSPACE_FONTS = ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "Menlo.ttc", "consola.ttf")


@lru_cache(maxsize=1)
def _label_font() -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    for name in MONOSPACE_FONTS:
        try:
            return ImageFont.truetype(name, LABEL_FONT_SIZE)
        except OSError:
            continue
    logger.debug("No monospace font found, using Pillow's default font")
    return ImageFont.load_default()


def placeholder_label(source_url: str | None) -> str:
    """The diagnostic text drawn into the placeholder."""
    return LABEL_PREFIX + (source_url or "Unknown")


def gradient_pixels(width: int, height: int) -> np.ndarray:
    """Diagonal edge-center-edge gradient from top left to bottom right.

    :return: uint8 array of shape (height, width, 3)
    """
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    # Projection of each pixel onto the canvas diagonal, 0.0 .. 1.0
    norm = float(width * width + height * height) or 1.0
    t = (xs * width + ys * height) / norm
    weight = 1.0 - np.abs(2.0 * t - 1.0)
    edge = np.array(GRADIENT_EDGE, dtype=np.float64)
    center = np.array(GRADIENT_CENTER, dtype=np.float64)
    pixels = edge + (center - edge) * weight[..., np.newaxis]
    return np.clip(np.rint(pixels), 0, 255).astype(np.uint8)


def render_placeholder(size: tuple[int, int], source_url: str | None = None) -> Image.Image:
    """Render the fallback pattern.

    :param size: Canvas size (width, height) in pixels
    :param source_url: The unavailable source, shown in the label
    :return: RGB image of the given size
    """
    width, height = size
    if width <= 0 or height <= 0:
        return Image.new("RGB", (max(width, 0), max(height, 0)))

    base = Image.fromarray(gradient_pixels(width, height)).convert("RGBA")
    overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for x in range(0, width, GRID_SIZE):
        draw.line([(x, 0), (x, height)], fill=GRID_COLOR, width=1)
    for y in range(0, height, GRID_SIZE):
        draw.line([(0, y), (width, y)], fill=GRID_COLOR, width=1)
    # Label baseline sits roughly LABEL_MARGIN above the bottom edge
    draw.text(
        (LABEL_MARGIN, height - LABEL_MARGIN - LABEL_FONT_SIZE),
        placeholder_label(source_url),
        fill=LABEL_COLOR,
        font=_label_font(),
    )
    return Image.alpha_composite(base, overlay).convert("RGB")

"""Drawing surface of the hero.

:class:`FrameCanvas` is the single surface the renderer draws frames and the
fallback placeholder onto. Like an HTML canvas, resizing it clears it.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image


@dataclass(frozen=True)
class Placement:
    """Where and how large an image is drawn on the canvas.

    Attributes:
        x: Left edge in canvas pixels (negative when cropped)
        y: Top edge in canvas pixels (negative when cropped)
        width: Drawn width in pixels
        height: Drawn height in pixels
        ratio: Scale factor applied to the image
    """

    x: float
    y: float
    width: float
    height: float
    ratio: float


def cover_placement(canvas_size: tuple[int, int], image_size: tuple[int, int]) -> Placement:
    """Aspect-fill ("cover") placement of an image on a canvas.

    The image is scaled so that it covers the whole canvas and centered;
    overflow is cropped evenly on both sides, there is never letterboxing.

    :param canvas_size: Canvas (width, height)
    :param image_size: Natural image (width, height)
    :return: The placement
    """
    canvas_width, canvas_height = canvas_size
    image_width, image_height = image_size
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image has no area: {image_width}x{image_height}")
    ratio = max(canvas_width / image_width, canvas_height / image_height)
    width = image_width * ratio
    height = image_height * ratio
    return Placement(
        x=(canvas_width - width) / 2,
        y=(canvas_height - height) / 2,
        width=width,
        height=height,
        ratio=ratio,
    )


def render_cover(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Render ``image`` cover-fitted into a new RGB image of ``size``."""
    target = Image.new("RGB", size)
    _paste(target, image, cover_placement(size, image.size))
    return target


def _paste(target: Image.Image, image: Image.Image, placement: Placement) -> None:
    width = max(1, round(placement.width))
    height = max(1, round(placement.height))
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    if image.size != (width, height):
        image = image.resize((width, height), Image.Resampling.BILINEAR)
    position = (round(placement.x), round(placement.y))
    if image.mode == "RGBA":
        target.paste(image, position, image)
    else:
        target.paste(image, position)


class FrameCanvas:
    """A fixed-size RGB drawing surface.

    Example:
        canvas = FrameCanvas(1280, 720)
        canvas.draw_cover(frame)
        png = canvas.to_bytes("png")
    """

    def __init__(self, width: int = 1280, height: int = 720, background=(0, 0, 0)):
        """
        :param width: Width in device pixels
        :param height: Height in device pixels
        :param background: RGB color used when clearing
        """
        self.background = tuple(background)
        self._image = Image.new("RGB", (max(0, width), max(0, height)), self.background)
        self.draw_count = 0
        "Number of images drawn since creation (for diagnostics)"

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def resize(self, width: int, height: int) -> None:
        """Set new pixel dimensions. Clears the canvas."""
        self._image = Image.new("RGB", (max(0, width), max(0, height)), self.background)

    def clear(self) -> None:
        """Fill the canvas with the background color."""
        self._image.paste(self.background, (0, 0, self.width, self.height))

    def draw_image(self, image: Image.Image, placement: Placement) -> None:
        """Draw an image scaled and positioned according to ``placement``."""
        if self.width == 0 or self.height == 0:
            return
        _paste(self._image, image, placement)
        self.draw_count += 1

    def draw_cover(self, image: Image.Image) -> Placement:
        """Draw an image aspect-filled and centered.

        :return: The placement used
        """
        placement = cover_placement(self.size, image.size)
        self.draw_image(image, placement)
        return placement

    def snapshot(self) -> Image.Image:
        """A copy of the current canvas content."""
        return self._image.copy()

    def to_bytes(self, filetype: str = "png", quality: int = 90) -> bytes:
        """Encode the canvas content.

        :param filetype: "png", "jpg"/"jpeg" or "webp"
        :param quality: Quality for lossy formats
        """
        filetype = filetype.lstrip(".").lower()
        if filetype == "jpg":
            filetype = "jpeg"
        output = io.BytesIO()
        if filetype == "png":
            self._image.save(output, format="PNG")
        else:
            self._image.save(output, format=filetype.upper(), quality=quality)
        return output.getvalue()

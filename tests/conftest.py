"""
Pytest fixtures for ScrollStag tests
"""

import asyncio
import io

import pytest
from PIL import Image

from scrollstag.exceptions import FrameFetchError
from scrollstag.sources import frame_url

SEQUENCE_URL = "https://cdn.example.org/hero/passport"
STATIC_URL = "https://cdn.example.org/hero/city-hall.webp"


def frame_color(index: int) -> tuple[int, int, int]:
    """Distinct solid color of test frame ``index``."""
    return (index * 4 % 256, 100, 200)


def make_frame(index: int = 0, size: tuple[int, int] = (16, 9)) -> Image.Image:
    return Image.new("RGB", size, frame_color(index))


def encode_png(image: Image.Image) -> bytes:
    output = io.BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()


class FakeFetcher:
    """In-memory fetcher.

    URLs found in ``images`` resolve to that image, all others fail. URLs in
    ``hanging`` never resolve, URLs with a gate wait until the gate is set.
    """

    def __init__(self, images: dict | None = None, hanging: set | None = None):
        self.images = dict(images or {})
        self.hanging = set(hanging or ())
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    def hold(self, url: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate

    async def __call__(self, url: str) -> Image.Image:
        self.calls.append(url)
        if url in self.hanging:
            await asyncio.Event().wait()
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        image = self.images.get(url)
        if image is None:
            raise FrameFetchError(url, "HTTP 404")
        return image


def sequence_images(base_url: str = SEQUENCE_URL, indices=range(60), size=(16, 9)) -> dict:
    """Images for the given frame indices of a sequence folder."""
    return {frame_url(base_url, i): make_frame(i, size) for i in indices}


async def settle(rounds: int = 5) -> None:
    """Let pending tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()

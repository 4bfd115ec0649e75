"""Shared fixtures: in-memory test images."""

from __future__ import annotations

import io
from collections.abc import Callable

import pytest
from PIL import Image

ImageFactory = Callable[..., bytes]


def encode_image(
    width: int,
    height: int,
    pil_format: str = "PNG",
    mode: str = "RGB",
    color: tuple[int, ...] | int = (200, 40, 40),
) -> bytes:
    """Return a solid-color image encoded with ``pil_format``."""
    buffer = io.BytesIO()
    with Image.new(mode, (width, height), color) as image:
        image.save(buffer, format=pil_format)
    return buffer.getvalue()


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as image:
        return image.size


@pytest.fixture()
def make_image() -> ImageFactory:
    """Factory fixture producing encoded test images."""
    return encode_image

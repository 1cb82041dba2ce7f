from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from avatar_pipeline.imaging.loader import LocalImageLoader
from avatar_pipeline.imaging.models import LocalImageHandle

ImageFactory = Callable[..., Path]


@pytest.fixture()
def make_image(tmp_path: Path) -> ImageFactory:
    """Write a solid-colour image to tmp_path and return its path."""

    def _make(
        name: str = "photo.jpg",
        size: tuple[int, int] = (64, 64),
        image_format: str = "JPEG",
        mode: str = "RGB",
        color: tuple[int, ...] = (200, 30, 30),
    ) -> Path:
        path = tmp_path / name
        Image.new(mode, size, color).save(path, format=image_format)
        return path

    return _make


@pytest.fixture()
def large_jpeg_path(make_image: ImageFactory) -> Path:
    """A 2000x2000 JPEG, well under the default byte ceiling."""
    return make_image("large.jpg", size=(2000, 2000))


@pytest.fixture()
def large_jpeg(large_jpeg_path: Path) -> LocalImageHandle:
    return LocalImageLoader().load(large_jpeg_path)


@pytest.fixture()
def rgba_png_path(make_image: ImageFactory) -> Path:
    return make_image(
        "transparent.png",
        size=(300, 150),
        image_format="PNG",
        mode="RGBA",
        color=(0, 120, 255, 128),
    )

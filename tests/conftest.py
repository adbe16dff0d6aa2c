"""Test configuration and fixtures for cl_image_resizer.

This module provides:
- Function-scoped fixtures (path provider and settings rooted in tmp_path)
- A factory for synthetic JPEG/PNG files, optionally carrying EXIF orientation
- Helpers converting files to data URIs and data URIs back to images
"""

import base64
from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from cl_image_resizer.common.path_provider import LocalPathProvider
from cl_image_resizer.config import ResizerSettings

ORIENTATION_TAG = 0x0112

ImageFactory = Callable[..., Path]


# ============================================================================
# Function-Scoped Fixtures
# ============================================================================


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    return tmp_path / "home"


@pytest.fixture
def path_provider(home_dir: Path) -> LocalPathProvider:
    """LocalPathProvider isolated inside the test's tmp directory."""
    return LocalPathProvider(home_dir)


@pytest.fixture
def settings(home_dir: Path) -> ResizerSettings:
    return ResizerSettings(home_dir=home_dir, max_workers=2)


@pytest.fixture
def make_image(tmp_path: Path) -> ImageFactory:
    """Factory generating a synthetic image file using PIL.

    The image is a grid on a solid background so that resampling works on
    real edges. An EXIF orientation tag is embedded when requested.
    """

    def _make(
        name: str = "synthetic.jpg",
        width: int = 400,
        height: int = 300,
        orientation: int | None = None,
        fmt: str = "JPEG",
        mode: str = "RGB",
    ) -> Path:
        output_path = tmp_path / name

        img = Image.new("RGB", (width, height), color=(73, 109, 137))
        draw = ImageDraw.Draw(img)
        for i in range(0, width, 50):
            draw.line([(i, 0), (i, height)], fill=(255, 255, 255), width=2)
        for i in range(0, height, 50):
            draw.line([(0, i), (width, i)], fill=(255, 255, 255), width=2)
        # Mark the top-left corner so rotations are observable
        draw.rectangle([0, 0, width // 4, height // 4], fill=(255, 0, 0))

        if mode != "RGB":
            img = img.convert(mode)

        save_kwargs: dict[str, object] = {}
        if orientation is not None:
            exif = Image.Exif()
            exif[ORIENTATION_TAG] = orientation
            save_kwargs["exif"] = exif.tobytes()
        if fmt == "JPEG":
            save_kwargs["quality"] = 90

        img.save(output_path, format=fmt, **save_kwargs)
        return output_path

    return _make


@pytest.fixture
def landscape_jpeg(make_image: ImageFactory) -> Path:
    """1600x1200 JPEG without EXIF orientation."""
    return make_image("landscape.jpg", width=1600, height=1200)


@pytest.fixture
def rotated_jpeg(make_image: ImageFactory) -> Path:
    """400x200 JPEG tagged with orientation 6 (rotate 90 degrees clockwise)."""
    return make_image("rotated.jpg", width=400, height=200, orientation=6)


@pytest.fixture
def to_data_uri() -> Callable[[Path], str]:
    """Encode an image file as a data URI."""

    def _encode(path: Path, mime: str = "image/jpeg") -> str:
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        return f"data:{mime};base64,{encoded}"

    return _encode


@pytest.fixture
def from_data_uri() -> Callable[[str], Image.Image]:
    """Decode a data URI back into a loaded PIL image."""

    def _decode(data_uri: str) -> Image.Image:
        payload = data_uri.split(",", 1)[1]
        img = Image.open(BytesIO(base64.b64decode(payload)))
        img.load()
        return img

    return _decode


@pytest.fixture
def read_orientation() -> Callable[[Path], object]:
    """Read the raw EXIF orientation tag of a file."""

    def _read(path: Path) -> object:
        with Image.open(path) as img:
            return img.getexif().get(ORIENTATION_TAG)

    return _read

"""EXIF orientation lookup and pixel rotation."""

import logging
from io import BytesIO
from typing import Final

from PIL import Image

from ..common.errors import ResizeError
from ..common.path_provider import PathProvider
from ..common.schemas import FileUriSource, InlineBase64Source, RotationAngle
from .decoding import decode_base64_payload

logger = logging.getLogger(__name__)

ORIENTATION_TAG: Final[int] = 0x0112

ORIENTATION_NORMAL: Final[int] = 1
ORIENTATION_ROTATE_180: Final[int] = 3
ORIENTATION_ROTATE_90: Final[int] = 6
ORIENTATION_ROTATE_270: Final[int] = 8

_ROTATIONS: Final[dict[int, RotationAngle]] = {
    ORIENTATION_ROTATE_90: RotationAngle.CW_90,
    ORIENTATION_ROTATE_180: RotationAngle.CW_180,
    ORIENTATION_ROTATE_270: RotationAngle.CW_270,
}

# Pillow's ROTATE_* transposes turn counter-clockwise
_TRANSPOSE_FOR_ANGLE: Final[dict[RotationAngle, Image.Transpose]] = {
    RotationAngle.CW_90: Image.Transpose.ROTATE_270,
    RotationAngle.CW_180: Image.Transpose.ROTATE_180,
    RotationAngle.CW_270: Image.Transpose.ROTATE_90,
}


def rotation_for_orientation(code: int | None) -> RotationAngle:
    """Map an EXIF orientation code to a clockwise rotation."""
    if code is None:
        return RotationAngle.NONE
    return _ROTATIONS.get(code, RotationAngle.NONE)


def orientation_of_image(image: Image.Image) -> int | None:
    """Orientation tag of an opened image, None when absent."""
    value = image.getexif().get(ORIENTATION_TAG)
    return value if isinstance(value, int) else None


def read_orientation_code(
    source: FileUriSource | InlineBase64Source,
    path_provider: PathProvider,
) -> int | None:
    """
    Read the EXIF orientation tag of a source image.

    Best effort: unreadable sources and missing tags return None.
    """
    try:
        if isinstance(source, FileUriSource):
            path = path_provider.resolve_source(source.uri)
            with Image.open(path) as img:
                return orientation_of_image(img)

        data = decode_base64_payload(source.payload)
        with Image.open(BytesIO(data)) as img:
            return orientation_of_image(img)

    except (OSError, ValueError, ResizeError) as exc:
        logger.debug(f"Could not read EXIF orientation: {exc}")
        return None


def rotation_for(
    source: FileUriSource | InlineBase64Source,
    path_provider: PathProvider,
) -> RotationAngle:
    """Clockwise rotation that displays the source upright."""
    return rotation_for_orientation(read_orientation_code(source, path_provider))


def rotate_image(image: Image.Image, angle: RotationAngle) -> Image.Image:
    """Rotate an image clockwise by a right angle. 0 degrees is a no-op."""
    if angle == RotationAngle.NONE:
        return image
    return image.transpose(_TRANSPOSE_FOR_ANGLE[angle])

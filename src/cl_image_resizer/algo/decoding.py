"""Source decoding: bounds-only probe, sample-size decode and inline base64 decode."""

import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Final

from PIL import Image, UnidentifiedImageError

from ..common.errors import DecodeError, ImageIOError

logger = logging.getLogger(__name__)

# 16-bit integer modes Image.reduce does not accept
_UNREDUCIBLE_MODES: Final[frozenset[str]] = frozenset({"I;16", "I;16L", "I;16B", "I;16N"})


def decode_base64_payload(payload: str) -> bytes:
    """
    Decode a base64 payload, tolerating missing padding and line breaks.

    Raises:
        DecodeError: If the payload is not valid base64 or is empty
    """
    compact = "".join(payload.split())
    compact += "=" * (-len(compact) % 4)

    try:
        data = base64.b64decode(compact)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 payload: {exc}") from exc

    if not data:
        raise DecodeError("Empty base64 payload")
    return data


def open_image_file(path: Path) -> Image.Image:
    """
    Open an image lazily. Only the header is read, so ``size`` is available
    without materializing pixel data.

    Raises:
        ImageIOError: If the file cannot be read
        DecodeError: If the file is not a recognizable image
    """
    try:
        return Image.open(path)
    except UnidentifiedImageError as exc:
        raise DecodeError(f"Unsupported or corrupt image: {path}") from exc
    except OSError as exc:
        raise ImageIOError(f"Cannot read source image {path}: {exc}") from exc


def decode_image_bytes(data: bytes) -> Image.Image:
    """
    Fully decode in-memory image bytes.

    Raises:
        DecodeError: If the bytes cannot be turned into pixels
    """
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (OSError, ValueError) as exc:
        raise DecodeError(f"Cannot decode inline image: {exc}") from exc

    ensure_pixels(image)
    return image


def decode_sampled(image: Image.Image, sample_size: int) -> Image.Image:
    """
    Decode a lazily opened image at roughly ``1/sample_size`` of its native size.

    JPEG sources use the decoder's DCT scaling (1/2, 1/4, 1/8) so the full
    resolution bitmap is never built. Any factor the decoder could not apply
    is finished with a box reduction.

    Raises:
        DecodeError: If decoding fails or yields an empty bitmap
    """
    native_width, native_height = image.size

    try:
        if sample_size > 1:
            requested = (
                max(1, native_width // sample_size),
                max(1, native_height // sample_size),
            )
            _ = image.draft(None, requested)

        image.load()

        achieved = max(1, round(native_width / image.size[0]))
        remaining = sample_size // achieved
        if remaining > 1:
            logger.debug(f"Reducing decoded image by remaining factor {remaining}")
            if image.mode in _UNREDUCIBLE_MODES:
                image = image.convert("I")
            image = image.reduce(remaining)

    except (OSError, ValueError) as exc:
        raise DecodeError(f"Cannot decode source image: {exc}") from exc

    ensure_pixels(image)
    return image


def ensure_pixels(image: Image.Image | None) -> Image.Image:
    """Reject missing or zero-sized bitmaps."""
    if image is None or image.size[0] <= 0 or image.size[1] <= 0:
        raise DecodeError("Decoded image is empty")
    return image

"""Output writers: JPEG data URI and JPEG file with EXIF orientation copy."""

import base64
import logging
import os
import time
from io import BytesIO
from pathlib import Path
from typing import IO, Final

import piexif
from PIL import Image

from ..common.errors import SaveError
from ..common.path_provider import PathProvider, strip_file_scheme

logger = logging.getLogger(__name__)

DATA_URI_PREFIX: Final[str] = "data:image/jpeg;base64,"

# Modes a baseline JPEG can be written from without conversion
_JPEG_MODES: Final[frozenset[str]] = frozenset({"RGB", "L", "CMYK"})


def _jpeg_ready(image: Image.Image) -> Image.Image:
    if image.mode in _JPEG_MODES:
        return image
    return image.convert("RGB")


def write_jpeg(image: Image.Image, stream: IO[bytes], quality: int) -> None:
    _jpeg_ready(image).save(stream, format="JPEG", quality=quality)


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    """JPEG-compress an image in memory."""
    buffer = BytesIO()
    write_jpeg(image, buffer, quality)
    return buffer.getvalue()


def encode_data_uri(image: Image.Image, quality: int) -> str:
    """
    Encode an image as a JPEG data URI.

    Returns:
        ``data:image/jpeg;base64,`` followed by the unwrapped base64 text
    """
    encoded = base64.b64encode(encode_jpeg(image, quality)).decode("ascii")
    return DATA_URI_PREFIX + encoded


def resolve_output_folder(folder_name: str | None, path_provider: PathProvider) -> Path:
    """
    Resolve and create the destination folder.

    - None: managed temp directory
    - Contains a path separator: literal path (file:// prefix stripped)
    - Otherwise: app-private named directory

    Raises:
        SaveError: If the folder cannot be created
    """
    try:
        if folder_name is None:
            folder = path_provider.temp_directory()
        elif "/" in folder_name or os.sep in folder_name:
            folder = Path(strip_file_scheme(folder_name))
        else:
            folder = path_provider.private_directory(folder_name)

        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SaveError(f"Cannot create output folder {folder_name!r}: {exc}") from exc

    if not folder.is_dir():
        raise SaveError(f"Output folder is not a directory: {folder}")
    return folder


def synthesize_file_name() -> str:
    """Timestamp based file name, in epoch milliseconds."""
    return f"{time.time_ns() // 1_000_000}.jpg"


def copy_orientation(orientation: int | None, destination: str | Path) -> bool:
    """
    Write an EXIF orientation tag into an existing JPEG without re-encoding it.

    Returns:
        True if the tag was written. Failures are logged, never raised.
    """
    if orientation is None:
        logger.debug("Source has no orientation tag, nothing to copy")
        return False

    try:
        exif_dict = piexif.load(str(destination))
        exif_dict["0th"][piexif.ImageIFD.Orientation] = orientation
        # Pillow does not write an EXIF thumbnail; drop any stale reference
        exif_dict["thumbnail"] = None
        piexif.insert(piexif.dump(exif_dict), str(destination))
        return True
    except Exception as exc:
        logger.warning(f"Failed to copy EXIF orientation to {destination}: {exc}")
        return False


def save_jpeg(
    image: Image.Image,
    *,
    quality: int,
    path_provider: PathProvider,
    folder_name: str | None = None,
    file_name: str | None = None,
    source_orientation: int | None = None,
    copy_source_orientation: bool = False,
) -> str:
    """
    Persist an image as a JPEG file.

    Args:
        image: Final pixels
        quality: JPEG quality 0..100
        path_provider: Directory policy
        folder_name: Requested folder (see resolve_output_folder)
        file_name: Requested file name (None = timestamp based)
        source_orientation: EXIF orientation of the original source
        copy_source_orientation: Copy ``source_orientation`` onto the new file

    Returns:
        file:// URI of the written file

    Raises:
        SaveError: If the folder or file cannot be written
    """
    folder = resolve_output_folder(folder_name, path_provider)
    destination = folder / (file_name or synthesize_file_name())

    try:
        destination.unlink(missing_ok=True)
        with open(destination, "wb") as out:
            write_jpeg(image, out, quality)
            out.flush()
    except OSError as exc:
        raise SaveError(f"Cannot write {destination}: {exc}") from exc

    if copy_source_orientation:
        _ = copy_orientation(source_orientation, destination)

    return destination.resolve().as_uri()

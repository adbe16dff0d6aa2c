"""Unit tests for the data URI encoder and JPEG file writer."""

import re
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

import pytest
from PIL import Image

from cl_image_resizer.algo.output import (
    DATA_URI_PREFIX,
    copy_orientation,
    encode_data_uri,
    encode_jpeg,
    resolve_output_folder,
    save_jpeg,
    synthesize_file_name,
)
from cl_image_resizer.common.errors import SaveError
from cl_image_resizer.common.path_provider import LocalPathProvider


def _uri_to_path(uri: str) -> Path:
    return Path(urlparse(uri).path)


# ============================================================================
# Data URI
# ============================================================================


def test_encode_data_uri_prefix_and_no_wrapping():
    data_uri = encode_data_uri(Image.new("RGB", (64, 48), color=(10, 20, 30)), 85)

    assert data_uri.startswith(DATA_URI_PREFIX)
    assert DATA_URI_PREFIX == "data:image/jpeg;base64,"
    assert "\n" not in data_uri


def test_encode_data_uri_roundtrip_dimensions(from_data_uri: Callable[[str], Image.Image]):
    img = Image.new("RGB", (123, 45))

    decoded = from_data_uri(encode_data_uri(img, 90))

    assert decoded.format == "JPEG"
    assert decoded.size == (123, 45)


def test_encode_jpeg_converts_alpha():
    jpeg = encode_jpeg(Image.new("RGBA", (10, 10), color=(255, 0, 0, 128)), 85)
    assert jpeg[:2] == b"\xff\xd8"


def test_encode_jpeg_quality_affects_size():
    img = Image.effect_noise((128, 128), 64).convert("RGB")
    assert len(encode_jpeg(img, 95)) > len(encode_jpeg(img, 20))


# ============================================================================
# Folder resolution
# ============================================================================


def test_no_folder_uses_managed_temp_directory(path_provider: LocalPathProvider):
    folder = resolve_output_folder(None, path_provider)

    assert folder == path_provider.temp_directory()
    assert folder.is_dir()
    assert folder.name == "upload-dir"


def test_folder_with_separator_is_literal(tmp_path: Path, path_provider: LocalPathProvider):
    target = tmp_path / "out" / "nested"

    assert resolve_output_folder(str(target), path_provider) == target
    assert target.is_dir()


def test_folder_file_uri_prefix_stripped(tmp_path: Path, path_provider: LocalPathProvider):
    target = tmp_path / "from_uri"

    assert resolve_output_folder(f"file://{target}", path_provider) == target
    assert target.is_dir()


def test_bare_folder_name_is_private_directory(path_provider: LocalPathProvider):
    folder = resolve_output_folder("thumbs", path_provider)

    assert folder == path_provider.home_dir / "app_thumbs"
    assert folder.is_dir()


def test_uncreatable_folder_raises_save_error(tmp_path: Path, path_provider: LocalPathProvider):
    blocker = tmp_path / "blocker"
    _ = blocker.write_text("a file, not a folder")

    with pytest.raises(SaveError):
        _ = resolve_output_folder(str(blocker / "sub"), path_provider)


def test_synthesized_file_name_is_timestamp():
    assert re.fullmatch(r"\d{13,}\.jpg", synthesize_file_name())


# ============================================================================
# File writing
# ============================================================================


def test_save_jpeg_writes_named_file(tmp_path: Path, path_provider: LocalPathProvider):
    uri = save_jpeg(
        Image.new("RGB", (30, 20)),
        quality=80,
        path_provider=path_provider,
        folder_name=str(tmp_path / "out"),
        file_name="result.jpg",
    )

    path = _uri_to_path(uri)
    assert uri.startswith("file://")
    assert path == (tmp_path / "out" / "result.jpg").resolve()
    with Image.open(path) as img:
        assert img.format == "JPEG"
        assert img.size == (30, 20)


def test_save_jpeg_overwrites_existing(tmp_path: Path, path_provider: LocalPathProvider):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    _ = (out_dir / "result.jpg").write_bytes(b"stale")

    uri = save_jpeg(
        Image.new("RGB", (16, 16)),
        quality=80,
        path_provider=path_provider,
        folder_name=str(out_dir),
        file_name="result.jpg",
    )

    with Image.open(_uri_to_path(uri)) as img:
        assert img.size == (16, 16)


def test_save_jpeg_unwritable_destination(tmp_path: Path, path_provider: LocalPathProvider):
    out_dir = tmp_path / "out"
    (out_dir / "result.jpg").mkdir(parents=True)

    with pytest.raises(SaveError):
        _ = save_jpeg(
            Image.new("RGB", (16, 16)),
            quality=80,
            path_provider=path_provider,
            folder_name=str(out_dir),
            file_name="result.jpg",
        )


def test_save_jpeg_copies_orientation(
    tmp_path: Path,
    path_provider: LocalPathProvider,
    read_orientation: Callable[[Path], object],
):
    uri = save_jpeg(
        Image.new("RGB", (16, 8)),
        quality=80,
        path_provider=path_provider,
        folder_name=str(tmp_path),
        file_name="tagged.jpg",
        source_orientation=8,
        copy_source_orientation=True,
    )

    path = _uri_to_path(uri)
    assert read_orientation(path) == 8
    # Metadata copy never touches the pixels
    with Image.open(path) as img:
        assert img.size == (16, 8)


def test_save_jpeg_skips_orientation_copy_when_disabled(
    tmp_path: Path,
    path_provider: LocalPathProvider,
    read_orientation: Callable[[Path], object],
):
    uri = save_jpeg(
        Image.new("RGB", (16, 8)),
        quality=80,
        path_provider=path_provider,
        folder_name=str(tmp_path),
        file_name="plain.jpg",
        source_orientation=6,
        copy_source_orientation=False,
    )

    assert read_orientation(_uri_to_path(uri)) is None


def test_copy_orientation_without_source_tag(tmp_path: Path):
    dest = tmp_path / "plain.jpg"
    Image.new("RGB", (8, 8)).save(dest, format="JPEG")

    assert copy_orientation(None, dest) is False


def test_copy_orientation_failure_is_not_raised(tmp_path: Path):
    dest = tmp_path / "not_a_jpeg.jpg"
    _ = dest.write_text("plain text")

    assert copy_orientation(6, dest) is False

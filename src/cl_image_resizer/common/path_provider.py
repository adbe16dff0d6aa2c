"""
PathProvider Protocol - filesystem policy used by the resize pipeline.

Design goals:
- Keep temp/cache directory selection out of the core pipeline
- Resolve source URIs to local paths in one place
- Allow tests to point the pipeline at a tmp directory
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING, Final, Protocol, override, runtime_checkable
from urllib.parse import unquote, urlparse

from .errors import ImageIOError

if TYPE_CHECKING:
    from ..config import ResizerSettings

FILE_SCHEME: Final[str] = "file://"


def strip_file_scheme(value: str) -> str:
    """Remove a leading file:// scheme, leaving plain paths untouched."""
    return value.replace(FILE_SCHEME, "", 1) if value.startswith(FILE_SCHEME) else value


@runtime_checkable
class PathProvider(Protocol):
    """
    Protocol for the directory and URI policy of the host environment.

    Implementations own:
    - the managed temp/cache directory
    - app-private named directories
    - URI to local path resolution
    """

    def temp_directory(self) -> Path:
        """Return the managed temp directory used when no folder is requested."""
        ...

    def private_directory(self, name: str) -> Path:
        """Return the app-private directory for a bare folder name."""
        ...

    def resolve_source(self, uri: str) -> Path:
        """
        Resolve a source URI to a local path.

        Raises:
            ImageIOError: If the URI cannot be mapped to a local file.
        """
        ...


class LocalPathProvider(PathProvider):
    """
    Local filesystem implementation of PathProvider.

    Layout:
        home_dir/
            cache/<upload_dir_name>/
            app_<name>/
    """

    def __init__(
        self,
        home_dir: str | PathLike[str],
        upload_dir_name: str = "upload-dir",
    ):
        self._home_dir: Path = Path(home_dir).expanduser().resolve()
        self._upload_dir_name: str = upload_dir_name

    @classmethod
    def from_settings(cls, settings: ResizerSettings) -> LocalPathProvider:
        return cls(settings.home_dir, upload_dir_name=settings.upload_dir_name)

    @property
    def home_dir(self) -> Path:
        return self._home_dir

    @override
    def temp_directory(self) -> Path:
        path = self._home_dir / "cache" / self._upload_dir_name
        path.mkdir(parents=True, exist_ok=True)
        return path

    @override
    def private_directory(self, name: str) -> Path:
        return self._home_dir / f"app_{name}"

    @override
    def resolve_source(self, uri: str) -> Path:
        if uri.startswith(FILE_SCHEME):
            return Path(unquote(urlparse(uri).path))

        scheme = urlparse(uri).scheme
        # Single letter schemes are Windows drive letters
        if scheme and len(scheme) > 1:
            raise ImageIOError(f"Unsupported source URI scheme: {scheme}")

        return Path(uri).expanduser()

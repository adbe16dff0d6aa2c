"""Pydantic schemas for resize requests, geometry and outcomes."""

from collections.abc import Mapping
from enum import IntEnum, StrEnum
from typing import Annotated, ClassVar, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    ValidationError,
)

from .errors import ErrorKind, MalformedRequestError

DATA_URI_SCHEME = "data:"

# ─────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────


class Dimensions(BaseModel):
    """Width/height pair used as a decode or output size."""

    width: PositiveInt
    height: PositiveInt

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    def as_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)


class RotationAngle(IntEnum):
    """Clockwise rotation in degrees."""

    NONE = 0
    CW_90 = 90
    CW_180 = 180
    CW_270 = 270


# ─────────────────────────────────────────────────────────────
# Source references
# ─────────────────────────────────────────────────────────────


class FileUriSource(BaseModel):
    """Image backed by a filesystem path or file:// URI."""

    kind: Literal["file"] = "file"
    uri: str

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class InlineBase64Source(BaseModel):
    """Image embedded in the request as a base64 data URI."""

    kind: Literal["base64"] = "base64"
    data_uri: str

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def payload(self) -> str:
        """Encoded bytes following the first comma of the data URI."""
        return self.data_uri[self.data_uri.find(",") + 1 :]


SourceRef = Annotated[FileUriSource | InlineBase64Source, Field(discriminator="kind")]


def parse_source(raw: str) -> FileUriSource | InlineBase64Source:
    """Tag a raw uri string as inline or file-backed by its scheme prefix."""
    if raw.startswith(DATA_URI_SCHEME):
        return InlineBase64Source(data_uri=raw)
    return FileUriSource(uri=raw)


# ─────────────────────────────────────────────────────────────
# Request
# ─────────────────────────────────────────────────────────────


class OutputMode(StrEnum):
    FILE = "file"
    BASE64 = "base64"


class ResizeRequest(BaseModel):
    """Parameters of a single resize invocation.

    Field aliases follow the wire names sent by the host, so a request can be
    validated straight from the inbound argument object.

    Attributes:
        uri: File path, file:// URI or data URI of the source image
        folder_name: Destination folder (None = managed cache directory)
        file_name: Destination file name (None = timestamp based)
        quality: JPEG quality 0..100
        width: Requested width, values <= 0 mean unspecified
        height: Requested height, values <= 0 mean unspecified
        as_base64: Return a data URI instead of writing a file
        fit: Ratio-fit scaling for inline sources
        fix_rotation: Rotate pixels from EXIF orientation for data URI output
    """

    uri: str = Field(..., min_length=1, description="Source image URI or data URI")
    folder_name: str | None = Field(default=None, alias="folderName")
    file_name: str | None = Field(default=None, alias="fileName")
    quality: int = Field(default=85, ge=0, le=100, description="JPEG quality")
    width: int = Field(default=-1, description="Requested width, <= 0 for unspecified")
    height: int = Field(default=-1, description="Requested height, <= 0 for unspecified")
    as_base64: bool = Field(default=False, alias="base64")
    fit: bool = False
    fix_rotation: bool = Field(default=False, alias="fixRotation")

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def from_arguments(
        cls, arguments: object, default_quality: int | None = None
    ) -> "ResizeRequest":
        """Validate the inbound argument object.

        Raises:
            MalformedRequestError: If the argument is not a mapping or fails validation
        """
        if not isinstance(arguments, Mapping):
            raise MalformedRequestError("Resize argument must be an object")

        data = dict(arguments)
        if default_quality is not None and "quality" not in data:
            data["quality"] = default_quality

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedRequestError(f"Invalid resize request: {exc}") from exc

    @property
    def requested_width(self) -> int | None:
        return self.width if self.width > 0 else None

    @property
    def requested_height(self) -> int | None:
        return self.height if self.height > 0 else None

    @property
    def source(self) -> FileUriSource | InlineBase64Source:
        return parse_source(self.uri)

    @property
    def is_file_uri(self) -> bool:
        return isinstance(self.source, FileUriSource)

    @property
    def output_mode(self) -> OutputMode:
        return OutputMode.BASE64 if self.as_base64 else OutputMode.FILE


# ─────────────────────────────────────────────────────────────
# Outcome
# ─────────────────────────────────────────────────────────────


class ResizeOutcome(BaseModel):
    """Terminal value handed back to the caller."""

    status: Literal["ok", "error"]
    result: str | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def ok(cls, result: str) -> "ResizeOutcome":
        return cls(status="ok", result=result)

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "ResizeOutcome":
        return cls(status="error", error_kind=kind, error=message)

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

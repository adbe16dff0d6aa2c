"""cl_image_resizer - Memory-bounded image resizing to JPEG files or data URIs."""

from .algo.geometry import calculate_sample_size, resolve_base64_dimensions, resolve_dimensions
from .algo.orientation import rotate_image, rotation_for, rotation_for_orientation
from .algo.output import encode_data_uri, save_jpeg
from .algo.pipeline import PipelineState, ResizePipeline, resize_image
from .common.errors import (
    DecodeError,
    ErrorKind,
    ImageIOError,
    MalformedRequestError,
    ResizeError,
    SaveError,
)
from .common.path_provider import LocalPathProvider, PathProvider
from .common.schemas import (
    Dimensions,
    FileUriSource,
    InlineBase64Source,
    OutputMode,
    ResizeOutcome,
    ResizeRequest,
    RotationAngle,
    SourceRef,
    parse_source,
)
from .config import ResizerSettings
from .resizer import ImageResizer

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "Dimensions",
    "ErrorKind",
    "FileUriSource",
    "ImageIOError",
    "ImageResizer",
    "InlineBase64Source",
    "LocalPathProvider",
    "MalformedRequestError",
    "OutputMode",
    "PathProvider",
    "PipelineState",
    "ResizeError",
    "ResizeOutcome",
    "ResizePipeline",
    "ResizeRequest",
    "ResizerSettings",
    "RotationAngle",
    "SaveError",
    "SourceRef",
    "__version__",
    "calculate_sample_size",
    "encode_data_uri",
    "parse_source",
    "resize_image",
    "resolve_base64_dimensions",
    "resolve_dimensions",
    "rotate_image",
    "rotation_for",
    "rotation_for_orientation",
    "save_jpeg",
]

"""Common module - errors, schemas, and filesystem protocols."""

from .errors import ErrorKind, ResizeError
from .path_provider import LocalPathProvider, PathProvider
from .schemas import Dimensions, ResizeOutcome, ResizeRequest

__all__ = [
    "Dimensions",
    "ErrorKind",
    "LocalPathProvider",
    "PathProvider",
    "ResizeError",
    "ResizeOutcome",
    "ResizeRequest",
]

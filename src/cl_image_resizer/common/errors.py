"""Error kinds and exceptions raised by the resize pipeline."""

from enum import StrEnum


class ErrorKind(StrEnum):
    MALFORMED_REQUEST = "malformed_request"
    DECODE_FAILURE = "decode_failure"
    IO_FAILURE = "io_failure"
    SAVE_FAILURE = "save_failure"


class ResizeError(Exception):
    """Base class for pipeline-fatal errors.

    Each subclass carries the ErrorKind reported back to the caller.
    """

    kind: ErrorKind = ErrorKind.DECODE_FAILURE

    def __init__(self, message: str):
        self.message: str = message
        super().__init__(message)


class MalformedRequestError(ResizeError):
    kind: ErrorKind = ErrorKind.MALFORMED_REQUEST


class DecodeError(ResizeError):
    kind: ErrorKind = ErrorKind.DECODE_FAILURE


class ImageIOError(ResizeError):
    kind: ErrorKind = ErrorKind.IO_FAILURE


class SaveError(ResizeError):
    kind: ErrorKind = ErrorKind.SAVE_FAILURE

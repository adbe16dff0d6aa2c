"""Resize pipeline as an explicit state machine.

States run in order::

    PROBING -> DECODING -> SCALING -> [ROTATING] -> ENCODING -> DONE

Any stage may move to FAILED instead. Each handler takes the shared context
and returns the next state, so single stages can be driven directly in tests.
"""

import logging
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

from PIL import Image

from ..common.errors import ErrorKind, ImageIOError, ResizeError
from ..common.path_provider import PathProvider
from ..common.schemas import (
    Dimensions,
    FileUriSource,
    InlineBase64Source,
    OutputMode,
    ResizeOutcome,
    ResizeRequest,
)
from .decoding import (
    decode_base64_payload,
    decode_image_bytes,
    decode_sampled,
    ensure_pixels,
    open_image_file,
)
from .geometry import calculate_sample_size, resolve_base64_dimensions, resolve_dimensions
from .orientation import read_orientation_code, rotate_image, rotation_for
from .output import encode_data_uri, save_jpeg

logger = logging.getLogger(__name__)


class PipelineState(StrEnum):
    PROBING = "probing"
    DECODING = "decoding"
    SCALING = "scaling"
    ROTATING = "rotating"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES: Final[frozenset[PipelineState]] = frozenset(
    {PipelineState.DONE, PipelineState.FAILED}
)


@dataclass
class PipelineContext:
    """Mutable per-run state. Owned by a single pipeline invocation."""

    request: ResizeRequest
    path_provider: PathProvider
    resources: ExitStack = field(default_factory=ExitStack)

    source: FileUriSource | InlineBase64Source | None = None
    image: Image.Image | None = None
    native_size: tuple[int, int] | None = None
    target: Dimensions | None = None
    sample_size: int = 1

    result: str | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None
    history: list[PipelineState] = field(default_factory=list)

    def require_image(self) -> Image.Image:
        return ensure_pixels(self.image)


StateHandler = Callable[[PipelineContext], PipelineState]


# ─────────────────────────────────────────────────────────────
# Stage handlers
# ─────────────────────────────────────────────────────────────


def probe(ctx: PipelineContext) -> PipelineState:
    """Learn the native size. Inline sources are fully decoded here."""
    source = ctx.request.source
    ctx.source = source

    if isinstance(source, FileUriSource):
        path = ctx.path_provider.resolve_source(source.uri)
        if not path.is_file():
            raise ImageIOError(f"Source image not found: {path}")
        ctx.image = ctx.resources.enter_context(open_image_file(path))
    else:
        data = decode_base64_payload(source.payload)
        ctx.image = ctx.resources.enter_context(decode_image_bytes(data))

    ctx.native_size = ctx.require_image().size
    logger.debug(f"Probed {source.kind} source at {ctx.native_size[0]}x{ctx.native_size[1]}")
    return PipelineState.DECODING


def decode(ctx: PipelineContext) -> PipelineState:
    """Resolve the target geometry and decode at the matching sample size."""
    assert ctx.native_size is not None
    request = ctx.request
    source_width, source_height = ctx.native_size

    if isinstance(ctx.source, FileUriSource):
        ctx.target = resolve_dimensions(
            source_width,
            source_height,
            request.requested_width,
            request.requested_height,
        )
        ctx.sample_size = calculate_sample_size(
            source_width, source_height, ctx.target.width, ctx.target.height
        )
        ctx.image = decode_sampled(ctx.require_image(), ctx.sample_size)
    else:
        ctx.target = resolve_base64_dimensions(
            source_width,
            source_height,
            request.requested_width,
            request.requested_height,
            fit=request.fit,
        )
        ctx.sample_size = 1

    _ = ctx.require_image()
    return PipelineState.SCALING


def scale(ctx: PipelineContext) -> PipelineState:
    """Resample to the exact target size."""
    assert ctx.target is not None
    image = ctx.require_image()

    # Palette images would otherwise be resampled with nearest neighbour
    if image.mode in ("1", "P"):
        image = image.convert("RGBA" if "transparency" in image.info else "RGB")

    if image.size != ctx.target.as_tuple():
        image = image.resize(ctx.target.as_tuple(), Image.Resampling.LANCZOS)
    ctx.image = image

    request = ctx.request
    if request.output_mode == OutputMode.BASE64 and request.fix_rotation:
        return PipelineState.ROTATING
    return PipelineState.ENCODING


def rotate(ctx: PipelineContext) -> PipelineState:
    """Rotate pixels upright from the source's EXIF orientation."""
    assert ctx.source is not None
    angle = rotation_for(ctx.source, ctx.path_provider)

    ctx.image = rotate_image(ctx.require_image(), angle)
    logger.debug(f"Applied {int(angle)} degree rotation")
    return PipelineState.ENCODING


def encode(ctx: PipelineContext) -> PipelineState:
    """Produce the data URI or write the JPEG file."""
    request = ctx.request
    image = ctx.require_image()

    if request.output_mode == OutputMode.BASE64:
        ctx.result = encode_data_uri(image, request.quality)
        return PipelineState.DONE

    is_file_source = isinstance(ctx.source, FileUriSource)
    source_orientation = (
        read_orientation_code(ctx.source, ctx.path_provider)
        if is_file_source and ctx.source is not None
        else None
    )
    ctx.result = save_jpeg(
        image,
        quality=request.quality,
        path_provider=ctx.path_provider,
        folder_name=request.folder_name,
        file_name=request.file_name,
        source_orientation=source_orientation,
        copy_source_orientation=is_file_source,
    )
    return PipelineState.DONE


HANDLERS: Final[dict[PipelineState, StateHandler]] = {
    PipelineState.PROBING: probe,
    PipelineState.DECODING: decode,
    PipelineState.SCALING: scale,
    PipelineState.ROTATING: rotate,
    PipelineState.ENCODING: encode,
}


# ─────────────────────────────────────────────────────────────
# Runner
# ─────────────────────────────────────────────────────────────


class ResizePipeline:
    """Drives a PipelineContext through the handler table until a terminal state."""

    def __init__(
        self,
        request: ResizeRequest,
        path_provider: PathProvider,
        handlers: dict[PipelineState, StateHandler] | None = None,
    ):
        self.context: PipelineContext = PipelineContext(
            request=request, path_provider=path_provider
        )
        self.handlers: dict[PipelineState, StateHandler] = (
            handlers if handlers is not None else HANDLERS
        )
        self.state: PipelineState = PipelineState.PROBING

    def step(self) -> PipelineState:
        """Run the handler for the current state and transition."""
        ctx = self.context
        ctx.history.append(self.state)

        try:
            next_state = self.handlers[self.state](ctx)
        except ResizeError as exc:
            next_state = self._fail(exc.kind, exc.message)
        except Image.DecompressionBombError as exc:
            next_state = self._fail(ErrorKind.DECODE_FAILURE, str(exc))
        except FileNotFoundError as exc:
            next_state = self._fail(ErrorKind.IO_FAILURE, f"Source not found: {exc}")
        except (OSError, ValueError) as exc:
            kind = ErrorKind.IO_FAILURE if isinstance(exc, OSError) else ErrorKind.DECODE_FAILURE
            next_state = self._fail(kind, f"{self.state} failed: {exc}")

        self.state = next_state
        return next_state

    def _fail(self, kind: ErrorKind, message: str) -> PipelineState:
        logger.error(f"Resize failed while {self.state}: {message}")
        self.context.error_kind = kind
        self.context.error = message
        self.context.image = None
        return PipelineState.FAILED

    def run(self) -> ResizeOutcome:
        with self.context.resources:
            while self.state not in TERMINAL_STATES:
                _ = self.step()

        ctx = self.context
        ctx.history.append(self.state)
        ctx.image = None

        if self.state == PipelineState.DONE and ctx.result is not None:
            return ResizeOutcome.ok(ctx.result)

        return ResizeOutcome.failed(
            ctx.error_kind or ErrorKind.DECODE_FAILURE,
            ctx.error or "Resize produced no result",
        )


def resize_image(request: ResizeRequest, path_provider: PathProvider) -> ResizeOutcome:
    """
    Resize a single image.

    Framework-agnostic entry point: never raises for decode, I/O or save
    problems; they are reported through the returned outcome.

    Args:
        request: Validated resize request
        path_provider: Directory and URI policy

    Returns:
        ResizeOutcome with a file:// URI or data URI on success
    """
    return ResizePipeline(request, path_provider).run()


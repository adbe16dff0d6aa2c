"""Pure geometry computations: target size and decoder sample size.

All arithmetic on the URI path truncates the multiply-then-divide toward zero,
which is plain ``//`` for the positive values involved here.
"""

import math

from ..common.schemas import Dimensions


def _specified(value: int | None) -> int | None:
    return value if value is not None and value > 0 else None


def resolve_dimensions(
    source_width: int,
    source_height: int,
    requested_width: int | None = None,
    requested_height: int | None = None,
) -> Dimensions:
    """
    Compute the output size for a source, preserving its aspect ratio.

    Args:
        source_width: Native width in pixels
        source_height: Native height in pixels
        requested_width: Target width (None or <= 0 = unspecified)
        requested_height: Target height (None or <= 0 = unspecified)

    Returns:
        Largest box with the source aspect ratio that fits inside the
        requested bounds. With no bounds, the source size.
    """
    new_width = _specified(requested_width)
    new_height = _specified(requested_height)

    if new_width is None and new_height is None:
        width, height = source_width, source_height

    elif new_height is None:
        assert new_width is not None
        width = new_width
        height = (new_width * source_height) // source_width

    elif new_width is None:
        width = (new_height * source_width) // source_height
        height = new_height

    else:
        width, height = new_width, new_height
        # Cross-multiplied ratio comparison, exact for integers
        orig_vs_new = source_width * new_height - new_width * source_height

        if orig_vs_new > 0:
            height = (new_width * source_height) // source_width
        elif orig_vs_new < 0:
            width = (new_height * source_width) // source_height

    return Dimensions(width=max(1, width), height=max(1, height))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def resolve_base64_dimensions(
    source_width: int,
    source_height: int,
    requested_width: int | None = None,
    requested_height: int | None = None,
    fit: bool = False,
) -> Dimensions:
    """
    Compute the output size for an inline (data URI) source.

    Without ``fit`` the image is stretched to the requested box, falling back to
    the source size on unspecified sides. With ``fit`` both sides are scaled by
    the ratio of the driving side: width for landscape sources, height
    otherwise.
    """
    new_width = _specified(requested_width)
    new_height = _specified(requested_height)

    if not fit:
        width = new_width if new_width is not None else source_width
        height = new_height if new_height is not None else source_height
        return Dimensions(width=width, height=height)

    if source_width > source_height:
        ratio = new_width / source_width if new_width is not None else None
    else:
        ratio = new_height / source_height if new_height is not None else None

    if ratio is None:
        return resolve_dimensions(source_width, source_height, new_width, new_height)

    return Dimensions(
        width=max(1, _round_half_up(ratio * source_width)),
        height=max(1, _round_half_up(ratio * source_height)),
    )


def calculate_sample_size(
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
) -> int:
    """
    Coarse downsampling factor to request from the decoder.

    Picks the dimension that constrains scaling more tightly so the decoded
    bitmap stays at least as large as the target on that side. Never below 1.
    """
    # source_width / source_height > target_width / target_height
    if source_width * target_height > target_width * source_height:
        sample_size = source_width // target_width
    else:
        sample_size = source_height // target_height

    return max(1, sample_size)

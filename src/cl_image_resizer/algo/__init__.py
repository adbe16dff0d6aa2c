"""Image geometry, decoding, orientation and output algorithms."""

from .geometry import calculate_sample_size, resolve_base64_dimensions, resolve_dimensions
from .pipeline import resize_image

__all__ = [
    "calculate_sample_size",
    "resize_image",
    "resolve_base64_dimensions",
    "resolve_dimensions",
]

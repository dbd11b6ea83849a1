"""Scaling helpers shared by the working-size clamp and the exporter."""

import math

from PIL import Image

from ..models import MAX_WORKING_DIMENSION
from .buffer import PixelBuffer


def fit_within(
    width: float,
    height: float,
    max_dimension: int,
) -> "tuple[int, int]":
    """Uniformly shrink (width, height) so neither side exceeds max_dimension.

    Dimensions already inside the bound are only rounded. Results are
    always at least 1 and never above max_dimension.

    AIDEV-NOTE: Aspect ratio is preserved to within one pixel of rounding.
    """
    if width > max_dimension or height > max_dimension:
        ratio = min(max_dimension / width, max_dimension / height)
        width *= ratio
        height *= ratio
    return (
        max(1, min(max_dimension, int(round(width)))),
        max(1, min(max_dimension, int(round(height)))),
    )


def working_size(width: int, height: int, max_dimension: int = MAX_WORKING_DIMENSION) -> "tuple[int, int]":
    """Size an input is reduced to before rendering (floored, at least 1px)."""
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height
    # Multiply before dividing so the long side lands exactly on the cap
    return (
        max(1, math.floor(width * max_dimension / longest)),
        max(1, math.floor(height * max_dimension / longest)),
    )


def resize_buffer(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """High quality (Lanczos) resample to an exact size."""
    if (width, height) == buffer.size:
        return buffer
    resized = buffer.to_image().resize((width, height), Image.Resampling.LANCZOS)
    return PixelBuffer.from_image(resized)


def clamp_to_working_size(
    buffer: PixelBuffer, max_dimension: int = MAX_WORKING_DIMENSION
) -> PixelBuffer:
    """Shrink oversized inputs so the longer side is at most max_dimension.

    Bounds memory and compute for the whole pipeline. Smaller inputs are
    returned untouched.
    """
    width, height = working_size(buffer.width, buffer.height, max_dimension)
    return resize_buffer(buffer, width, height)

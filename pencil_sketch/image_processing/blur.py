"""Neighborhood blur used to soften the inverted layer before dodging.

AIDEV-NOTE: A Gaussian is approximated by three successive box blurs per
axis (running means via cumulative sums), so cost doesn't grow with the
radius. Borders replicate the edge pixel. The radius is treated as the
Gaussian standard deviation, the same meaning CSS gives blur(Npx).
"""

import math

import numpy as np

from .buffer import PixelBuffer

BOX_PASSES = 3


def box_sizes_for_gaussian(sigma: float, passes: int = BOX_PASSES) -> "list[int]":
    """Odd box widths whose repeated application approximates a Gaussian.

    Args:
        sigma: Target standard deviation in pixels
        passes: Number of box passes

    Returns:
        List of odd box widths, smallest first
    """
    if sigma <= 0:
        return [1] * passes

    ideal = math.sqrt(12.0 * sigma * sigma / passes + 1.0)
    lower = int(math.floor(ideal))
    if lower % 2 == 0:
        lower -= 1
    upper = lower + 2

    ideal_count = (
        12.0 * sigma * sigma
        - passes * lower * lower
        - 4.0 * passes * lower
        - 3.0 * passes
    ) / (-4.0 * lower - 4.0)
    count = max(0, min(passes, int(round(ideal_count))))

    return [lower if i < count else upper for i in range(passes)]


def _box_blur_axis(values: np.ndarray, width: int, axis: int) -> np.ndarray:
    """Running mean of odd `width` along one axis with replicated borders."""
    if width <= 1:
        return values

    half = width // 2
    pad = [(0, 0)] * values.ndim
    pad[axis] = (half + 1, half)
    padded = np.pad(values, pad, mode="edge")

    cumsum = np.cumsum(padded, axis=axis, dtype=np.float64)
    upper = np.take(cumsum, np.arange(width, cumsum.shape[axis]), axis=axis)
    lower = np.take(cumsum, np.arange(0, cumsum.shape[axis] - width), axis=axis)
    return (upper - lower) / width


def blur_array(values: np.ndarray, radius: float) -> np.ndarray:
    """Blur a float array over its first two axes.

    Args:
        values: Array of shape (h, w) or (h, w, channels)
        radius: Gaussian standard deviation in pixels

    Returns:
        Blurred float64 array of the same shape
    """
    result = np.asarray(values, dtype=np.float64)
    for width in box_sizes_for_gaussian(radius):
        result = _box_blur_axis(result, width, axis=1)
        result = _box_blur_axis(result, width, axis=0)
    return result


def blur(buffer: PixelBuffer, radius: int) -> PixelBuffer:
    """Smooth the color channels of a buffer. Alpha is kept.

    Args:
        buffer: Input buffer
        radius: Blur radius; rounded and floored at 1

    Returns:
        New blurred buffer
    """
    radius = max(1, int(round(radius)))
    rgb = buffer.rgb

    # Grayscale layers only need one plane blurred
    if np.array_equal(rgb[..., 0], rgb[..., 1]) and np.array_equal(rgb[..., 0], rgb[..., 2]):
        plane = blur_array(rgb[..., 0], radius)
        blurred = np.repeat(plane[..., np.newaxis], 3, axis=-1)
    else:
        blurred = blur_array(rgb, radius)

    return buffer.with_rgb(np.clip(np.rint(blurred), 0, 255))

"""Per-pixel tonal stages: grayscale, inversion, color dodge and tone remap.

AIDEV-NOTE: Every function here is a total function over a valid buffer.
Intermediate float math is clipped before it is written back as uint8.
"""

import numpy as np

from .buffer import PixelBuffer

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

# Contrast pivots around mid-gray
CONTRAST_PIVOT = 128.0


def luma(buffer: PixelBuffer) -> np.ndarray:
    """Rounded luma of every pixel as an (h, w) uint8 array."""
    values = buffer.rgb.astype(np.float64) @ LUMA_WEIGHTS
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def to_grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Desaturate by writing the luma into R, G and B. Alpha is kept."""
    gray = luma(buffer)
    return buffer.with_rgb(np.repeat(gray[..., np.newaxis], 3, axis=-1))


def invert(buffer: PixelBuffer) -> PixelBuffer:
    """Replace each color channel with 255 - value. Alpha is kept."""
    return buffer.with_rgb(255 - buffer.rgb)


def dodge_blend(gray: PixelBuffer, blurred: PixelBuffer) -> PixelBuffer:
    """Color-dodge the grayscale layer with the blurred inverted layer.

    result = min(255, floor(gray * 256 / (256 - blurred))), or 255 where
    the blurred value is already 255. The output is fully opaque.

    Args:
        gray: Grayscale buffer
        blurred: Blurred, inverted grayscale buffer of the same size

    Returns:
        The base sketch buffer
    """
    if gray.size != blurred.size:
        raise ValueError(
            f"Dodge layers differ in size: {gray.size} vs {blurred.size}"
        )

    base = gray.rgb.astype(np.int32)
    blend = blurred.rgb.astype(np.int32)

    # Denominator is at least 1 on the branch that uses it
    divisor = np.maximum(256 - blend, 1)
    dodged = np.minimum(255, (base * 256) // divisor)
    dodged = np.where(blend == 255, 255, dodged)

    out = np.empty(gray.samples.shape, dtype=np.uint8)
    out[..., :3] = dodged
    out[..., 3] = 255
    return PixelBuffer(gray.width, gray.height, out)


def contrast_factor(contrast: float) -> float:
    """Standard contrast correction factor, defined for contrast < 259."""
    contrast = min(float(contrast), 258.0)
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


def adjust_tone(buffer: PixelBuffer, contrast: int = 0, brightness: int = 0) -> PixelBuffer:
    """Apply contrast around mid-gray, then add brightness.

    Returns the input unchanged when both settings are zero.
    """
    if contrast == 0 and brightness == 0:
        return buffer

    factor = contrast_factor(contrast)
    values = buffer.rgb.astype(np.float64)
    values = factor * (values - CONTRAST_PIVOT) + CONTRAST_PIVOT + brightness
    return buffer.with_rgb(np.clip(np.rint(values), 0, 255))

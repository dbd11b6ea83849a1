"""Color sketch mode: let muted original colors bleed into light areas."""

import numpy as np

from .buffer import PixelBuffer

# Share of each original channel kept in the faded color; the rest comes
# from the average of the three channels.
FADE_CHANNEL_WEIGHT = 0.7
FADE_GRAY_WEIGHT = 0.3


def faded_colors(original: PixelBuffer) -> np.ndarray:
    """Desaturated version of the original colors as a float (h, w, 3) array."""
    rgb = original.rgb.astype(np.float64)
    mean = rgb.mean(axis=-1, keepdims=True)
    return rgb * FADE_CHANNEL_WEIGHT + mean * FADE_GRAY_WEIGHT


def blend_color(sketch: PixelBuffer, original: PixelBuffer, strength: int) -> PixelBuffer:
    """Mix faded original colors into the sketch.

    The weight of the color is strength/100 scaled by how bright the sketch
    already is at that pixel, so dark strokes stay close to monochrome.

    Args:
        sketch: Sketch buffer
        original: Color buffer the sketch was rendered from (same size)
        strength: Color strength, 0-100

    Returns:
        New buffer with colors blended in
    """
    if sketch.size != original.size:
        raise ValueError(
            f"Sketch {sketch.size} and original {original.size} differ in size"
        )

    color_factor = max(0.0, min(100.0, float(strength))) / 100.0
    if color_factor == 0.0:
        return sketch

    values = sketch.rgb.astype(np.float64)
    brightness = values.mean(axis=-1, keepdims=True) / 255.0
    weight = color_factor * brightness

    mixed = values * (1.0 - weight) + faded_colors(original) * weight
    # Half-up rounding
    return sketch.with_rgb(np.clip(np.floor(mixed + 0.5), 0, 255))

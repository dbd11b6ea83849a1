"""Sobel edge extraction and the edge-darkening pass.

AIDEV-NOTE: Only interior pixels get a gradient. The one-pixel border of
the magnitude map stays 0, so the sketch border is never darkened.
"""

import numpy as np

from .buffer import PixelBuffer

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.int32)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.int32)


def sobel_magnitude(gray: PixelBuffer) -> np.ndarray:
    """Gradient magnitude of a grayscale buffer.

    Args:
        gray: Grayscale buffer (R == G == B, the red channel is read)

    Returns:
        (h, w) uint8 array, min(255, sqrt(gx^2 + gy^2)), 0 on the border
    """
    height, width = gray.height, gray.width
    edges = np.zeros((height, width), dtype=np.uint8)
    if width < 3 or height < 3:
        return edges

    plane = gray.samples[..., 0].astype(np.int32)

    # Correlate with both kernels by summing shifted views of the plane
    gx = np.zeros((height - 2, width - 2), dtype=np.int32)
    gy = np.zeros_like(gx)
    for ky in range(3):
        for kx in range(3):
            window = plane[ky : ky + height - 2, kx : kx + width - 2]
            if SOBEL_X[ky, kx]:
                gx += SOBEL_X[ky, kx] * window
            if SOBEL_Y[ky, kx]:
                gy += SOBEL_Y[ky, kx] * window

    magnitude = np.minimum(255.0, np.hypot(gx, gy))
    edges[1:-1, 1:-1] = np.rint(magnitude).astype(np.uint8)
    return edges


def darken_edges(sketch: PixelBuffer, edges: np.ndarray, strength: int) -> PixelBuffer:
    """Subtract strength/100 * edge magnitude from each color channel.

    Args:
        sketch: Sketch buffer to darken
        edges: (h, w) magnitude map from sobel_magnitude
        strength: Edge strength, 0-100

    Returns:
        New buffer, clamped at 0
    """
    if edges.shape != (sketch.height, sketch.width):
        raise ValueError(
            f"Edge map shape {edges.shape} does not match sketch {sketch.size}"
        )

    factor = max(0.0, min(100.0, float(strength))) / 100.0
    darkening = (edges.astype(np.float64) / 255.0) * factor * 255.0
    values = sketch.rgb.astype(np.float64) - darkening[..., np.newaxis]
    return sketch.with_rgb(np.clip(np.rint(values), 0, 255))

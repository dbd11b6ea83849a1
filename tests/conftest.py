"""Shared fixtures: small synthetic images built with numpy."""

import numpy as np
import pytest

from pencil_sketch.image_processing import PixelBuffer


def solid(width: int, height: int, rgb: "tuple[int, int, int]") -> PixelBuffer:
    """Opaque single-color buffer."""
    return PixelBuffer.blank(width, height, rgb + (255,))


def split_black_white(width: int, height: int) -> PixelBuffer:
    """Left half black, right half white."""
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, width // 2 :, :] = 255
    return PixelBuffer.from_array(pixels)


@pytest.fixture
def mid_gray_image() -> PixelBuffer:
    """100x100 flat (128, 128, 128)."""
    return solid(100, 100, (128, 128, 128))


@pytest.fixture
def split_image() -> PixelBuffer:
    """6x6 left-black / right-white image."""
    return split_black_white(6, 6)


@pytest.fixture
def photo_image() -> PixelBuffer:
    """48x32 noisy color image with a smooth gradient underneath."""
    rng = np.random.default_rng(0)
    ys, xs = np.mgrid[0:32, 0:48]
    pixels = np.empty((32, 48, 4), dtype=np.float64)
    pixels[..., 0] = xs * 5
    pixels[..., 1] = ys * 7
    pixels[..., 2] = 200 - xs * 2
    pixels[..., :3] += rng.normal(0, 12, (32, 48, 3))
    pixels[..., 3] = 255
    return PixelBuffer.from_array(np.clip(np.rint(pixels), 0, 255).astype(np.uint8))


@pytest.fixture
def gradient_image() -> PixelBuffer:
    """Horizontal gray gradient, 0 to 198 in steps of 2."""
    row = (np.arange(100) * 2).astype(np.uint8)
    plane = np.tile(row, (20, 1))
    return PixelBuffer.from_array(plane)

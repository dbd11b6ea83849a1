"""Tests for grayscale, inversion, color dodge and tone adjustment."""

import numpy as np
import pytest

from pencil_sketch.image_processing import PixelBuffer
from pencil_sketch.image_processing.tonal import (
    adjust_tone,
    contrast_factor,
    dodge_blend,
    invert,
    to_grayscale,
)


def gray_buffer(values) -> PixelBuffer:
    plane = np.asarray(values, dtype=np.uint8).reshape(1, -1)
    return PixelBuffer.from_array(plane)


class TestGrayscale:
    def test_luma_weights(self):
        buffer = PixelBuffer.from_array(
            np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8)
        )
        gray = to_grayscale(buffer)
        # 0.299*255, 0.587*255, 0.114*255 rounded
        assert list(gray.samples[0, :, 0]) == [76, 150, 29]
        assert np.array_equal(gray.samples[..., 0], gray.samples[..., 1])
        assert np.array_equal(gray.samples[..., 0], gray.samples[..., 2])

    def test_idempotent(self, photo_image):
        once = to_grayscale(photo_image)
        assert to_grayscale(once) == once

    def test_alpha_untouched(self):
        array = np.zeros((1, 1, 4), dtype=np.uint8)
        array[0, 0] = (200, 100, 50, 77)
        gray = to_grayscale(PixelBuffer.from_array(array))
        assert gray.samples[0, 0, 3] == 77

    def test_input_not_modified(self, photo_image):
        before = photo_image.samples.copy()
        to_grayscale(photo_image)
        assert np.array_equal(photo_image.samples, before)


class TestInvert:
    def test_values(self):
        inverted = invert(gray_buffer([0, 100, 255]))
        assert list(inverted.samples[0, :, 0]) == [255, 155, 0]
        assert np.all(inverted.alpha == 255)

    def test_self_inverse(self, photo_image):
        assert invert(invert(photo_image)) == photo_image


class TestDodgeBlend:
    def test_blurred_white_gives_white(self):
        gray = gray_buffer([0, 10, 128, 255])
        blurred = gray_buffer([255, 255, 255, 255])
        result = dodge_blend(gray, blurred)
        assert np.all(result.rgb == 255)

    def test_formula(self):
        gray = gray_buffer([128, 100, 0, 200])
        blurred = gray_buffer([127, 0, 200, 100])
        result = dodge_blend(gray, blurred)
        # floor(128*256/129)=254, 100*256/256=100, 0, min(255, 200*256/156)
        assert list(result.samples[0, :, 0]) == [254, 100, 0, 255]

    def test_output_range_and_alpha(self, photo_image):
        rng = np.random.default_rng(3)
        gray = to_grayscale(photo_image)
        noise = rng.integers(0, 256, size=photo_image.samples.shape, dtype=np.uint8)
        result = dodge_blend(gray, PixelBuffer.from_array(noise))
        assert result.samples.dtype == np.uint8
        assert np.all(result.alpha == 255)

    def test_size_mismatch(self):
        with pytest.raises(ValueError):
            dodge_blend(gray_buffer([1, 2]), gray_buffer([1, 2, 3]))


class TestToneAdjustment:
    def test_identity_at_zero(self, photo_image):
        assert adjust_tone(photo_image, 0, 0) is photo_image

    def test_contrast_factor_neutral(self):
        assert contrast_factor(0) == pytest.approx(1.0)

    def test_contrast_pivot_is_mid_gray(self):
        result = adjust_tone(gray_buffer([128]), contrast=100, brightness=0)
        assert tuple(result.samples[0, 0, :3]) == (128, 128, 128)

    def test_contrast_spreads_values(self):
        result = adjust_tone(gray_buffer([100, 156]), contrast=50)
        low, high = result.samples[0, :, 0]
        assert low < 100
        assert high > 156

    def test_negative_contrast_flattens(self):
        result = adjust_tone(gray_buffer([0, 255]), contrast=-100)
        low, high = result.samples[0, :, 0]
        assert 0 < low < 128 < high < 255

    def test_brightness_offsets(self):
        result = adjust_tone(gray_buffer([100, 250, 5]), brightness=20)
        assert list(result.samples[0, :, 0]) == [120, 255, 25]

    def test_clamped_to_byte_range(self, photo_image):
        result = adjust_tone(photo_image, contrast=100, brightness=-100)
        assert result.rgb.min() >= 0
        assert result.rgb.max() <= 255

    def test_alpha_untouched(self):
        array = np.zeros((1, 1, 4), dtype=np.uint8)
        array[0, 0] = (10, 10, 10, 33)
        result = adjust_tone(PixelBuffer.from_array(array), contrast=20, brightness=5)
        assert result.samples[0, 0, 3] == 33

"""End-to-end tests for render() and SketchProcessor."""

import io

import numpy as np
import pytest
from PIL import Image

from conftest import solid
from pencil_sketch.errors import ImageLoadError
from pencil_sketch.image_processing import PixelBuffer, SketchProcessor, render
from pencil_sketch.image_processing.blur import blur
from pencil_sketch.image_processing.color import blend_color
from pencil_sketch.image_processing.tonal import adjust_tone, dodge_blend, invert, to_grayscale
from pencil_sketch.image_processing.utils import clamp_to_working_size
from pencil_sketch.models import ExportSpec, SketchOptions


class TestRender:
    def test_flat_mid_gray_gives_uniform_light_gray(self, mid_gray_image):
        sketch = render(mid_gray_image)
        # gray 128, blurred inverse 127: floor(128 * 256 / 129) = 254
        assert sketch.size == (100, 100)
        assert np.all(sketch.rgb == 254)
        assert np.all(sketch.alpha == 255)

    def test_contrast_pivot(self):
        gray = solid(1, 1, (128, 128, 128))
        assert adjust_tone(gray, contrast=100, brightness=0) == gray

    def test_input_untouched(self, photo_image):
        before = photo_image.samples.copy()
        render(photo_image, SketchOptions(edge_detection=True, color_mode=True))
        assert np.array_equal(photo_image.samples, before)

    def test_deterministic(self, photo_image):
        options = SketchOptions(intensity=7, contrast=20, edge_detection=True)
        assert render(photo_image, options) == render(photo_image, options)

    def test_out_of_range_options_do_not_fail(self, photo_image):
        options = SketchOptions(
            intensity=10_000,
            contrast=900,
            brightness=float("nan"),
            color_mode=True,
            color_strength=-50,
            edge_detection=True,
            edge_strength=400,
        )
        sketch = render(photo_image, options)
        assert sketch.size == photo_image.size
        assert sketch.samples.dtype == np.uint8

    def test_negative_brightness_darkens(self, photo_image):
        base = render(photo_image, SketchOptions(intensity=5))
        darker = render(photo_image, SketchOptions(intensity=5, brightness=-40))
        assert darker.rgb.mean() < base.rgb.mean()

    def test_tone_applied_before_color(self, photo_image):
        options = SketchOptions(
            intensity=5, contrast=60, brightness=-30, color_mode=True, color_strength=80
        )
        gray = to_grayscale(photo_image)
        base = dodge_blend(gray, blur(invert(gray), 5))

        tone_first = blend_color(adjust_tone(base, 60, -30), photo_image, 80)
        color_first = adjust_tone(blend_color(base, photo_image, 80), 60, -30)

        sketch = render(photo_image, options)
        assert sketch == tone_first
        assert sketch != color_first

    def test_oversized_input_is_clamped(self):
        wide = PixelBuffer.blank(2600, 10, (40, 80, 120, 255))
        sketch = render(wide, SketchOptions(intensity=1))
        assert sketch.size == (2400, 9)


class TestWorkingSize:
    def test_small_image_untouched(self, photo_image):
        assert clamp_to_working_size(photo_image) is photo_image

    def test_long_side_capped(self):
        tall = PixelBuffer.blank(1000, 3000)
        assert clamp_to_working_size(tall).size == (800, 2400)


class TestSketchProcessor:
    @pytest.fixture
    def photo_file(self, tmp_path, photo_image):
        path = tmp_path / "photo.png"
        photo_image.to_image().convert("RGB").save(path)
        return path

    def test_load_image(self, photo_file, photo_image):
        loaded = SketchProcessor().load_image(photo_file)
        assert loaded == photo_image

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            SketchProcessor().load_image(tmp_path / "nope.jpg")

    def test_load_non_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("hello")
        with pytest.raises(ImageLoadError):
            SketchProcessor().load_image(path)

    def test_process_without_texture(self, photo_file):
        processed = SketchProcessor(SketchOptions(intensity=4)).process(photo_file)
        assert processed.result is processed.sketch
        assert processed.texture == "none"
        assert (processed.original_width, processed.original_height) == (48, 32)
        assert processed.sketch.size == (48, 32)
        assert processed.options == SketchOptions(intensity=4)

    def test_process_with_texture(self, photo_file):
        processor = SketchProcessor(texture="parchment", texture_opacity=0.5)
        processed = processor.process(photo_file)
        assert processed.texture == "parchment"
        assert processed.result != processed.sketch
        assert processed.result.size == processed.sketch.size

    def test_apply_texture_overrides(self, photo_image):
        processor = SketchProcessor(texture="canvas")
        sketch = processor.render(photo_image)
        assert processor.apply_texture(sketch, "none") is sketch
        assert processor.apply_texture(sketch, opacity=0.0) is sketch

    def test_export_from_native_size(self, photo_file):
        processor = SketchProcessor()
        processed = processor.process(photo_file)
        result = processor.export(
            processed.result,
            ExportSpec.parse("png", "print"),
            original_size=(processed.original_width, processed.original_height),
        )
        assert (result.width, result.height) == (96, 64)
        assert Image.open(io.BytesIO(result.data)).size == (96, 64)

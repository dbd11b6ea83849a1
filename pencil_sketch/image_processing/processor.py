"""Main sketch processor orchestrating the complete pipeline.

AIDEV-NOTE: render() is the single canonical pipeline:
clamp -> grayscale -> invert -> blur -> dodge -> edges -> tone -> color.
Tone runs before color: contrast and brightness shape only the
graphite, and the muted colors are laid over the final tones. Swapping the
two changes nearly every pixel when both are enabled.
Each stage takes buffers and returns a new one, nothing is shared or
mutated between stages. Texture and export run on demand afterwards.
"""

import logging
import time
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..errors import ImageLoadError
from ..models import (
    BlendMode,
    ExportResult,
    ExportSpec,
    ProcessedSketch,
    SketchOptions,
    Texture,
)
from .blur import blur
from .buffer import PixelBuffer
from .color import blend_color
from .edges import darken_edges, sobel_magnitude
from .export import export_sketch
from .texture import DEFAULT_TEXTURE_OPACITY, apply_texture, get_texture
from .tonal import adjust_tone, dodge_blend, invert, to_grayscale
from .utils import clamp_to_working_size

logger = logging.getLogger(__name__)


def render(image: PixelBuffer, options: "SketchOptions | None" = None) -> PixelBuffer:
    """Turn a color image into a pencil sketch.

    Args:
        image: Source RGBA buffer at native resolution
        options: Creative settings, clamped before use (defaults if None)

    Returns:
        Sketch buffer at the working size of the image
    """
    opts = (options or SketchOptions()).clamped()

    original = clamp_to_working_size(image)
    if original.size != image.size:
        logger.debug(
            f"Clamped {image.width}x{image.height} input to "
            f"{original.width}x{original.height} working size"
        )

    gray = to_grayscale(original)
    blurred = blur(invert(gray), opts.blur_radius)
    sketch = dodge_blend(gray, blurred)

    if opts.edge_detection:
        sketch = darken_edges(sketch, sobel_magnitude(gray), opts.edge_strength)

    sketch = adjust_tone(sketch, opts.contrast, opts.brightness)

    if opts.color_mode:
        sketch = blend_color(sketch, original, opts.color_strength)

    return sketch


def export(
    buffer: PixelBuffer,
    spec: ExportSpec,
    original_size: "tuple[int, int] | None" = None,
) -> bytes:
    """Encode a sketch for a quality tier and return the raw bytes.

    Callers that also need the MIME type, final size or a suggested filename
    should use export_sketch(), which returns the full ExportResult.
    """
    return export_sketch(buffer, spec, original_size).data


class SketchProcessor:
    """Turns photos into pencil sketches and exports them."""

    def __init__(
        self,
        options: "SketchOptions | None" = None,
        texture: "str | Texture | None" = None,
        blend_mode: "BlendMode | str" = BlendMode.MULTIPLY,
        texture_opacity: float = DEFAULT_TEXTURE_OPACITY,
    ):
        self.options = options or SketchOptions()
        self.texture = texture
        self.blend_mode = blend_mode
        self.texture_opacity = texture_opacity

    def load_image(self, file_path: "str | Path") -> PixelBuffer:
        """Load and decode an image file.

        Args:
            file_path: Path to image file (PNG, JPG, etc.)

        Returns:
            RGBA PixelBuffer at native resolution

        Raises:
            ImageLoadError: If file cannot be loaded or is invalid
        """
        try:
            with Image.open(file_path) as image:
                # AIDEV-NOTE: Always convert to RGBA for consistent processing
                return PixelBuffer.from_image(image)
        except (OSError, UnidentifiedImageError) as e:
            raise ImageLoadError(f"Failed to load image: {e}") from e

    def render(
        self,
        image: PixelBuffer,
        options: "SketchOptions | None" = None,
    ) -> PixelBuffer:
        """Render a sketch, using the processor's options if none are given."""
        return render(image, options or self.options)

    def resolve_texture(self, texture: "str | Texture | None" = None) -> Texture:
        """Look up a catalog texture by name, or pass a Texture through."""
        texture = texture if texture is not None else self.texture
        if isinstance(texture, Texture):
            return texture
        return get_texture(texture)

    def apply_texture(
        self,
        sketch: PixelBuffer,
        texture: "str | Texture | None" = None,
        blend_mode: "BlendMode | str | None" = None,
        opacity: "float | None" = None,
    ) -> PixelBuffer:
        """Composite a paper texture, falling back to processor defaults."""
        return apply_texture(
            sketch,
            self.resolve_texture(texture),
            blend_mode or self.blend_mode,
            self.texture_opacity if opacity is None else opacity,
        )

    def export(
        self,
        buffer: PixelBuffer,
        spec: ExportSpec,
        original_size: "tuple[int, int] | None" = None,
    ) -> ExportResult:
        """Rescale for the quality tier and encode."""
        return export_sketch(buffer, spec, original_size)

    def process(self, file_path: "str | Path") -> ProcessedSketch:
        """Execute the complete pipeline on an image file.

        Args:
            file_path: Path to input image

        Returns:
            ProcessedSketch with the working original, sketch and textured result
        """
        logger.info(f"Loading image {file_path}...")
        started = time.perf_counter()

        image = self.load_image(file_path)
        orig_width, orig_height = image.size
        logger.info(f"Loaded image with size: {orig_width}x{orig_height} pixels.")

        original = clamp_to_working_size(image)
        if original.size != image.size:
            logger.info(
                f"Scaled image to {original.width}x{original.height} "
                f"pixels for processing."
            )

        options = self.options.clamped()
        logger.info("Rendering sketch...")
        sketch = self.render(original, options)

        texture = self.resolve_texture()
        result = self.apply_texture(sketch, texture)
        if result is not sketch:
            logger.info(f"Applied {texture.name} texture.")

        elapsed = time.perf_counter() - started
        logger.info(f"Sketch complete in {elapsed:.2f} seconds.")

        return ProcessedSketch(
            original=original,
            sketch=sketch,
            result=result,
            options=options,
            texture=texture.name,
            original_width=orig_width,
            original_height=orig_height,
            elapsed_seconds=elapsed,
        )

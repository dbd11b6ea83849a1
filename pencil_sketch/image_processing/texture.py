"""Paper texture catalog and compositing.

AIDEV-NOTE: The catalog textures are generated procedurally from fixed
seeds, so they are identical on every run and need no asset files. Each
is built once and cached; callers must treat them as read-only.
"""

import functools
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import ImageLoadError
from ..models import BlendMode, Texture, TextureType
from .blur import blur_array
from .buffer import PixelBuffer

logger = logging.getLogger(__name__)

TEXTURE_TILE_SIZE = 256
DEFAULT_TEXTURE_OPACITY = 0.3


# ----------------------------------------------------------------------
# Procedural textures
# ----------------------------------------------------------------------


def _opaque(rgb: np.ndarray) -> PixelBuffer:
    rgb = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return PixelBuffer.from_array(rgb)


def _parchment(size: int) -> PixelBuffer:
    """Warm paper with soft blotches and fine grain."""
    rng = np.random.default_rng(1729)
    blotches = blur_array(rng.normal(0.0, 1.0, (size, size)), size / 16)
    blotches /= max(float(np.abs(blotches).max()), 1e-9)
    grain = rng.normal(0.0, 4.0, (size, size))

    shade = blotches * 14.0 + grain
    base = np.array([238.0, 224.0, 196.0])
    return _opaque(base + shade[..., np.newaxis] * np.array([1.0, 0.95, 0.85]))


def _canvas(size: int) -> PixelBuffer:
    """Woven cloth: crossing warp and weft threads."""
    rng = np.random.default_rng(42)
    ys, xs = np.mgrid[0:size, 0:size].astype(np.float64)
    period = 4.0
    warp = np.sin(xs * 2.0 * np.pi / period)
    weft = np.sin(ys * 2.0 * np.pi / period)
    weave = np.where((xs // period + ys // period) % 2 == 0, warp, weft)

    shade = weave * 10.0 + rng.normal(0.0, 3.0, (size, size))
    base = np.array([230.0, 226.0, 215.0])
    return _opaque(base + shade[..., np.newaxis])


def _notebook(size: int) -> PixelBuffer:
    """Ruled notebook paper with a margin line."""
    rng = np.random.default_rng(7)
    rgb = np.empty((size, size, 3), dtype=np.float64)
    rgb[...] = (250.0, 250.0, 246.0)
    rgb += rng.normal(0.0, 1.5, (size, size))[..., np.newaxis]

    rule_spacing = 32
    rgb[rule_spacing - 1 :: rule_spacing, :, :] = (168.0, 196.0, 228.0)
    margin_x = 40
    rgb[:, margin_x : margin_x + 2, :] = (226.0, 140.0, 140.0)
    return _opaque(rgb)


_GENERATORS = {
    TextureType.PARCHMENT: _parchment,
    TextureType.CANVAS: _canvas,
    TextureType.NOTEBOOK: _notebook,
}


@functools.lru_cache(maxsize=None)
def _catalog_texture(texture_type: TextureType) -> Texture:
    generator = _GENERATORS.get(texture_type)
    if generator is None:
        return Texture(name=texture_type.value)
    logger.debug(f"Generating {texture_type.value} texture")
    return Texture(name=texture_type.value, samples=generator(TEXTURE_TILE_SIZE))


def available_textures() -> "dict[str, str]":
    """Catalog identifiers mapped to display names, in catalog order."""
    return {texture.value: texture.display_name for texture in TextureType}


def get_texture(name: "str | TextureType | None") -> Texture:
    """Resolve a catalog texture.

    Unknown names are not an error: they log a warning and resolve to an
    empty texture, which compositing treats as a passthrough.
    """
    if name is None:
        return _catalog_texture(TextureType.NONE)
    if isinstance(name, TextureType):
        return _catalog_texture(name)
    try:
        texture_type = TextureType(str(name).strip().lower())
    except ValueError:
        logger.warning(f"Unknown texture {name!r}, rendering without texture")
        return Texture(name=str(name))
    return _catalog_texture(texture_type)


def load_texture(file_path: "str | Path") -> Texture:
    """Load a custom texture tile from an image file.

    Raises:
        ImageLoadError: If the file can't be read as an image
    """
    path = Path(file_path)
    try:
        with Image.open(path) as image:
            samples = PixelBuffer.from_image(image)
    except (OSError, UnidentifiedImageError) as e:
        raise ImageLoadError(f"Failed to load texture {path}: {e}") from e
    return Texture(name=path.stem, samples=samples)


# ----------------------------------------------------------------------
# Compositing
# ----------------------------------------------------------------------


def tile_to(texture: PixelBuffer, width: int, height: int) -> np.ndarray:
    """Repeat a texture in both axes to cover width x height. Returns (h, w, 4)."""
    rows = np.arange(height) % texture.height
    cols = np.arange(width) % texture.width
    return texture.samples[np.ix_(rows, cols)]


def _multiply(base: np.ndarray, tile: np.ndarray) -> np.ndarray:
    return base * tile / 255.0


def _overlay(base: np.ndarray, tile: np.ndarray) -> np.ndarray:
    dark = 2.0 * base * tile / 255.0
    light = 255.0 - 2.0 * (255.0 - base) * (255.0 - tile) / 255.0
    return np.where(base < 128.0, dark, light)


_BLEND_FUNCTIONS = {
    BlendMode.MULTIPLY: _multiply,
    BlendMode.OVERLAY: _overlay,
}


def apply_texture(
    sketch: PixelBuffer,
    texture: "Texture | None",
    blend_mode: "BlendMode | str" = BlendMode.MULTIPLY,
    opacity: float = DEFAULT_TEXTURE_OPACITY,
) -> PixelBuffer:
    """Composite a tiled paper texture onto a finished sketch.

    Args:
        sketch: Finished sketch buffer
        texture: Texture to tile; None or an empty texture is a passthrough
        blend_mode: "multiply" or "overlay"
        opacity: 0-1, further scaled by the texture's own alpha

    Returns:
        Composited buffer, or the sketch itself for a passthrough

    Raises:
        ValueError: If blend_mode isn't a known mode
    """
    if texture is None or texture.is_empty:
        return sketch

    mode = BlendMode(blend_mode) if isinstance(blend_mode, str) else blend_mode
    opacity = max(0.0, min(1.0, float(opacity)))
    if opacity == 0.0:
        return sketch

    tile = tile_to(texture.samples, sketch.width, sketch.height).astype(np.float64)
    base = sketch.rgb.astype(np.float64)

    blended = _BLEND_FUNCTIONS[mode](base, tile[..., :3])
    alpha = opacity * tile[..., 3:4] / 255.0
    result = base + (blended - base) * alpha
    return sketch.with_rgb(np.clip(np.rint(result), 0, 255))

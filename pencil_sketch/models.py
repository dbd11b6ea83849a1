"""Data models and constants for the pencil sketch renderer."""

import base64
import math
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

from .errors import UnsupportedExportFormatError

if TYPE_CHECKING:
    from .image_processing.buffer import PixelBuffer

# AIDEV-NOTE: Oversized inputs are shrunk to this before any stage runs,
# independent of export-time scaling.
MAX_WORKING_DIMENSION = 2400

# Debounce applied to re-render requests coming from the UI (ms)
RENDER_DEBOUNCE_MS = 150

# Configuration file path
CONFIG_FILE = Path.home() / ".pencil_sketch_config.json"

# Option ranges (inclusive)
INTENSITY_RANGE = (1, 60)
CONTRAST_RANGE = (-100, 100)
BRIGHTNESS_RANGE = (-100, 100)
COLOR_STRENGTH_RANGE = (0, 100)
EDGE_STRENGTH_RANGE = (0, 100)


def round_half_up(value: float) -> int:
    """Round to the nearest int, with .5 always going up."""
    return int(math.floor(value + 0.5))


def clamp_option(value: Any, bounds: "tuple[int, int]", default: int) -> int:
    """Round and clamp a numeric option, falling back to default when unusable."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    low, high = bounds
    return max(low, min(high, round_half_up(number)))


class TextureType(Enum):
    """Paper textures in the built-in catalog."""

    NONE = "none"
    PARCHMENT = "parchment"
    CANVAS = "canvas"
    NOTEBOOK = "notebook"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class BlendMode(Enum):
    """Ways a texture tile can be composited onto the sketch."""

    MULTIPLY = "multiply"
    OVERLAY = "overlay"


class ExportFormat(Enum):
    """Encoded output formats."""

    PNG = "png"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return self.value


class QualityTier(Enum):
    """Export presets trading file size for resolution."""

    WEB = "web"
    PRINT = "print"


@dataclass(frozen=True)
class QualityPreset:
    """Concrete numbers behind a quality tier."""

    scale: float
    max_dimension: int
    jpeg_quality: float  # 0-1, ignored for PNG


QUALITY_PRESETS = {
    QualityTier.WEB: QualityPreset(scale=1.0, max_dimension=2048, jpeg_quality=0.85),
    QualityTier.PRINT: QualityPreset(scale=2.0, max_dimension=4096, jpeg_quality=0.95),
}


# Accepted spellings for the option keys, camelCase ones come from
# settings written by the web version of the tool.
_OPTION_ALIASES = {
    "intensity": "intensity",
    "contrast": "contrast",
    "brightness": "brightness",
    "color_mode": "color_mode",
    "colorMode": "color_mode",
    "color_strength": "color_strength",
    "colorStrength": "color_strength",
    "edge_detection": "edge_detection",
    "edgeDetection": "edge_detection",
    "edge_strength": "edge_strength",
    "edgeStrength": "edge_strength",
}


@dataclass(frozen=True)
class SketchOptions:
    """Per-render creative settings.

    AIDEV-NOTE: Never mutated once built. Stages must only read values from
    clamped() so an out-of-range slider value can't leak into the math.
    """

    intensity: int = 21  # blur radius (1-60)
    contrast: int = 0  # -100 to 100
    brightness: int = 0  # -100 to 100
    color_mode: bool = False  # blend muted original colors back in
    color_strength: int = 30  # 0-100
    edge_detection: bool = False  # darken Sobel edges
    edge_strength: int = 50  # 0-100

    def clamped(self) -> "SketchOptions":
        """Return a copy with every numeric field rounded and in range."""
        defaults = SketchOptions()
        return SketchOptions(
            intensity=clamp_option(self.intensity, INTENSITY_RANGE, defaults.intensity),
            contrast=clamp_option(self.contrast, CONTRAST_RANGE, defaults.contrast),
            brightness=clamp_option(self.brightness, BRIGHTNESS_RANGE, defaults.brightness),
            color_mode=bool(self.color_mode),
            color_strength=clamp_option(
                self.color_strength, COLOR_STRENGTH_RANGE, defaults.color_strength
            ),
            edge_detection=bool(self.edge_detection),
            edge_strength=clamp_option(
                self.edge_strength, EDGE_STRENGTH_RANGE, defaults.edge_strength
            ),
        )

    @property
    def blur_radius(self) -> int:
        return max(1, self.clamped().intensity)

    def updated(self, **changes) -> "SketchOptions":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SketchOptions":
        """Build options from a partial mapping, ignoring unknown keys."""
        values = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key)
            if name is not None:
                values[name] = value
        return cls(**values).clamped()

    def to_dict(self) -> "dict[str, Any]":
        return asdict(self)


@dataclass(frozen=True)
class ExportSpec:
    """Target format and quality tier for an export."""

    format: ExportFormat = ExportFormat.PNG
    quality_tier: QualityTier = QualityTier.WEB

    @classmethod
    def parse(cls, format: str, quality_tier: str = "web") -> "ExportSpec":
        """Build a spec from user-facing strings.

        Raises:
            UnsupportedExportFormatError: If either value is unknown
        """
        fmt = format.strip().lower()
        if fmt == "jpg":
            fmt = "jpeg"
        try:
            export_format = ExportFormat(fmt)
        except ValueError as e:
            raise UnsupportedExportFormatError(
                f"Unsupported export format: {format!r}"
            ) from e
        try:
            tier = QualityTier(quality_tier.strip().lower())
        except ValueError as e:
            raise UnsupportedExportFormatError(
                f"Unsupported quality tier: {quality_tier!r}"
            ) from e
        return cls(format=export_format, quality_tier=tier)

    @property
    def preset(self) -> QualityPreset:
        try:
            return QUALITY_PRESETS[self.quality_tier]
        except KeyError as e:
            raise UnsupportedExportFormatError(
                f"No preset for quality tier {self.quality_tier!r}"
            ) from e

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def filename(self) -> str:
        return f"sketch-{self.quality_tier.value}.{self.format.extension}"


@dataclass
class SketchConfig:
    """User preferences persisted between runs."""

    options: SketchOptions = field(default_factory=SketchOptions)

    # Paper texture applied after rendering
    texture: str = TextureType.NONE.value
    texture_blend_mode: str = BlendMode.MULTIPLY.value
    texture_opacity: float = 0.25  # 0-1

    # Export defaults
    export_format: str = ExportFormat.PNG.value
    export_quality: str = QualityTier.WEB.value


@dataclass(frozen=True)
class Texture:
    """A named paper texture. Samples are None for the "none" entry."""

    name: str
    samples: "PixelBuffer | None" = None

    @property
    def is_empty(self) -> bool:
        return self.samples is None


@dataclass(frozen=True)
class ExportResult:
    """Encoded export output."""

    data: bytes
    mime_type: str
    width: int
    height: int
    filename: str = "sketch.png"

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass
class ProcessedSketch:
    """Result of running the full pipeline on a file."""

    # Working-size copy of the input (after the oversized-input clamp)
    original: "PixelBuffer"

    # Sketch before any texture
    sketch: "PixelBuffer"

    # Sketch with texture applied (same object as sketch when no texture)
    result: "PixelBuffer"

    options: SketchOptions
    texture: str = TextureType.NONE.value

    # Native input dimensions (pixels)
    original_width: int = 0
    original_height: int = 0

    # Statistics
    elapsed_seconds: float = 0.0

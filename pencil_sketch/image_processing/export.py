"""Resolution-aware export: rescale to a quality tier and encode.

AIDEV-NOTE: Target size is computed from the native size of the photo the
sketch came from when the caller knows it, not from the (possibly clamped)
working canvas. A 3000x2000 photo exported for print is 2x, then capped
to 4096 on the long side, even though it was rendered at 2400x1600.
"""

import io
import logging

from ..errors import UnsupportedExportFormatError
from ..models import ExportFormat, ExportResult, ExportSpec, QualityTier
from .buffer import PixelBuffer
from .utils import fit_within, resize_buffer

logger = logging.getLogger(__name__)


def export_size(
    width: int,
    height: int,
    spec: ExportSpec,
) -> "tuple[int, int]":
    """Output dimensions for a source of width x height under a quality tier.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        spec: Export format and tier

    Returns:
        (width, height) scaled by the tier and capped to its max dimension
    """
    preset = spec.preset
    return fit_within(width * preset.scale, height * preset.scale, preset.max_dimension)


def encode(buffer: PixelBuffer, spec: ExportSpec) -> bytes:
    """Encode a buffer as PNG (lossless) or JPEG at the tier's quality.

    Raises:
        UnsupportedExportFormatError: For formats outside ExportFormat
    """
    image = buffer.to_image()
    stream = io.BytesIO()

    if spec.format == ExportFormat.PNG:
        image.save(stream, format="PNG")
    elif spec.format == ExportFormat.JPEG:
        quality = int(round(spec.preset.jpeg_quality * 100))
        image.convert("RGB").save(stream, format="JPEG", quality=quality)
    else:
        raise UnsupportedExportFormatError(f"Unsupported export format: {spec.format!r}")

    return stream.getvalue()


def export_sketch(
    buffer: PixelBuffer,
    spec: ExportSpec,
    original_size: "tuple[int, int] | None" = None,
) -> ExportResult:
    """Rescale a finished sketch for a quality tier and encode it.

    Args:
        buffer: Finished sketch (optionally textured)
        spec: Target format and quality tier
        original_size: Native (width, height) of the source photo, defaults
            to the buffer's own size

    Returns:
        ExportResult with encoded bytes, MIME type and final dimensions
    """
    if not isinstance(spec.format, ExportFormat) or not isinstance(
        spec.quality_tier, QualityTier
    ):
        raise UnsupportedExportFormatError(
            f"Unsupported export combination: {spec.format!r}/{spec.quality_tier!r}"
        )

    base_width, base_height = original_size or buffer.size
    width, height = export_size(base_width, base_height, spec)
    logger.debug(
        f"Exporting {buffer.width}x{buffer.height} -> {width}x{height} "
        f"as {spec.format.value} ({spec.quality_tier.value})"
    )

    resized = resize_buffer(buffer, width, height)
    return ExportResult(
        data=encode(resized, spec),
        mime_type=spec.mime_type,
        width=width,
        height=height,
        filename=spec.filename,
    )

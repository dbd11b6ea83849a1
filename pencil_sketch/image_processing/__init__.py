"""Image processing pipeline for photo-to-sketch conversion.

AIDEV-NOTE: This package handles the complete pipeline from photograph
to pencil sketch. Organized into modular components:
- processor: render()/export() entry points and the SketchProcessor orchestrator
- buffer: PixelBuffer, the RGBA buffer every stage reads and returns
- tonal: grayscale, inversion, color dodge and contrast/brightness
- blur: box-approximated Gaussian blur
- edges: Sobel magnitude and edge darkening
- color: color sketch blending
- texture: paper texture catalog and compositing
- export: quality tiers, rescaling and encoding
- utils: working-size clamp and scaling helpers
"""

from .buffer import PixelBuffer
from .processor import SketchProcessor, export, render

__all__ = ["PixelBuffer", "SketchProcessor", "export", "render"]

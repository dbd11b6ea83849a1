"""Pencil Sketch - turn photographs into stylized pencil sketches."""

from .image_processing import PixelBuffer, SketchProcessor, export, render
from .models import ExportSpec, SketchOptions

__all__ = [
    "ExportSpec",
    "PixelBuffer",
    "SketchOptions",
    "SketchProcessor",
    "export",
    "render",
]

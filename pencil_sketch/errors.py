"""Exception types raised by the sketch pipeline."""


class SketchError(Exception):
    """Base class for all pencil-sketch errors."""


class InvalidDimensionsError(SketchError, ValueError):
    """Raised for zero-sized buffers or a sample count that doesn't match width*height*4."""


class UnsupportedExportFormatError(SketchError, ValueError):
    """Raised when an export format or quality tier isn't one we know about."""


class ImageLoadError(SketchError, ValueError):
    """Raised when an input or texture image can't be opened or decoded."""

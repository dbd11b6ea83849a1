"""RGBA pixel buffer shared by every pipeline stage.

AIDEV-NOTE: A PixelBuffer is immutable once created. Stages read the
samples array and hand back a brand new buffer, so no two stages ever
write into the same memory.
"""

from typing import Sequence

import numpy as np
from PIL import Image

from ..errors import InvalidDimensionsError


class PixelBuffer:
    """Width, height and row-major RGBA samples (4 bytes per pixel)."""

    __slots__ = ("width", "height", "samples")

    def __init__(
        self,
        width: int,
        height: int,
        samples: "np.ndarray | Sequence[int]",
    ):
        """Validate and take a private, read-only copy of the samples.

        Args:
            width: Width in pixels (> 0)
            height: Height in pixels (> 0)
            samples: Flat sequence of width*height*4 values, or an array
                of shape (height, width, 4). Values outside 0-255 are clipped.

        Raises:
            InvalidDimensionsError: On non-positive dimensions or if the
                sample count doesn't match width*height*4
        """
        if int(width) <= 0 or int(height) <= 0:
            raise InvalidDimensionsError(
                f"Buffer dimensions must be positive, got {width}x{height}"
            )
        width, height = int(width), int(height)

        array = np.asarray(samples)
        expected = width * height * 4
        if array.size != expected:
            raise InvalidDimensionsError(
                f"Expected {expected} samples for {width}x{height} RGBA, "
                f"got {array.size}"
            )

        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        array = array.reshape(height, width, 4).copy()
        array.flags.writeable = False

        self.width = width
        self.height = height
        self.samples = array

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an (h, w, 4) array. (h, w, 3) and (h, w) arrays get opaque alpha."""
        array = np.asarray(array)
        if array.ndim == 2:
            array = np.stack([array, array, array], axis=-1)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidDimensionsError(
                f"Cannot build an RGBA buffer from array of shape {array.shape}"
            )
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=array.dtype)
            array = np.concatenate([array, alpha], axis=-1)
        height, width = array.shape[:2]
        return cls(width, height, array)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Convert any PIL image to an RGBA buffer at native resolution."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width, height, np.asarray(image, dtype=np.uint8))

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: "tuple[int, int, int, int]" = (255, 255, 255, 255),
    ) -> "PixelBuffer":
        """Allocate a canvas filled with a single color."""
        if int(width) <= 0 or int(height) <= 0:
            raise InvalidDimensionsError(
                f"Buffer dimensions must be positive, got {width}x{height}"
            )
        array = np.empty((int(height), int(width), 4), dtype=np.uint8)
        array[...] = color
        return cls(width, height, array)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def size(self) -> "tuple[int, int]":
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        """Read-only (h, w, 3) view of the color channels."""
        return self.samples[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.samples[..., 3]

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """New buffer with replaced color channels and this buffer's alpha."""
        rgb = np.asarray(rgb)
        if rgb.dtype.kind == "f":
            rgb = np.rint(rgb)
        out = np.empty_like(self.samples)
        out[..., :3] = np.clip(rgb, 0, 255)
        out[..., 3] = self.samples[..., 3]
        return PixelBuffer(self.width, self.height, out)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.samples)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.samples))

    def tobytes(self) -> bytes:
        return self.samples.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.samples, other.samples)

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"

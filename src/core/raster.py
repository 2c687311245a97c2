"""
Raster - RGBA pixel buffer shared by every image tool.

A Raster wraps an (height, width, 4) uint8 numpy array in RGBA channel
order. Operations never mutate their input; each returns a new Raster.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from common.base import Region

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


class Raster:
    """Row-major RGBA image, 8 bits per channel."""

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Raster expects an (H, W, 4) array, got shape {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError("Raster dimensions must be at least 1x1")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Raster expects uint8 pixels, got {pixels.dtype}")
        self._pixels = np.ascontiguousarray(pixels)

    @classmethod
    def blank(cls, width: int, height: int, fill: Sequence[int] = (0, 0, 0, 0)) -> "Raster":
        """Create a raster filled with a single RGBA color (transparent by default)."""
        if width < 1 or height < 1:
            raise ValueError(f"Invalid raster size {width}x{height}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = np.asarray(fill, dtype=np.uint8)
        return cls(pixels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Raster":
        """
        Build a raster from a grayscale, RGB or RGBA array.

        Missing alpha is filled with 255. The input is copied.
        """
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)

        if array.ndim == 2:
            array = np.repeat(array[:, :, None], 3, axis=2)

        if array.ndim != 3:
            raise ValueError(f"Unsupported array shape {array.shape}")

        channels = array.shape[2]
        if channels == 1:
            array = np.repeat(array, 3, axis=2)
            channels = 3
        if channels == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)
        elif channels != 4:
            raise ValueError(f"Unsupported channel count {channels}")

        return cls(array.copy())

    @property
    def pixels(self) -> np.ndarray:
        """Underlying (H, W, 4) array. Treat as read-only."""
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def nbytes(self) -> int:
        return int(self._pixels.nbytes)

    def copy(self) -> "Raster":
        return Raster(self._pixels.copy())

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} raster")

    def get_pixel(self, x: int, y: int) -> RGBA:
        """Return the RGBA tuple at (x, y)."""
        self._check_bounds(x, y)
        r, g, b, a = self._pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, y: int, rgba: Sequence[int]) -> None:
        """Write one pixel in place. Only used while building a raster."""
        self._check_bounds(x, y)
        self._pixels[y, x] = np.asarray(rgba, dtype=np.uint8)

    def copy_region(self, region: Region) -> "Raster":
        """
        Copy a rectangular region into a new raster.

        Args:
            region: Region fully inside the raster

        Returns:
            New Raster of region.width x region.height
        """
        if not region.is_within(self.width, self.height):
            raise IndexError(
                f"Region {region.to_dict()} outside {self.width}x{self.height} raster"
            )
        return Raster(self._pixels[region.y : region.y2, region.x : region.x2].copy())

    def to_bytes(self) -> bytes:
        """Flat RGBA bytes, row-major, 4 * width * height long."""
        return self._pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(
            np.array_equal(self._pixels, other._pixels)
        )

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height})"

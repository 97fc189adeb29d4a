from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np

from models.errors import UnsupportedFormat

SUPPORTED_CHANNELS = (1, 3, 4)


@dataclass(frozen=True, eq=False)
class Raster:
    """
    Simple data object: uint8 pixels (+ optional source path for bookkeeping).
    Shape (H, W) for grayscale, (H, W, 3) for RGB, (H, W, 4) for RGBA.
    Transforms produce new Raster objects; nothing downstream writes into pixels.
    """
    pixels: np.ndarray
    path: Path | None = None

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise UnsupportedFormat(f"Raster pixels must be a numpy array, got {type(pixels).__name__}")
        if pixels.dtype != np.uint8:
            raise UnsupportedFormat(f"Raster pixels must be uint8, got {pixels.dtype}")
        # (H, W, 1) is stored as plain (H, W)
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            object.__setattr__(self, "pixels", pixels[:, :, 0])
            pixels = self.pixels
        if pixels.ndim not in (2, 3):
            raise UnsupportedFormat(f"Raster pixels must be 2-D or 3-D, got shape {pixels.shape}")
        if self.channels not in SUPPORTED_CHANNELS:
            raise UnsupportedFormat(f"Unsupported channel count: {self.channels}")
        if self.width <= 0 or self.height <= 0:
            raise UnsupportedFormat(f"Raster must have a positive area, got {self.width}x{self.height}")

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    def same_size(self, other: "Raster") -> bool:
        return self.width == other.width and self.height == other.height

    def has_coverage(self) -> bool:
        """True if any sample is non-zero. Meaningful for masks."""
        return bool(np.any(self.pixels))

# services/comparison_service.py
import numpy as np

from models.errors import DimensionMismatch
from models.raster import Raster


class ComparisonService:
    """
    Before/after slider: original on the left of the reveal boundary,
    processed on the right. Inputs are never modified.
    """

    @staticmethod
    def clamp_reveal(reveal: float) -> float:
        reveal = float(reveal)
        if reveal != reveal:  # NaN
            return 0.0
        return min(max(reveal, 0.0), 1.0)

    @classmethod
    def reveal_from_pointer(cls, pointer_x: float, left: float, width: float) -> float:
        """Mouse or touch x position → clamped reveal fraction."""
        if width <= 0:
            raise ValueError(f"Comparison width must be positive, got {width}")
        return cls.clamp_reveal((pointer_x - left) / width)

    @classmethod
    def boundary_column(cls, reveal: float, width: int) -> int:
        return int(round(cls.clamp_reveal(reveal) * width))

    @staticmethod
    def _matching_pixels(original: Raster, processed: Raster):
        """Bring both sides to the same channel layout (alpha dropped if either lacks it)."""
        if not original.same_size(processed):
            raise DimensionMismatch(
                f"Cannot compare {original.width}x{original.height} with "
                f"{processed.width}x{processed.height}"
            )
        left, right = original.pixels, processed.pixels
        channels = max(original.channels, processed.channels)
        if channels == 4 and min(original.channels, processed.channels) < 4:
            channels = 3

        def expand(pixels: np.ndarray) -> np.ndarray:
            if pixels.ndim == 2:
                pixels = pixels[:, :, None]
            if pixels.shape[2] > channels:
                return pixels[:, :, :channels]
            if pixels.shape[2] < channels:
                return np.repeat(pixels, channels, axis=2)
            return pixels

        if channels == 1:
            return left, right
        return expand(left), expand(right)

    def composite(self, original: Raster, processed: Raster, reveal: float) -> Raster:
        left, right = self._matching_pixels(original, processed)
        column = self.boundary_column(reveal, original.width)
        out = right.copy()
        out[:, :column] = left[:, :column]
        return Raster(out)

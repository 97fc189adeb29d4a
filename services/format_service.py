# services/format_service.py
from __future__ import annotations

import os

import cv2
import numpy as np
from dotenv import load_dotenv

from models.errors import UnsupportedFormat
from models.raster import Raster

# Load environment variables
load_dotenv()


class FormatService:
    """
    Channel normalisation in front of the inpainting engine.

    • normalize_source : RGBA → RGB; gray / RGB pass through.
    • normalize_mask   : any channel count → gray → strict 0/255.
    """

    def __init__(self, threshold: int | None = None):
        self.MASK_THRESHOLD = threshold if threshold is not None else int(os.getenv("MASK_THRESHOLD", "10"))

    @staticmethod
    def normalize_source(raster: Raster) -> Raster:
        if raster.channels in (1, 3):
            return raster
        if raster.channels == 4:
            return Raster(cv2.cvtColor(raster.pixels, cv2.COLOR_RGBA2RGB))
        raise UnsupportedFormat(f"Unsupported source channel count: {raster.channels}")

    @staticmethod
    def _to_gray(mask: Raster) -> np.ndarray:
        if mask.channels == 1:
            return mask.pixels
        if mask.channels == 3:
            return cv2.cvtColor(mask.pixels, cv2.COLOR_RGB2GRAY)
        if mask.channels == 4:
            return cv2.cvtColor(mask.pixels, cv2.COLOR_RGBA2GRAY)
        raise UnsupportedFormat(f"Unsupported mask channel count: {mask.channels}")

    def normalize_mask(self, mask: Raster) -> Raster:
        gray = self._to_gray(mask)
        # THRESH_BINARY: value > threshold → 255, else 0
        _, binary = cv2.threshold(gray, self.MASK_THRESHOLD, 255, cv2.THRESH_BINARY)
        return Raster(binary)

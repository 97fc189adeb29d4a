# repositories/inpaint_repository.py
from __future__ import annotations

import logging

import cv2
import numpy as np

from models.errors import InpaintError
from models.inpaint_engine import InpaintEngine

logger = logging.getLogger(__name__)


class InpaintRepository:
    """
    One-image inference + unmasked-pixel restore.

    • Hands C-contiguous inputs to the engine (cv2.inpaint rejects strided views).
    • Copies every unmasked pixel back from the source, whatever the backend did.
    """

    def __init__(self, backend: str | None = None) -> None:
        self.engine = InpaintEngine(backend)

    # ---------- private helpers ----------
    @staticmethod
    def _restore_unmasked(pixels: np.ndarray, mask_u8: np.ndarray, filled: np.ndarray) -> np.ndarray:
        keep = mask_u8 == 0
        if pixels.ndim == 3:
            keep = keep[:, :, None]
        return np.where(keep, pixels, filled).astype(np.uint8)

    # ---------- public API ----------
    def fill(self, pixels: np.ndarray, mask_u8: np.ndarray, radius: int) -> np.ndarray:
        """
        Returns uint8 pixels, same shape as *pixels*, with masked pixels synthesised.
        """
        src = np.ascontiguousarray(pixels)
        mask = np.ascontiguousarray(mask_u8)
        try:
            filled = self.engine.run(src, mask, radius)
        except cv2.error as err:
            logger.error("OpenCV processing error: %s", err)
            raise InpaintError(f"OpenCV Processing Failed: {err}") from err
        return self._restore_unmasked(pixels, mask_u8, filled)

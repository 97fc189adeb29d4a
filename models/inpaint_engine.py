# models/inpaint_engine.py
"""
Singleton wrapper around the configured inpainting backend.

• "telea"  → native NumPy fast marching (models/fast_marching.py), always available.
• "opencv" → cv2.inpaint(..., cv2.INPAINT_TELEA); needs an OpenCV build with the photo module.

Exposes .run(pixels, mask, radius) → filled pixels (same shape as *pixels*).
"""
from __future__ import annotations
import os
import logging
from typing import Dict

import cv2
import numpy as np
from dotenv import load_dotenv

from models.errors import EngineUnavailable
from models.fast_marching import FastMarchingInpainter

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

BACKENDS = ("telea", "opencv")


class InpaintEngine:
    _instances: Dict[str, "InpaintEngine"] = {}  # one instance per backend

    def __new__(cls, backend: str | None = None):
        name = (backend or os.getenv("INPAINT_BACKEND", "telea")).strip().lower()
        if name not in cls._instances:
            instance = super().__new__(cls)
            instance._init_engine(name)   # raises before caching when unavailable
            cls._instances[name] = instance
        return cls._instances[name]

    # --------------------------------------------------
    def _init_engine(self, name: str) -> None:
        if name not in BACKENDS:
            raise EngineUnavailable(
                f"Unknown inpainting backend '{name}'. Use one of: {', '.join(BACKENDS)}"
            )
        if name == "opencv" and not hasattr(cv2, "inpaint"):
            raise EngineUnavailable(
                "This OpenCV build has no photo module (cv2.inpaint). "
                "Install opencv-python or set INPAINT_BACKEND=telea."
            )
        self.name = name
        logger.info("Inpainting backend ready: %s", name)

    # --------------------------------------------------
    def run(self, pixels: np.ndarray, mask: np.ndarray, radius: int) -> np.ndarray:
        """
        Args
        ----
        pixels : np.ndarray  (H, W) or (H, W, 3)  uint8
        mask   : np.ndarray  (H, W)  uint8, 255 marks pixels to fill
        radius : neighbourhood radius in pixels

        Returns
        -------
        filled : np.ndarray  same shape as *pixels*
        """
        if self.name == "opencv":
            return cv2.inpaint(pixels, mask, radius, cv2.INPAINT_TELEA)
        return FastMarchingInpainter(radius).inpaint(pixels, mask)

    @classmethod
    def reset(cls) -> None:
        """Forget cached backends (next construction re-checks availability)."""
        cls._instances.clear()

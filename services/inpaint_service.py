from __future__ import annotations

import os
import time
import logging

import numpy as np
from dotenv import load_dotenv

from models.errors import DimensionMismatch, UnsupportedFormat
from models.raster import Raster
from repositories.inpaint_repository import InpaintRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class InpaintService:
    """
    Contract checks around the inpainting engine.

    *   Source must be 1- or 3-channel, mask 1-channel, same width/height.
    *   Empty mask → the source comes back untouched.
    *   Never resizes or converts anything itself.
    """

    def __init__(self, backend: str | None = None, radius: int | None = None):
        self.radius = radius if radius is not None else int(os.getenv("INPAINT_RADIUS", "3"))
        self.inpaint_repository = InpaintRepository(backend)

    @property
    def backend(self) -> str:
        return self.inpaint_repository.engine.name

    @staticmethod
    def _check_inputs(source: Raster, mask: Raster) -> None:
        if source.channels not in (1, 3):
            raise UnsupportedFormat(
                f"Inpainting needs a 1- or 3-channel source, got {source.channels} channels"
            )
        if mask.channels != 1:
            raise UnsupportedFormat(f"Inpainting needs a 1-channel mask, got {mask.channels} channels")
        if not source.same_size(mask):
            raise DimensionMismatch(
                f"Mask size {mask.width}x{mask.height} does not match "
                f"source size {source.width}x{source.height}"
            )

    def inpaint(self, source: Raster, mask: Raster, radius: int | None = None) -> Raster:
        """
        Fill every masked pixel of *source* and return a new Raster.

        Args:
            source: 1- or 3-channel uint8 raster.
            mask: 1-channel raster of identical size; non-zero marks pixels to fill.
            radius: neighbourhood radius (defaults to INPAINT_RADIUS).
        Returns:
            Raster with the same shape as *source*. Unmasked pixels are byte-identical.
        """
        radius = self.radius if radius is None else int(radius)
        if radius < 1:
            raise ValueError(f"Inpaint radius must be positive, got {radius}")
        self._check_inputs(source, mask)

        if not mask.has_coverage():
            logger.info("Empty mask, returning source unchanged")
            return source

        covered = int(np.count_nonzero(mask.pixels))
        logger.info("Inpainting %d px of %dx%d image (backend=%s, radius=%d)",
                    covered, source.width, source.height, self.backend, radius)
        started = time.perf_counter()
        filled = self.inpaint_repository.fill(source.pixels, mask.pixels, radius)
        logger.info("Inpainting finished in %.2fs", time.perf_counter() - started)
        return Raster(filled)

# services/resolution_service.py
import logging

import cv2

from models.raster import Raster

logger = logging.getLogger(__name__)


class ResolutionService:
    """
    Brings an editing-resolution mask to the exact source size.
    Resampling only; thresholding is FormatService's job.
    """

    @staticmethod
    def reconcile(mask: Raster, target_width: int, target_height: int) -> Raster:
        if target_width <= 0 or target_height <= 0:
            raise ValueError(f"Target size must be positive, got {target_width}x{target_height}")
        if mask.width == target_width and mask.height == target_height:
            return mask

        logger.debug("Resizing mask %dx%d → %dx%d",
                     mask.width, mask.height, target_width, target_height)
        resized = cv2.resize(mask.pixels, (target_width, target_height),
                             interpolation=cv2.INTER_LINEAR)
        return Raster(resized)

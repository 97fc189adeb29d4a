from __future__ import annotations
from dataclasses import dataclass, field
import time

from models.raster import Raster


@dataclass
class InpaintResult:
    """
    Data object pairing the untouched source with the filled-in output.
    Both rasters share width/height; processed only differs inside the mask.
    """
    original: Raster   # source exactly as uploaded (alpha included, if any)
    processed: Raster  # 1- or 3-channel output of the engine
    timestamp: float = field(default_factory=time.time)

    @property
    def download_name(self) -> str:
        return f"cleansweep-edited-{int(self.timestamp * 1000)}.png"

from __future__ import annotations
from pathlib import Path
from typing import Union

from models.raster import Raster
from repositories.raster_repository import RasterRepository, Payload


class RasterService:
    """I/O helpers.  No inpainting logic here."""
    def __init__(self):
        self.raster_repository = RasterRepository()

    def load(self, path: Union[str, Path]) -> Raster:
        """Load a single image from disk into a Raster object."""
        return self.raster_repository.load(path)

    def decode(self, payload: Payload, what: str = "image") -> Raster:
        """
        Decode a base64 data URL (or raw encoded bytes) into a Raster.

        Raises:
            DecodeFailure: the payload is not a readable image.
        """
        return self.raster_repository.decode(payload, what)

    def to_data_url(self, raster: Raster, fmt: str | None = None) -> str:
        return self.raster_repository.to_data_url(raster, fmt)

    def encode(self, raster: Raster, fmt: str | None = None) -> bytes:
        return self.raster_repository.encode(raster, fmt)

    def save(self, raster: Raster, path: Union[str, Path, None] = None) -> Path:
        """
        Business-level method to save the raster to a specific path
        (defaults to raster.path).
        """
        return self.raster_repository.save(raster, path)

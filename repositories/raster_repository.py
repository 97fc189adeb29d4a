from __future__ import annotations
from pathlib import Path
from typing import Union
from io import BytesIO
import base64
import binascii
import os

import numpy as np
import cv2
from PIL import Image as PILImage, UnidentifiedImageError
from dotenv import load_dotenv

from models.errors import DecodeFailure
from models.raster import Raster

# Load environment variables
load_dotenv()

Payload = Union[str, bytes]


class RasterRepository:
    """
    Handles decoding/encoding and file I/O for Raster entities.
    """
    def __init__(self):
        self.JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "95"))
        self.OUTPUT_FORMAT = os.getenv("OUTPUT_IMG_FORMAT", "PNG").upper()

    # ─── decoding ─────────────────────────────────────────────────────
    @staticmethod
    def _payload_bytes(payload: Payload) -> bytes:
        """Accepts a data URL, bare base64 text, or raw encoded bytes."""
        if isinstance(payload, bytes):
            return payload
        if not isinstance(payload, str) or not payload:
            raise DecodeFailure("Empty image payload")
        text = payload.strip()
        if text.startswith("data:"):
            header, _, text = text.partition(",")
            if ";base64" not in header:
                raise DecodeFailure("Only base64 data URLs are supported")
        try:
            return base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as err:
            raise DecodeFailure(f"Invalid base64 image payload: {err}") from err

    @staticmethod
    def _pil_to_pixels(pil_obj: PILImage.Image) -> np.ndarray:
        has_alpha = pil_obj.mode in ("RGBA", "LA", "PA") or "transparency" in pil_obj.info
        if has_alpha:
            pil_obj = pil_obj.convert("RGBA")
        elif pil_obj.mode == "I" or pil_obj.mode.startswith("I;16"):
            # 16-bit samples, same >> 8 scaling as load()
            wide = np.asarray(pil_obj, dtype=np.int64) >> 8
            return np.ascontiguousarray(np.clip(wide, 0, 255).astype(np.uint8))
        elif pil_obj.mode in ("L", "1", "F"):
            pil_obj = pil_obj.convert("L")
        elif pil_obj.mode != "RGB":
            pil_obj = pil_obj.convert("RGB")
        return np.ascontiguousarray(np.asarray(pil_obj, dtype=np.uint8))

    def decode(self, payload: Payload, what: str = "image") -> Raster:
        data = self._payload_bytes(payload)
        try:
            with PILImage.open(BytesIO(data)) as pil_obj:
                pil_obj.load()
                pixels = self._pil_to_pixels(pil_obj)
        except (UnidentifiedImageError, OSError, ValueError) as err:
            raise DecodeFailure(f"Failed to load {what}: {err}") from err
        return Raster(pixels)

    @staticmethod
    def load(path: Union[str, Path]) -> Raster:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise DecodeFailure(f"Image not found or unreadable: {path}")

        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        if arr.ndim == 3 and arr.shape[2] == 4:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        elif arr.ndim == 3 and arr.shape[2] == 3:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
        return Raster(pixels=arr, path=path)

    # ─── encoding ─────────────────────────────────────────────────────
    def encode(self, raster: Raster, fmt: str | None = None) -> bytes:
        fmt = (fmt or self.OUTPUT_FORMAT).upper()
        pil_obj = PILImage.fromarray(np.ascontiguousarray(raster.pixels))
        if fmt == "JPEG" and pil_obj.mode == "RGBA":
            pil_obj = pil_obj.convert("RGB")

        buffer = BytesIO()
        if fmt == "JPEG":
            pil_obj.save(buffer, format="JPEG", quality=self.JPEG_QUALITY)
        else:
            pil_obj.save(buffer, format=fmt)
        return buffer.getvalue()

    def to_data_url(self, raster: Raster, fmt: str | None = None) -> str:
        fmt = (fmt or self.OUTPUT_FORMAT).upper()
        encoded = base64.b64encode(self.encode(raster, fmt)).decode("utf-8")
        return f"data:image/{fmt.lower()};base64,{encoded}"

    def save(self, raster: Raster, path: Union[str, Path, None] = None) -> Path:
        path = Path(path or raster.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fmt = PILImage.registered_extensions().get(path.suffix.lower(), "PNG")
        path.write_bytes(self.encode(raster, fmt))
        return path

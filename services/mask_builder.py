# services/mask_builder.py
"""
Accumulates brush strokes into a binary mask at editing resolution.

Idle --begin_stroke--> Stroking --continue_stroke--> Stroking --end_stroke--> Idle

Paint is solid: every covered pixel becomes exactly 255 (no anti-aliasing),
segments get round caps and round joins.
"""
from __future__ import annotations
from enum import Enum
import logging
import os

import cv2
import numpy as np
from dotenv import load_dotenv

from models.editing_surface import Point
from models.errors import StrokeStateError
from models.raster import Raster
from models.stroke import Stroke

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

PAINT = 255


class StrokeState(str, Enum):
    IDLE = "IDLE"
    STROKING = "STROKING"


class MaskBuilder:
    def __init__(self, width: int, height: int, brush_radius: int | None = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Mask must have a positive area, got {width}x{height}")
        self.width = width
        self.height = height
        self.radius_min = int(os.getenv("BRUSH_RADIUS_MIN", "2"))
        self.radius_max = int(os.getenv("BRUSH_RADIUS_MAX", "50"))
        self.brush_radius = self._checked_radius(
            brush_radius if brush_radius is not None else int(os.getenv("BRUSH_RADIUS", "20"))
        )
        self._mask = np.zeros((height, width), dtype=np.uint8)
        self.state = StrokeState.IDLE
        self._anchor: tuple[int, int] | None = None

    # ---------- private helpers ----------
    def _checked_radius(self, radius: int) -> int:
        radius = int(radius)
        if not self.radius_min <= radius <= self.radius_max:
            raise ValueError(f"Brush radius must be within [{self.radius_min}, {self.radius_max}], got {radius}")
        return radius

    @staticmethod
    def _pixel(point: Point) -> tuple[int, int]:
        return int(round(point[0])), int(round(point[1]))

    def _disc(self, centre: tuple[int, int]) -> None:
        cv2.circle(self._mask, centre, self.brush_radius, PAINT, thickness=-1, lineType=cv2.LINE_8)

    # ---------- public API ----------
    def set_brush_radius(self, radius: int) -> None:
        self.brush_radius = self._checked_radius(radius)

    def begin_stroke(self, point: Point) -> None:
        if self.state is StrokeState.STROKING:
            raise StrokeStateError("begin_stroke called while a stroke is already in progress")
        self.state = StrokeState.STROKING
        self._anchor = self._pixel(point)
        self._disc(self._anchor)

    def continue_stroke(self, point: Point) -> None:
        if self.state is not StrokeState.STROKING:
            raise StrokeStateError("continue_stroke called without begin_stroke")
        end = self._pixel(point)
        cv2.line(self._mask, self._anchor, end, PAINT,
                 thickness=2 * self.brush_radius + 1, lineType=cv2.LINE_8)
        # round caps / joins
        self._disc(self._anchor)
        self._disc(end)
        self._anchor = end

    def end_stroke(self) -> None:
        if self.state is not StrokeState.STROKING:
            raise StrokeStateError("end_stroke called without begin_stroke")
        self.state = StrokeState.IDLE
        self._anchor = None

    def apply_stroke(self, stroke: Stroke) -> None:
        """Replay a complete Stroke using its own radius."""
        if not stroke.points:
            return
        previous = self.brush_radius
        self.brush_radius = self._checked_radius(stroke.radius)
        try:
            self.begin_stroke(stroke.points[0])
            for point in stroke.points[1:]:
                self.continue_stroke(point)
            self.end_stroke()
        finally:
            self.brush_radius = previous

    def clear(self) -> None:
        self._mask.fill(0)
        self.state = StrokeState.IDLE
        self._anchor = None

    def has_coverage(self) -> bool:
        return bool(np.any(self._mask))

    def to_raster(self) -> Raster:
        """Snapshot of the mask; later strokes do not affect it."""
        return Raster(self._mask.copy())

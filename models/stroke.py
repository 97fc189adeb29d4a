from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from models.editing_surface import Point


@dataclass
class Stroke:
    """
    One pointer-down → pointer-up gesture in editing coordinates.
    Consumed by the MaskBuilder and then thrown away (no undo history).
    """
    radius: int
    points: List[Point] = field(default_factory=list)

    def add(self, x: float, y: float) -> None:
        self.points.append(Point(float(x), float(y)))

    def __len__(self) -> int:
        return len(self.points)

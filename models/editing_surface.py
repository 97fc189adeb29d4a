from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class EditingSurface:
    """
    The drawable rectangle the user paints on, fitted inside a container.

    display_width/display_height : size of the fitted rectangle (editing resolution)
    scale_to_source              : source_width / display_width
    origin_x/origin_y            : top-left of the fitted rectangle in container coords
    """
    display_width: int
    display_height: int
    scale_to_source: float
    origin_x: float = 0.0
    origin_y: float = 0.0
    source_width: int | None = None
    source_height: int | None = None

    def __post_init__(self):
        if self.display_width <= 0 or self.display_height <= 0:
            raise ValueError(f"Surface must have a positive area, got {self.display_width}x{self.display_height}")
        if self.scale_to_source <= 0:
            raise ValueError(f"scale_to_source must be positive, got {self.scale_to_source}")

    @classmethod
    def fit(
        cls,
        source_width: int,
        source_height: int,
        container_width: int,
        container_height: int,
    ) -> "EditingSurface":
        """
        Fit the source into the container keeping its aspect ratio.

        The fitted rectangle is centered, so a source whose aspect ratio
        differs from the container's gets letterbox/pillarbox margins that
        show up as a non-zero origin.
        """
        if min(source_width, source_height, container_width, container_height) <= 0:
            raise ValueError("Source and container dimensions must be positive")

        ratio = min(container_width / source_width, container_height / source_height)
        draw_w = max(1, int(round(source_width * ratio)))
        draw_h = max(1, int(round(source_height * ratio)))

        return cls(
            display_width=draw_w,
            display_height=draw_h,
            scale_to_source=source_width / draw_w,
            origin_x=(container_width - draw_w) / 2,
            origin_y=(container_height - draw_h) / 2,
            source_width=source_width,
            source_height=source_height,
        )

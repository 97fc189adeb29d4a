# services/coordinate_service.py
from models.editing_surface import EditingSurface, Point


class CoordinateService:
    """
    Maps between container (pointer) coordinates and source pixel coordinates.

    Mapping is relative to the fitted rectangle's origin and never clamps;
    pointer input goes through clamp_to_surface() first.
    """

    @staticmethod
    def to_source(point: Point, surface: EditingSurface) -> Point:
        return Point(
            (point[0] - surface.origin_x) * surface.scale_to_source,
            (point[1] - surface.origin_y) * surface.scale_to_source,
        )

    @staticmethod
    def to_display(point: Point, surface: EditingSurface) -> Point:
        return Point(
            point[0] / surface.scale_to_source + surface.origin_x,
            point[1] / surface.scale_to_source + surface.origin_y,
        )

    @staticmethod
    def clamp_to_surface(point: Point, surface: EditingSurface) -> Point:
        """Clamp a container point onto the fitted rectangle."""
        x = min(max(point[0], surface.origin_x), surface.origin_x + surface.display_width)
        y = min(max(point[1], surface.origin_y), surface.origin_y + surface.display_height)
        return Point(x, y)

    @staticmethod
    def to_editing(point: Point, surface: EditingSurface) -> Point:
        """
        Container point → editing-mask pixel coordinates (clamped).
        This is what the MaskBuilder paints with.
        """
        x, y = CoordinateService.clamp_to_surface(point, surface)
        return Point(x - surface.origin_x, y - surface.origin_y)

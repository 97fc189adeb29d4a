import pytest

from models.editing_surface import EditingSurface, Point
from services.coordinate_service import CoordinateService


def test_fit_wide_source_letterboxes_vertically():
    surface = EditingSurface.fit(1920, 1080, 960, 640)
    assert surface.display_width == 960
    assert surface.display_height == 540
    assert surface.scale_to_source == pytest.approx(2.0)
    assert surface.origin_x == 0
    assert surface.origin_y == pytest.approx(50.0)


def test_fit_tall_source_pillarboxes():
    surface = EditingSurface.fit(1000, 2000, 800, 500)
    assert surface.display_height == 500
    assert surface.display_width == 250
    assert surface.origin_x == pytest.approx(275.0)
    assert surface.origin_y == 0
    assert surface.scale_to_source == pytest.approx(4.0)


def test_to_source_is_relative_to_fitted_origin():
    surface = EditingSurface.fit(1920, 1080, 960, 640)
    assert CoordinateService.to_source(Point(0, 50), surface) == pytest.approx((0.0, 0.0))
    assert CoordinateService.to_source(Point(480, 320), surface) == pytest.approx((960.0, 540.0))


def test_plain_scaling():
    surface = EditingSurface(display_width=480, display_height=270, scale_to_source=4.0)
    assert CoordinateService.to_source(Point(100, 100), surface) == pytest.approx((400.0, 400.0))
    assert CoordinateService.to_display(Point(400, 400), surface) == pytest.approx((100.0, 100.0))


@pytest.mark.parametrize("surface", [
    EditingSurface.fit(1920, 1080, 480, 270),
    EditingSurface.fit(3000, 1000, 700, 700),
    EditingSurface.fit(123, 457, 1000, 300),
    EditingSurface(display_width=64, display_height=48, scale_to_source=1.0),
])
@pytest.mark.parametrize("point", [Point(0, 0), Point(13.25, 7.5), Point(1919.9, 1079.1), Point(-5, 3)])
def test_round_trip(surface, point):
    back = CoordinateService.to_source(CoordinateService.to_display(point, surface), surface)
    assert back == pytest.approx(point)


def test_mapping_does_not_clamp():
    surface = EditingSurface(display_width=100, display_height=50, scale_to_source=2.0)
    assert CoordinateService.to_source(Point(150, -10), surface) == pytest.approx((300.0, -20.0))


def test_to_editing_clamps_to_fitted_rectangle():
    surface = EditingSurface.fit(1920, 1080, 960, 640)
    assert CoordinateService.to_editing(Point(-20, 10), surface) == pytest.approx((0.0, 0.0))
    assert CoordinateService.to_editing(Point(2000, 700), surface) == pytest.approx((960.0, 540.0))
    assert CoordinateService.to_editing(Point(100, 150), surface) == pytest.approx((100.0, 100.0))


def test_surface_rejects_bad_values():
    with pytest.raises(ValueError):
        EditingSurface(display_width=0, display_height=10, scale_to_source=1.0)
    with pytest.raises(ValueError):
        EditingSurface(display_width=10, display_height=10, scale_to_source=0.0)
    with pytest.raises(ValueError):
        EditingSurface.fit(0, 10, 100, 100)

import numpy as np
import pytest

from models.editing_surface import Point
from models.errors import StrokeStateError
from models.stroke import Stroke
from services.mask_builder import MaskBuilder, StrokeState


@pytest.fixture
def builder():
    return MaskBuilder(200, 100, brush_radius=5)


def test_starts_idle_and_empty(builder):
    assert builder.state is StrokeState.IDLE
    assert not builder.has_coverage()
    assert builder.to_raster().pixels.shape == (100, 200)


def test_begin_stroke_paints_solid_disc(builder):
    builder.begin_stroke(Point(50, 50))
    mask = builder.to_raster().pixels

    assert builder.state is StrokeState.STROKING
    assert mask[50, 50] == 255
    assert mask[50, 55] == 255   # on the radius
    assert mask[50, 57] == 0
    assert mask[56, 50] == 0
    # binary paint only
    assert set(np.unique(mask)) <= {0, 255}


def test_continue_stroke_draws_capsule(builder):
    builder.begin_stroke(Point(20, 50))
    builder.continue_stroke(Point(120, 50))
    mask = builder.to_raster().pixels

    assert (mask[50, 20:121] == 255).all()
    assert mask[46, 70] == 255
    assert mask[54, 70] == 255
    assert mask[50, 124] == 255  # round cap past the end point
    assert mask[50, 127] == 0
    assert set(np.unique(mask)) <= {0, 255}


def test_end_stroke_drops_anchor(builder):
    builder.begin_stroke(Point(20, 20))
    builder.end_stroke()
    assert builder.state is StrokeState.IDLE

    builder.begin_stroke(Point(150, 80))
    builder.end_stroke()
    mask = builder.to_raster().pixels
    # no segment joining the two strokes
    assert mask[50, 85] == 0


def test_state_errors(builder):
    with pytest.raises(StrokeStateError):
        builder.continue_stroke(Point(1, 1))
    with pytest.raises(StrokeStateError):
        builder.end_stroke()
    builder.begin_stroke(Point(1, 1))
    with pytest.raises(StrokeStateError):
        builder.begin_stroke(Point(2, 2))


@pytest.mark.parametrize("stroking", [False, True])
def test_clear_in_either_state(builder, stroking):
    builder.begin_stroke(Point(30, 30))
    if not stroking:
        builder.end_stroke()
    builder.clear()
    assert not builder.has_coverage()
    assert builder.state is StrokeState.IDLE


def test_snapshot_is_not_live(builder):
    snapshot = builder.to_raster()
    builder.begin_stroke(Point(30, 30))
    assert not snapshot.has_coverage()


def test_apply_stroke_uses_stroke_radius(builder):
    stroke = Stroke(radius=10)
    stroke.add(100, 50)
    stroke.add(100, 60)
    builder.apply_stroke(stroke)

    mask = builder.to_raster().pixels
    assert mask[50, 109] == 255
    assert builder.brush_radius == 5
    assert builder.state is StrokeState.IDLE


def test_points_off_canvas_are_clipped(builder):
    builder.begin_stroke(Point(-3, -3))
    mask = builder.to_raster().pixels
    assert mask[0, 0] == 255


def test_brush_radius_bounds(builder):
    builder.set_brush_radius(12)
    assert builder.brush_radius == 12
    with pytest.raises(ValueError):
        builder.set_brush_radius(500)
    with pytest.raises(ValueError):
        MaskBuilder(10, 10, brush_radius=0)

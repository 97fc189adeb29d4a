import numpy as np
import pytest

from models.errors import DimensionMismatch
from models.raster import Raster
from services.comparison_service import ComparisonService


@pytest.fixture
def pair():
    original = Raster(np.full((4, 10, 3), 10, dtype=np.uint8))
    processed = Raster(np.full((4, 10, 3), 200, dtype=np.uint8))
    return original, processed


@pytest.mark.parametrize("reveal, expected", [(-1.0, 0.0), (0.0, 0.0), (0.3, 0.3), (1.0, 1.0), (7.0, 1.0),
                                              (float("nan"), 0.0)])
def test_clamp(reveal, expected):
    assert ComparisonService.clamp_reveal(reveal) == expected


def test_zero_shows_processed_everywhere(pair):
    original, processed = pair
    out = ComparisonService().composite(original, processed, 0.0)
    assert np.array_equal(out.pixels, processed.pixels)


def test_one_shows_original_everywhere(pair):
    original, processed = pair
    out = ComparisonService().composite(original, processed, 1.0)
    assert np.array_equal(out.pixels, original.pixels)


def test_out_of_range_is_clamped(pair):
    original, processed = pair
    service = ComparisonService()
    assert np.array_equal(service.composite(original, processed, -3).pixels, processed.pixels)
    assert np.array_equal(service.composite(original, processed, 3).pixels, original.pixels)


def test_split(pair):
    original, processed = pair
    out = ComparisonService().composite(original, processed, 0.3)
    assert (out.pixels[:, :3] == 10).all()
    assert (out.pixels[:, 3:] == 200).all()
    # inputs untouched
    assert (original.pixels == 10).all()
    assert (processed.pixels == 200).all()


def test_reveal_from_pointer_mouse_or_touch():
    assert ComparisonService.reveal_from_pointer(150, 100, 200) == pytest.approx(0.25)
    assert ComparisonService.reveal_from_pointer(50, 100, 200) == 0.0
    assert ComparisonService.reveal_from_pointer(400, 100, 200) == 1.0
    with pytest.raises(ValueError):
        ComparisonService.reveal_from_pointer(10, 0, 0)


def test_rgba_original_against_rgb_processed():
    original = Raster(np.full((2, 4, 4), 50, dtype=np.uint8))
    processed = Raster(np.full((2, 4, 3), 60, dtype=np.uint8))
    out = ComparisonService().composite(original, processed, 0.5)
    assert out.channels == 3
    assert out.pixels[0, 0].tolist() == [50, 50, 50]
    assert out.pixels[0, 3].tolist() == [60, 60, 60]


def test_size_mismatch(pair):
    original, _ = pair
    with pytest.raises(DimensionMismatch):
        ComparisonService().composite(original, Raster(np.zeros((5, 5, 3), dtype=np.uint8)), 0.5)

import numpy as np
import pytest

from models.errors import UnsupportedFormat
from models.raster import Raster


def test_channels_and_size():
    rgb = Raster(np.zeros((10, 20, 3), dtype=np.uint8))
    assert (rgb.width, rgb.height, rgb.channels) == (20, 10, 3)

    gray = Raster(np.zeros((10, 20), dtype=np.uint8))
    assert gray.channels == 1


def test_single_channel_3d_is_squeezed():
    raster = Raster(np.zeros((5, 6, 1), dtype=np.uint8))
    assert raster.pixels.shape == (5, 6)
    assert raster.channels == 1


@pytest.mark.parametrize("pixels", [
    np.zeros((4, 4, 2), dtype=np.uint8),
    np.zeros((4, 4, 5), dtype=np.uint8),
    np.zeros((4, 4, 3), dtype=np.float32),
    np.zeros((0, 4), dtype=np.uint8),
    np.zeros((4,), dtype=np.uint8),
])
def test_rejects_unsupported_layouts(pixels):
    with pytest.raises(UnsupportedFormat):
        Raster(pixels)


def test_has_coverage():
    mask = np.zeros((4, 4), dtype=np.uint8)
    assert not Raster(mask).has_coverage()
    mask[1, 2] = 1
    assert Raster(mask).has_coverage()


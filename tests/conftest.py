import numpy as np
import pytest

from models.inpaint_engine import InpaintEngine
from models.raster import Raster


@pytest.fixture(autouse=True)
def _fresh_engines():
    InpaintEngine.reset()
    yield
    InpaintEngine.reset()


@pytest.fixture
def gradient_rgb():
    """64x48 RGB image with smooth horizontal/vertical ramps."""
    h, w = 48, 64
    ys, xs = np.mgrid[0:h, 0:w]
    pixels = np.stack([xs * 4, ys * 5, (xs + ys) * 2], axis=2).astype(np.uint8)
    return Raster(pixels)


@pytest.fixture
def square_mask():
    """64x48 mask with a 10x10 hole in the middle."""
    mask = np.zeros((48, 64), dtype=np.uint8)
    mask[19:29, 27:37] = 255
    return Raster(mask)


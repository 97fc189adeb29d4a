import numpy as np

from models.raster import Raster
from services.resolution_service import ResolutionService


def _disc_mask():
    mask = np.zeros((27, 48), dtype=np.uint8)
    mask[10:16, 20:28] = 255
    return Raster(mask)


def test_identity_when_sizes_match():
    mask = _disc_mask()
    assert ResolutionService.reconcile(mask, 48, 27) is mask


def test_upscales_to_target():
    mask = _disc_mask()
    resized = ResolutionService.reconcile(mask, 192, 108)
    assert (resized.width, resized.height) == (192, 108)
    assert resized.pixels[52, 96] == 255
    assert resized.pixels[0, 0] == 0
    # source buffer untouched
    assert mask.pixels.shape == (27, 48)


def test_bilinear_leaves_intermediate_values():
    mask = _disc_mask()
    resized = ResolutionService.reconcile(mask, 192, 108)
    values = set(np.unique(resized.pixels))
    assert values - {0, 255}


def test_idempotent():
    mask = _disc_mask()
    once = ResolutionService.reconcile(mask, 100, 70)
    twice = ResolutionService.reconcile(once, 100, 70)
    assert np.array_equal(once.pixels, twice.pixels)


def test_multichannel_mask_keeps_channels():
    rgba = np.zeros((10, 10, 4), dtype=np.uint8)
    rgba[2:5, 2:5] = (255, 0, 0, 255)
    resized = ResolutionService.reconcile(Raster(rgba), 40, 40)
    assert resized.pixels.shape == (40, 40, 4)

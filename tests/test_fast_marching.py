import numpy as np
import pytest

from models.fast_marching import FastMarchingInpainter, scratch_buffers


def test_flat_image_fills_with_the_same_colour():
    pixels = np.full((30, 30, 3), (90, 140, 200), dtype=np.uint8)
    pixels[10:20, 10:20] = (255, 0, 0)  # defect
    mask = np.zeros((30, 30), dtype=np.uint8)
    mask[10:20, 10:20] = 255

    out = FastMarchingInpainter(radius=3).inpaint(pixels, mask)

    assert (np.abs(out[10:20, 10:20].astype(int) - (90, 140, 200)) <= 1).all()


def test_unmasked_pixels_untouched(gradient_rgb, square_mask):
    out = FastMarchingInpainter(radius=3).inpaint(gradient_rgb.pixels, square_mask.pixels)
    keep = square_mask.pixels == 0
    assert np.array_equal(out[keep], gradient_rgb.pixels[keep])
    assert out.dtype == np.uint8


def test_fill_follows_a_vertical_edge():
    # left half dark, right half bright; hole straddles the edge
    pixels = np.zeros((40, 40), dtype=np.uint8)
    pixels[:, 20:] = 200
    mask = np.zeros((40, 40), dtype=np.uint8)
    mask[15:25, 14:26] = 255

    out = FastMarchingInpainter(radius=4).inpaint(pixels, mask)

    assert out[20, 15] < 100
    assert out[20, 24] > 100


def test_gray_input_keeps_shape():
    pixels = np.arange(100, dtype=np.uint8).reshape(10, 10)
    mask = np.zeros((10, 10), dtype=np.uint8)
    mask[4:6, 4:6] = 255
    out = FastMarchingInpainter().inpaint(pixels, mask)
    assert out.shape == (10, 10)


def test_deterministic(gradient_rgb, square_mask):
    engine = FastMarchingInpainter(radius=3)
    first = engine.inpaint(gradient_rgb.pixels, square_mask.pixels)
    second = engine.inpaint(gradient_rgb.pixels, square_mask.pixels)
    assert np.array_equal(first, second)


def test_empty_mask_returns_copy(gradient_rgb):
    mask = np.zeros((gradient_rgb.height, gradient_rgb.width), dtype=np.uint8)
    out = FastMarchingInpainter().inpaint(gradient_rgb.pixels, mask)
    assert np.array_equal(out, gradient_rgb.pixels)
    assert out is not gradient_rgb.pixels


def test_full_mask_has_nothing_to_propagate():
    pixels = np.full((5, 5, 3), 33, dtype=np.uint8)
    mask = np.full((5, 5), 255, dtype=np.uint8)
    out = FastMarchingInpainter().inpaint(pixels, mask)
    assert np.array_equal(out, pixels)


def test_mask_touching_the_border():
    pixels = np.full((20, 20, 3), 77, dtype=np.uint8)
    pixels[:4, :4] = 0
    mask = np.zeros((20, 20), dtype=np.uint8)
    mask[:4, :4] = 255
    out = FastMarchingInpainter().inpaint(pixels, mask)
    assert (np.abs(out[:4, :4].astype(int) - 77) <= 1).all()


def test_input_not_modified(gradient_rgb, square_mask):
    before = gradient_rgb.pixels.copy()
    FastMarchingInpainter().inpaint(gradient_rgb.pixels, square_mask.pixels)
    assert np.array_equal(gradient_rgb.pixels, before)


def test_scratch_released_on_error():
    with pytest.raises(RuntimeError):
        with scratch_buffers(4, 4, 3) as scratch:
            assert scratch.nbytes > 0
            raise RuntimeError("boom")
    assert scratch.released
    assert scratch.values is None


def test_radius_must_be_positive():
    with pytest.raises(ValueError):
        FastMarchingInpainter(radius=0)

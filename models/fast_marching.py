# models/fast_marching.py
"""
Native Fast Marching inpainting (Telea, 2004) on NumPy arrays.

• Masked pixels are visited in order of increasing distance T from the
  mask boundary (a heap-driven fast-marching front).
• Each visited pixel becomes a weighted average of already-known pixels
  within `radius`. Weights favour the level-set normal direction, nearby
  pixels and pixels lying on the same level set.
• Unmasked pixels are never written.

Working arrays live in a ScratchBuffers object that is owned by exactly one
run and released on every exit path.
"""
from __future__ import annotations

import heapq
import logging
from contextlib import contextmanager
from math import sqrt
from typing import Iterator, List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

KNOWN = 0
BAND = 1
INSIDE = 2

INF = 1.0e6
EPS = 1.0e-6

_NEIGHBOURS = ((-1, 0), (0, -1), (1, 0), (0, 1))

HeapItem = Tuple[float, int, int]


class ScratchBuffers:
    """Per-run working memory: flags, arrival times and float pixel values."""

    def __init__(self, height: int, width: int, channels: int):
        self.flags = np.empty((height, width), dtype=np.uint8)
        self.dists = np.empty((height, width), dtype=np.float64)
        self.values = np.empty((height, width, channels), dtype=np.float64)
        self.outside_flags = np.empty((height, width), dtype=np.uint8)
        self.outside_dists = np.empty((height, width), dtype=np.float64)
        self.released = False

    @property
    def nbytes(self) -> int:
        if self.released:
            return 0
        return sum(a.nbytes for a in (self.flags, self.dists, self.values,
                                      self.outside_flags, self.outside_dists))

    def release(self) -> None:
        self.flags = self.dists = self.values = None
        self.outside_flags = self.outside_dists = None
        self.released = True


@contextmanager
def scratch_buffers(height: int, width: int, channels: int) -> Iterator[ScratchBuffers]:
    buffers = ScratchBuffers(height, width, channels)
    logger.debug("Acquired %.1f MB of inpaint scratch for %dx%dx%d",
                 buffers.nbytes / 1e6, width, height, channels)
    try:
        yield buffers
    finally:
        buffers.release()
        logger.debug("Released inpaint scratch")


def _solve_eikonal(y1: int, x1: int, y2: int, x2: int,
                   dists: np.ndarray, flags: np.ndarray) -> float:
    """
    Arrival time at the pixel whose two axis neighbours are (y1,x1), (y2,x2).
    Only KNOWN neighbours contribute.
    """
    height, width = flags.shape
    if not (0 <= y1 < height and 0 <= x1 < width):
        return INF
    if not (0 <= y2 < height and 0 <= x2 < width):
        return INF

    known1 = flags[y1, x1] == KNOWN
    known2 = flags[y2, x2] == KNOWN
    if known1 and known2:
        d1 = dists[y1, x1]
        d2 = dists[y2, x2]
        disc = 2.0 - (d1 - d2) ** 2
        if disc > 0.0:
            r = sqrt(disc)
            s = (d1 + d2 - r) / 2.0
            if s >= d1 and s >= d2:
                return s
            s += r
            if s >= d1 and s >= d2:
                return s
        return 1.0 + min(d1, d2)
    if known1:
        return 1.0 + dists[y1, x1]
    if known2:
        return 1.0 + dists[y2, x2]
    return INF


def _arrival_time(y: int, x: int, dists: np.ndarray, flags: np.ndarray) -> float:
    return min(
        _solve_eikonal(y - 1, x, y, x - 1, dists, flags),
        _solve_eikonal(y + 1, x, y, x + 1, dists, flags),
        _solve_eikonal(y - 1, x, y, x + 1, dists, flags),
        _solve_eikonal(y + 1, x, y, x - 1, dists, flags),
    )


def _axis_gradient(centre: float, prev_val: float | None, next_val: float | None) -> float:
    # prev/next are None when out of bounds or not yet resolved
    if prev_val is not None and next_val is not None:
        return (next_val - prev_val) / 2.0
    if prev_val is not None:
        return centre - prev_val
    if next_val is not None:
        return next_val - centre
    return 0.0


def _dist_gradient(y: int, x: int, dists: np.ndarray, flags: np.ndarray) -> Tuple[float, float]:
    """Central/one-sided difference of T at (y, x), skipping unresolved pixels."""
    height, width = flags.shape

    def resolved(yy: int, xx: int):
        if 0 <= yy < height and 0 <= xx < width and flags[yy, xx] != INSIDE:
            return dists[yy, xx]
        return None

    centre = dists[y, x]
    grad_y = _axis_gradient(centre, resolved(y - 1, x), resolved(y + 1, x))
    grad_x = _axis_gradient(centre, resolved(y, x - 1), resolved(y, x + 1))
    return grad_y, grad_x


class FastMarchingInpainter:
    """Telea inpainting implemented with a heap-ordered marching front."""

    def __init__(self, radius: int = 3) -> None:
        if int(radius) < 1:
            raise ValueError("radius must be positive")
        self.radius = int(radius)

    # ---------- public API ----------
    def inpaint(self, pixels: np.ndarray, mask: np.ndarray) -> np.ndarray:
        """
        Args
        ----
        pixels : np.ndarray  (H, W) or (H, W, 3)  uint8
        mask   : np.ndarray  (H, W)  uint8, non-zero marks pixels to fill

        Returns
        -------
        np.ndarray  same shape/dtype as *pixels*; a new array.
        """
        to_fill = mask != 0
        out = pixels.copy()
        if not to_fill.any():
            return out

        height, width = to_fill.shape
        gray = pixels.ndim == 2
        channels = 1 if gray else pixels.shape[2]

        with scratch_buffers(height, width, channels) as scratch:
            self._initialise(scratch, pixels, to_fill)
            band = self._initial_band(scratch, to_fill)
            if not band:
                logger.warning("Mask covers the whole image; nothing to propagate from")
                return out
            self._compute_outside_dists(scratch, band)
            self._march(scratch, band)

            filled = np.clip(np.rint(scratch.values), 0, 255).astype(np.uint8)

        if gray:
            filled = filled[:, :, 0]
        out[to_fill] = filled[to_fill]
        return out

    # ---------- private helpers ----------
    @staticmethod
    def _initialise(scratch: ScratchBuffers, pixels: np.ndarray, to_fill: np.ndarray) -> None:
        scratch.flags.fill(KNOWN)
        scratch.flags[to_fill] = INSIDE
        scratch.dists.fill(0.0)
        scratch.dists[to_fill] = INF
        scratch.values[:] = pixels.reshape(scratch.values.shape)

    @staticmethod
    def _initial_band(scratch: ScratchBuffers, to_fill: np.ndarray) -> List[HeapItem]:
        """Known pixels 4-adjacent to the mask, all at T = 0."""
        touches = np.zeros_like(to_fill)
        touches[1:, :] |= to_fill[:-1, :]
        touches[:-1, :] |= to_fill[1:, :]
        touches[:, 1:] |= to_fill[:, :-1]
        touches[:, :-1] |= to_fill[:, 1:]
        edge = touches & ~to_fill

        scratch.flags[edge] = BAND
        ys, xs = np.nonzero(edge)
        band = [(0.0, int(y), int(x)) for y, x in zip(ys, xs)]
        heapq.heapify(band)
        return band

    def _compute_outside_dists(self, scratch: ScratchBuffers, band: List[HeapItem]) -> None:
        """
        March outward (into the known region) up to 2 * radius so that known
        pixels near the boundary carry a signed distance (negative outside).
        """
        flags = scratch.outside_flags
        dists = scratch.outside_dists
        flags[:] = scratch.flags
        flags[scratch.flags == KNOWN] = INSIDE
        flags[scratch.flags == INSIDE] = KNOWN
        dists.fill(0.0)
        dists[flags == INSIDE] = INF

        height, width = flags.shape
        heap = list(band)
        limit = 2.0 * self.radius
        last = 0.0
        while heap and last < limit:
            _, y, x = heapq.heappop(heap)
            flags[y, x] = KNOWN
            for dy, dx in _NEIGHBOURS:
                ny, nx = y + dy, x + dx
                if not (0 <= ny < height and 0 <= nx < width):
                    continue
                if flags[ny, nx] != INSIDE:
                    continue
                last = _arrival_time(ny, nx, dists, flags)
                dists[ny, nx] = last
                flags[ny, nx] = BAND
                heapq.heappush(heap, (last, ny, nx))

        reached = (flags != INSIDE) & (scratch.flags == KNOWN)
        scratch.dists[reached] = -dists[reached]

    def _march(self, scratch: ScratchBuffers, band: List[HeapItem]) -> None:
        flags = scratch.flags
        dists = scratch.dists
        height, width = flags.shape
        heap = band
        while heap:
            _, y, x = heapq.heappop(heap)
            flags[y, x] = KNOWN
            for dy, dx in _NEIGHBOURS:
                ny, nx = y + dy, x + dx
                if not (0 <= ny < height and 0 <= nx < width):
                    continue
                if flags[ny, nx] != INSIDE:
                    continue
                dists[ny, nx] = _arrival_time(ny, nx, dists, flags)
                self._inpaint_pixel(ny, nx, scratch)
                flags[ny, nx] = BAND
                heapq.heappush(heap, (dists[ny, nx], ny, nx))

    def _inpaint_pixel(self, y: int, x: int, scratch: ScratchBuffers) -> None:
        r = self.radius
        flags = scratch.flags
        dists = scratch.dists
        height, width = flags.shape

        grad_y, grad_x = _dist_gradient(y, x, dists, flags)

        y0, y1 = max(0, y - r), min(height, y + r + 1)
        x0, x1 = max(0, x - r), min(width, x + r + 1)

        dir_y = (y - np.arange(y0, y1, dtype=np.float64))[:, None]
        dir_x = (x - np.arange(x0, x1, dtype=np.float64))[None, :]
        len_sq = dir_y ** 2 + dir_x ** 2
        usable = (flags[y0:y1, x0:x1] != INSIDE) & (len_sq <= r * r) & (len_sq > 0)
        if not usable.any():
            return

        len_sq = np.where(usable, len_sq, 1.0)
        dir_factor = np.abs(dir_y * grad_y + dir_x * grad_x)
        dir_factor = np.where(dir_factor == 0.0, EPS, dir_factor)
        level_factor = 1.0 / (1.0 + np.abs(dists[y0:y1, x0:x1] - dists[y, x]))
        dist_factor = 1.0 / (np.sqrt(len_sq) * len_sq)

        weights = np.where(usable, dir_factor * dist_factor * level_factor, 0.0)
        total = weights.sum()
        if total <= 0.0:
            return
        window = scratch.values[y0:y1, x0:x1]
        scratch.values[y, x] = np.tensordot(weights, window, axes=([0, 1], [0, 1])) / total

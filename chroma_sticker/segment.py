from __future__ import annotations

import logging

import numpy as np

from .config import FLOOD_TOLERANCE, ISLAND_TOLERANCE
from .contracts import Color, PixelBuffer

logger = logging.getLogger(__name__)


def background_match_mask(buf: PixelBuffer, bg: Color, tolerance: float) -> np.ndarray:
    """
    Flat (w*h,) bool mask of pixels close to `bg` AND green-dominant.

    Closeness is squared RGB distance < tolerance**2 (no square root). Alpha is ignored.
    """
    rgb = buf.rgba[..., :3].reshape(-1, 3).astype(np.int32)
    diff = rgb - np.asarray(bg, dtype=np.int32).reshape(1, 3)
    dist_sq = (diff * diff).sum(axis=1)
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    tol_sq = float(tolerance) * float(tolerance)
    return (dist_sq < tol_sq) & (g > r) & (g > b)


def flood_fill_background(buf: PixelBuffer, bg: Color, tolerance: float = FLOOD_TOLERANCE) -> int:
    """
    Border-seeded, 4-connected flood fill; every reached pixel gets alpha 0 in place.

    Iterative (explicit stack) so large images never hit a recursion limit.
    The match test is pixel-local, so the reached set does not depend on
    traversal order. RGB channels are left untouched.

    Returns the number of pixels reached.
    """
    w, h = buf.width, buf.height
    matches = bytearray(background_match_mask(buf, bg, tolerance).astype(np.uint8).tobytes())
    visited = bytearray(w * h)
    stack = []

    def push(x: int, y: int) -> None:
        if x < 0 or x >= w or y < 0 or y >= h:
            return
        idx = y * w + x
        if visited[idx] or not matches[idx]:
            return
        visited[idx] = 1
        stack.append(idx)

    # Seed borders
    for x in range(w):
        push(x, 0)
        push(x, h - 1)
    for y in range(h):
        push(0, y)
        push(w - 1, y)

    data = buf.data
    reached = 0
    while stack:
        idx = stack.pop()
        data[idx * 4 + 3] = 0
        reached += 1

        x = idx % w
        y = idx // w
        push(x + 1, y)
        push(x - 1, y)
        push(x, y + 1)
        push(x, y - 1)

    logger.debug("flood fill cleared %d/%d pixels (bg=%s, tol=%s)", reached, w * h, bg, tolerance)
    return reached


def clean_islands(buf: PixelBuffer, bg: Color, tolerance: float = ISLAND_TOLERANCE) -> int:
    """
    Global raster pass: clear still-opaque pixels that match the background
    under the tighter island tolerance. Catches enclosed background pockets
    the border flood could not reach.
    """
    alpha = buf.data[3::4]
    hit = (alpha > 0) & background_match_mask(buf, bg, tolerance)
    alpha[hit] = 0
    cleared = int(hit.sum())
    logger.debug("island cleanup cleared %d pixels", cleared)
    return cleared

from __future__ import annotations

import logging

import numpy as np

from .contracts import PixelBuffer

logger = logging.getLogger(__name__)


def transparent_neighbour_mask(alpha: np.ndarray) -> np.ndarray:
    """
    (H, W) bool: True where any in-bounds up/down/left/right neighbour has alpha == 0.

    Neighbours outside the image never count as transparent.
    """
    clear = alpha == 0
    out = np.zeros_like(clear)
    out[1:, :] |= clear[:-1, :]  # up
    out[:-1, :] |= clear[1:, :]  # down
    out[:, 1:] |= clear[:, :-1]  # left
    out[:, :-1] |= clear[:, 1:]  # right
    return out


def despill_edges(buf: PixelBuffer) -> int:
    """
    Neutralize green halo on edge pixels, in place.

    Edge classification reads only from a snapshot taken before any write, so
    a pixel changed in this pass never influences another pixel's test. For
    opaque edge pixels where g > r and g > b, g is clamped to max(r, b).

    Returns the number of pixels despilled.
    """
    snapshot = buf.rgba.copy()
    live = buf.rgba

    edge = transparent_neighbour_mask(snapshot[..., 3]) & (live[..., 3] > 0)

    r = live[..., 0]
    g = live[..., 1]
    b = live[..., 2]
    spill = edge & (g > r) & (g > b)
    g[spill] = np.maximum(r, b)[spill]

    count = int(spill.sum())
    logger.debug("despilled %d edge pixels", count)
    return count

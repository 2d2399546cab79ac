from __future__ import annotations

import logging
from typing import Tuple

from .contracts import Color, PixelBuffer

logger = logging.getLogger(__name__)


def corner_coords(buf: PixelBuffer) -> Tuple[Tuple[int, int], ...]:
    """Top-left, top-right, bottom-left, bottom-right (fixed order)."""
    w, h = buf.width, buf.height
    return ((0, 0), (w - 1, 0), (0, h - 1), (w - 1, h - 1))


def greenness(color: Color) -> int:
    r, g, b = color
    return g - max(r, b)


def sample_background_color(buf: PixelBuffer) -> Color:
    """
    Estimate the chroma-key color as the most green-dominant corner.

    Ties resolve to the earlier corner. There is no rejection: when no corner
    is green-dominant the best (negative-greenness) corner is still returned.
    """
    best: Color = (0, 255, 0)
    best_score = None
    for x, y in corner_coords(buf):
        r, g, b, _a = buf.pixel(x, y)
        score = greenness((r, g, b))
        if best_score is None or score > best_score:
            best_score = score
            best = (r, g, b)

    if best_score is not None and best_score <= 0:
        logger.warning("No green-dominant corner found; using best-effort background %s", best)
    return best

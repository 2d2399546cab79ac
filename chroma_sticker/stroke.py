from __future__ import annotations

import logging
import math

from .config import BORDER_STEPS, STROKE_THICKNESS
from .composite import draw_image, new_surface, surface_to_buffer
from .contracts import PixelBuffer

logger = logging.getLogger(__name__)


def padding_for(thickness: int) -> int:
    """Margin added on every side so the outline is never clipped."""
    return int(thickness) * 2 + 10


def stamp_offsets(thickness: float, steps: int = BORDER_STEPS):
    """Yield the (dx, dy) ring offsets, one per angular sample."""
    for i in range(steps):
        angle = (i * 2.0 * math.pi) / steps
        yield math.cos(angle) * thickness, math.sin(angle) * thickness


def dilate_stroke(
    silhouette: PixelBuffer,
    subject: PixelBuffer,
    thickness: int = STROKE_THICKNESS,
    steps: int = BORDER_STEPS,
) -> PixelBuffer:
    """
    Approximate a disk dilation of `silhouette` by stamping it around a ring,
    then draw `subject` on top.

    Output is always (w + 2p) x (h + 2p) with p = thickness*2 + 10. The ring is
    a `steps`-gon (36 -> 10 degree step); very thick strokes show facets at
    convex corners.
    """
    if (silhouette.width, silhouette.height) != (subject.width, subject.height):
        raise ValueError(
            f"Silhouette {(silhouette.width, silhouette.height)} does not match subject "
            f"{(subject.width, subject.height)}"
        )
    if thickness < 0:
        raise ValueError(f"Stroke thickness must be >= 0, got {thickness}")
    if steps <= 0:
        raise ValueError(f"Angular steps must be > 0, got {steps}")

    pad = padding_for(thickness)
    surface = new_surface(subject.width + pad * 2, subject.height + pad * 2)

    for dx, dy in stamp_offsets(thickness, steps):
        draw_image(surface, silhouette, dx + pad, dy + pad)

    # Fill the gaps inside the ring
    draw_image(surface, silhouette, pad, pad)

    draw_image(surface, subject, pad, pad)

    logger.debug("stroked %dx%d subject (thickness=%d, steps=%d, padding=%d)",
                 subject.width, subject.height, thickness, steps, pad)
    return surface_to_buffer(surface)

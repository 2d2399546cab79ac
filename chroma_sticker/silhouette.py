from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .contracts import PixelBuffer, parse_color


def extract_silhouette(buf: PixelBuffer, color: Union[str, Sequence[int]]) -> PixelBuffer:
    """
    Solid-color copy of the subject: rgb = color where alpha > 0, alpha preserved.
    """
    rgb = np.asarray(parse_color(color), dtype=np.uint8)
    out = buf.copy()
    rgba = out.rgba
    rgba[rgba[..., 3] > 0, :3] = rgb
    return out

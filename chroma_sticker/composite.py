from __future__ import annotations

import cv2
import numpy as np

from .contracts import PixelBuffer
from .errors import RenderSurfaceUnavailable


def new_surface(width: int, height: int) -> np.ndarray:
    """
    Fully transparent drawing surface: float32 (H, W, 4), premultiplied alpha in [0,1].
    """
    w, h = int(width), int(height)
    if w <= 0 or h <= 0:
        raise RenderSurfaceUnavailable(f"Invalid surface size: {(w, h)}")
    try:
        return np.zeros((h, w, 4), dtype=np.float32)
    except MemoryError as e:
        raise RenderSurfaceUnavailable(f"Could not allocate {w}x{h} surface") from e


def premultiply(buf: PixelBuffer) -> np.ndarray:
    px = buf.rgba.astype(np.float32) / 255.0
    px[..., :3] *= px[..., 3:4]
    return px


def _blit_integer(surface: np.ndarray, src: np.ndarray, x: int, y: int) -> None:
    H, W = surface.shape[:2]
    h, w = src.shape[:2]
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(W, x + w), min(H, y + h)
    if x1 <= x0 or y1 <= y0:
        return
    layer = src[y0 - y : y1 - y, x0 - x : x1 - x]
    dst = surface[y0:y1, x0:x1]
    dst *= 1.0 - layer[..., 3:4]
    dst += layer


def draw_image(surface: np.ndarray, buf: PixelBuffer, x: float, y: float) -> None:
    """
    Source-over composite `buf` onto `surface` with its top-left corner at (x, y).

    Fractional offsets are resampled bilinearly (premultiplied, so edges do not
    pick up dark fringes); integer offsets copy pixels exactly.
    """
    src = premultiply(buf)
    if float(x).is_integer() and float(y).is_integer():
        _blit_integer(surface, src, int(x), int(y))
        return

    H, W = surface.shape[:2]
    m = np.float32([[1, 0, x], [0, 1, y]])
    try:
        layer = cv2.warpAffine(
            src,
            m,
            (W, H),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )
    except cv2.error as e:
        raise RenderSurfaceUnavailable(f"Could not resample layer onto {W}x{H} surface: {e}") from e
    surface *= 1.0 - layer[..., 3:4]
    surface += layer


def surface_to_buffer(surface: np.ndarray) -> PixelBuffer:
    """
    Un-premultiply and quantize back to uint8 RGBA.
    """
    a = surface[..., 3:4]
    rgb = np.divide(surface[..., :3], a, out=np.zeros_like(surface[..., :3]), where=a > 0)
    out = np.concatenate([rgb, a], axis=-1)
    out8 = np.rint(np.clip(out, 0.0, 1.0) * 255.0).astype(np.uint8)
    return PixelBuffer.from_rgba(out8)

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

import numpy as np
from PIL import ImageColor
from pydantic import BaseModel, Field

from .errors import DecodeError

Color = Tuple[int, int, int]


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    MOBILE_PORTRAIT = "9:16"
    WIDE = "16:9"


class GeneratedImage(BaseModel):
    """Encoded image handed back to the caller (base64 payload + mime type)."""

    data: str
    mime_type: str = Field(default="image/png")


@dataclass(frozen=True)
class StageTimings:
    sample_s: float
    flood_fill_s: float
    islands_s: float
    despill_s: float
    total_s: float


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Row-major RGBA pixels: channel c of pixel (x, y) lives at (y*width + x)*4 + c.

    The dataclass is frozen so width/height/data cannot be rebound; the
    channel array itself stays mutable so passes can work in place.
    """

    width: int
    height: int
    data: np.ndarray

    def __post_init__(self) -> None:
        w, h = int(self.width), int(self.height)
        if w <= 0 or h <= 0:
            raise DecodeError(f"Invalid buffer size: {(w, h)}")

        arr = np.asarray(self.data)
        if arr.dtype != np.uint8:
            if arr.dtype.kind not in ("i", "u") or (arr.size and (arr.min() < 0 or arr.max() > 255)):
                raise DecodeError(f"Expected uint8 channel data, got dtype={arr.dtype}")
            arr = arr.astype(np.uint8)
        if arr.ndim != 1:
            raise DecodeError(f"Expected flat channel array, got shape={arr.shape}")
        if arr.size != w * h * 4:
            raise DecodeError(f"Channel array length {arr.size} != {w}*{h}*4")

        object.__setattr__(self, "width", w)
        object.__setattr__(self, "height", h)
        object.__setattr__(self, "data", np.ascontiguousarray(arr))

    @classmethod
    def from_rgba(cls, rgba: np.ndarray) -> "PixelBuffer":
        """
        Wrap an (H, W, 4) array. Shares memory when the input is already contiguous uint8.
        """
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise DecodeError(f"Expected RGBA image (H,W,4), got shape={rgba.shape}")
        h, w = rgba.shape[:2]
        return cls(width=w, height=h, data=np.ascontiguousarray(rgba).reshape(-1))

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        return cls(width=width, height=height, data=np.zeros(int(width) * int(height) * 4, dtype=np.uint8))

    @property
    def rgba(self) -> np.ndarray:
        """(H, W, 4) view sharing memory with `data`."""
        return self.data.reshape(self.height, self.width, 4)

    @property
    def alpha(self) -> np.ndarray:
        return self.rgba[..., 3]

    def index(self, x: int, y: int) -> int:
        return (y * self.width + x) * 4

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        i = self.index(x, y)
        r, g, b, a = self.data[i : i + 4]
        return int(r), int(g), int(b), int(a)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(width=self.width, height=self.height, data=self.data.copy())


def parse_color(value: Union[str, Sequence[int]]) -> Color:
    """
    Accept an (r, g, b) sequence or any CSS color string Pillow understands
    ("#FFFFFF", "white", "rgb(255,0,0)").
    """
    if isinstance(value, str):
        rgb = ImageColor.getrgb(value)
    else:
        rgb = tuple(int(v) for v in value)
    if len(rgb) < 3:
        raise ValueError(f"Expected an RGB color, got {value!r}")
    r, g, b = (int(c) for c in rgb[:3])
    for c in (r, g, b):
        if c < 0 or c > 255:
            raise ValueError(f"Color channel out of range [0,255]: {value!r}")
    return r, g, b

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .config import OUTPUT_MIME_TYPE
from .contracts import GeneratedImage, PixelBuffer
from .errors import DecodeError


def pil_to_buffer(img: Image.Image) -> PixelBuffer:
    rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    return PixelBuffer.from_rgba(rgba)


def buffer_to_pil(buf: PixelBuffer) -> Image.Image:
    return Image.fromarray(buf.rgba.copy())


def decode_image_bytes(raw: bytes) -> PixelBuffer:
    """
    Decode any container Pillow can read (PNG, JPEG, WebP, ...) into an RGBA buffer.
    """
    if not raw:
        raise DecodeError("Empty image payload")
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    return pil_to_buffer(img)


def strip_data_url(data: str) -> str:
    """
    "data:image/png;base64,AAAA" -> "AAAA". Plain base64 passes through unchanged.
    """
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def decode_base64_image(data: str) -> PixelBuffer:
    try:
        # MIME-style payloads wrap lines; whitespace is not part of the alphabet
        payload = "".join(strip_data_url(data).split())
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 image payload: {e}") from e
    return decode_image_bytes(raw)


def load_image(path: Union[str, Path]) -> PixelBuffer:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Could not read image: {p}")
    return decode_image_bytes(p.read_bytes())


def encode_png(buf: PixelBuffer) -> bytes:
    out = io.BytesIO()
    buffer_to_pil(buf).save(out, format="PNG", optimize=False)
    return out.getvalue()


def buffer_to_base64_png(buf: PixelBuffer) -> str:
    return base64.b64encode(encode_png(buf)).decode("utf-8")


def to_generated_image(buf: PixelBuffer) -> GeneratedImage:
    return GeneratedImage(data=buffer_to_base64_png(buf), mime_type=OUTPUT_MIME_TYPE)


def save_png(buf: PixelBuffer, path: Union[str, Path]) -> None:
    """
    Save as lossless RGBA PNG, creating parent directories.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(encode_png(buf))

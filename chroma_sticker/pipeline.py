from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from .config import (
    BORDER_STEPS,
    ENHANCE_PROMPT,
    FLOOD_TOLERANCE,
    ISLAND_TOLERANCE,
    STROKE_COLOR,
    STROKE_THICKNESS,
)
from .contracts import AspectRatio, GeneratedImage, PixelBuffer, StageTimings
from .despill import despill_edges
from .gemini_client import edit_image, generate_green_screen
from .io import decode_base64_image, decode_image_bytes, load_image, save_png, to_generated_image
from .sampler import sample_background_color
from .segment import clean_islands, flood_fill_background
from .silhouette import extract_silhouette
from .stroke import dilate_stroke

logger = logging.getLogger(__name__)

ColorSpec = Union[str, Sequence[int]]


def remove_background(
    buf: PixelBuffer,
    *,
    flood_tolerance: float = FLOOD_TOLERANCE,
    island_tolerance: float = ISLAND_TOLERANCE,
) -> Tuple[PixelBuffer, StageTimings]:
    """
    Deterministic, strictly sequential chroma-key pipeline on a private copy:
      1) Sample background color from the corners
      2) Border flood fill
      3) Island cleanup
      4) Edge despill
    """
    t0 = time.perf_counter()
    work = buf.copy()

    t_s0 = time.perf_counter()
    bg = sample_background_color(work)
    t_s1 = time.perf_counter()

    flood_fill_background(work, bg, flood_tolerance)
    t_f1 = time.perf_counter()

    clean_islands(work, bg, island_tolerance)
    t_i1 = time.perf_counter()

    despill_edges(work)
    t_d1 = time.perf_counter()

    logger.debug("background %s removed from %dx%d image", bg, work.width, work.height)
    return work, StageTimings(
        sample_s=t_s1 - t_s0,
        flood_fill_s=t_f1 - t_s1,
        islands_s=t_i1 - t_f1,
        despill_s=t_d1 - t_i1,
        total_s=t_d1 - t0,
    )


def add_sticker_stroke(
    buf: PixelBuffer,
    thickness: int = STROKE_THICKNESS,
    color: ColorSpec = STROKE_COLOR,
    steps: int = BORDER_STEPS,
) -> PixelBuffer:
    """
    Silhouette -> radial-stamp dilation -> subject on top. Output is padded by
    thickness*2 + 10 on every side.
    """
    silhouette = extract_silhouette(buf, color)
    return dilate_stroke(silhouette, buf, thickness=thickness, steps=steps)


def remove_background_from_bytes(raw: bytes, **kwargs) -> GeneratedImage:
    keyed, _ = remove_background(decode_image_bytes(raw), **kwargs)
    return to_generated_image(keyed)


def add_sticker_stroke_b64(
    image_b64: str,
    thickness: int = STROKE_THICKNESS,
    color: ColorSpec = STROKE_COLOR,
) -> GeneratedImage:
    return to_generated_image(add_sticker_stroke(decode_base64_image(image_b64), thickness, color))


def remove_background_with_chroma_key(image_b64: str, mime_type: str, **kwargs) -> GeneratedImage:
    """
    STRICT ORDER:
      1) Gemini re-renders the subject on a #00FF00 background
      2) Decode the generated image
      3) Chroma-key pipeline
      4) Re-encode as PNG
    """
    generated = generate_green_screen(image_b64, mime_type)
    keyed, timings = remove_background(decode_base64_image(generated.data), **kwargs)
    logger.info("chroma key finished in %.3fs", timings.total_s)
    return to_generated_image(keyed)


def edit_with_prompt(
    image_b64: str,
    mime_type: str,
    prompt: str,
    aspect_ratio: Union[AspectRatio, str] = AspectRatio.SQUARE,
) -> GeneratedImage:
    """
    Free-form Gemini edit at the requested aspect ratio. The model's image is
    returned as-is (no keying, mime type from the response).
    """
    if not prompt or not prompt.strip():
        raise ValueError("Please enter a description of how you want to edit the image.")
    return edit_image(image_b64, mime_type, prompt.strip(), aspect_ratio=aspect_ratio)


def enhance_image(
    image_b64: str,
    mime_type: str,
    aspect_ratio: Union[AspectRatio, str] = AspectRatio.SQUARE,
) -> GeneratedImage:
    """Lossless-enhance preset: sharpen and upscale without changing content."""
    return edit_with_prompt(image_b64, mime_type, ENHANCE_PROMPT, aspect_ratio)


def process_file(
    image_path: str,
    out_path: str,
    *,
    sticker: bool = False,
    flood_tolerance: float = FLOOD_TOLERANCE,
    island_tolerance: float = ISLAND_TOLERANCE,
    thickness: Optional[int] = None,
    color: ColorSpec = STROKE_COLOR,
) -> StageTimings:
    """
    Key a green-screen image on disk and save an RGBA PNG. With `sticker`, the
    keyed result also gets an outline (`thickness` defaults to STROKE_THICKNESS).
    """
    buf = load_image(image_path)
    keyed, timings = remove_background(buf, flood_tolerance=flood_tolerance, island_tolerance=island_tolerance)
    if sticker:
        keyed = add_sticker_stroke(keyed, STROKE_THICKNESS if thickness is None else thickness, color)
    save_png(keyed, Path(out_path))
    return timings

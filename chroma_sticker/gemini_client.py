from __future__ import annotations

import logging
import os
from typing import Optional, Union

import requests

from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_S, GEMINI_IMAGE_MODEL, GREEN_SCREEN_PROMPT
from .contracts import AspectRatio, GeneratedImage
from .errors import GenerationError

logger = logging.getLogger(__name__)


def _get_base_url() -> str:
    return os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def _get_timeout_s() -> float:
    try:
        return float(os.getenv("GEMINI_TIMEOUT_S", str(DEFAULT_TIMEOUT_S)))
    except ValueError:
        return DEFAULT_TIMEOUT_S


def _image_part(part: dict) -> Optional[GeneratedImage]:
    """
    Best-effort extraction of an inline image part; mime defaults to image/png.
    """
    inline = part.get("inlineData") if isinstance(part, dict) else None
    if not isinstance(inline, dict):
        return None
    data = inline.get("data")
    if not (isinstance(data, str) and data):
        return None
    return GeneratedImage(data=data, mime_type=inline.get("mimeType") or "image/png")


def edit_image(
    image_b64: str,
    mime_type: str,
    prompt: str,
    aspect_ratio: Union[AspectRatio, str] = AspectRatio.SQUARE,
    model: str = GEMINI_IMAGE_MODEL,
) -> GeneratedImage:
    """
    Send one image + instruction to the Gemini image model and return the first image part.

    Single attempt, no retries.
    """
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise GenerationError("Missing GEMINI_API_KEY")

    ratio = AspectRatio(aspect_ratio).value
    url = f"{_get_base_url()}/v1beta/models/{model}:generateContent"
    payload = {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"inlineData": {"mimeType": mime_type, "data": image_b64}},
                    {"text": prompt},
                ],
            }
        ],
        "generationConfig": {"imageConfig": {"aspectRatio": ratio}},
    }
    try:
        resp = requests.post(url, params={"key": api_key}, json=payload, timeout=_get_timeout_s())
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("Gemini API error: %s", e)
        raise GenerationError(f"Failed to process image with Gemini: {e}") from e

    candidates = data.get("candidates") or []
    if not candidates:
        raise GenerationError("No candidates returned from Gemini.")
    content = (candidates[0] or {}).get("content") or {}
    parts = content.get("parts") or []

    # Find first image part.
    for p in parts:
        img = _image_part(p)
        if img is not None:
            return img

    texts = [p.get("text", "") for p in parts if isinstance(p, dict) and p.get("text")]
    if texts:
        raise GenerationError(f"Model returned text instead of image: {texts[0]}")
    raise GenerationError("No image data found in response.")


def generate_green_screen(image_b64: str, mime_type: str) -> GeneratedImage:
    """Re-render the subject on a flat #00FF00 background (square output)."""
    return edit_image(image_b64, mime_type, GREEN_SCREEN_PROMPT, aspect_ratio=AspectRatio.SQUARE)

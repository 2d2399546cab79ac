"""
Centralized configuration constants for the chroma-key and sticker pipelines.

Ground rules:
- uint8 RGBA, row-major
- One image per call, strictly sequential passes
"""

# Tolerances are linear RGB distances; passes square them once and compare
# against squared distances.
FLOOD_TOLERANCE = 96
ISLAND_TOLERANCE = 50

STROKE_THICKNESS = 8
STROKE_COLOR = "#FFFFFF"

# Angular samples for the radial-stamp dilation (10 degree step).
BORDER_STEPS = 36

OUTPUT_MIME_TYPE = "image/png"

GEMINI_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_TIMEOUT_S = 60.0

# Versioned prompt (keep changes explicit + centralized).
GREEN_SCREEN_PROMPT = (
    "Isolate the main subject. Place the subject on a solid, flat, NEON GREEN background "
    "(Hex Code: #00FF00). IMPORTANT: The subject must be 100% opaque. Do not cast shadows on "
    "the background. Do not use gradients. The background must be pure RGB (0, 255, 0). "
    "Keep all subject details intact. Do not erode edges."
)

ENHANCE_PROMPT = (
    "Enhance resolution and sharpness only. Do not change ANY details. Do not add anything. "
    "Do not remove anything. Keep the exact same subject, same colors, same composition. "
    "Just make it look higher quality."
)

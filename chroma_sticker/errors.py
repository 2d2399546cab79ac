from __future__ import annotations


class DecodeError(ValueError):
    """Input cannot be interpreted as a valid RGBA pixel buffer."""


class RenderSurfaceUnavailable(RuntimeError):
    """An intermediate composition surface could not be allocated."""


class GenerationError(RuntimeError):
    """The generative image service did not return a usable image."""

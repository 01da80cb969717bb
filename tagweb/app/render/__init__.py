"""Renderer-facing style callbacks."""

from tagweb.app.render.adapter import FrameStyles, RenderingAdapter

__all__ = ["FrameStyles", "RenderingAdapter"]

"""Pointer-driven highlight state."""

from tagweb.app.interaction.highlight import (
    HighlightListener,
    HighlightMode,
    HighlightSnapshot,
    HighlightStateMachine,
)
from tagweb.app.interaction.pointer import PointerTracker

__all__ = [
    "HighlightListener",
    "HighlightMode",
    "HighlightSnapshot",
    "HighlightStateMachine",
    "PointerTracker",
]

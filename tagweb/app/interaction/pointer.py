"""Global pointer-button tracking decoupled from the highlight state machine."""
from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)


class PointerTracker:
    """Record whether the primary pointer button is currently held.

    Presses and releases are captured for the whole window, not just the graph
    surface, so a press that starts outside the canvas still counts.
    """

    def __init__(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def press(self) -> None:
        self._held = True
        LOGGER.debug("Pointer pressed")

    def release(self) -> None:
        self._held = False
        LOGGER.debug("Pointer released")

"""Transient highlight state driven by hover and drag events."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Set

from tagweb.app.graph.model import GraphEdge, GraphNode

LOGGER = logging.getLogger(__name__)


class HighlightMode(str, Enum):
    """Interaction mode reported alongside the highlight sets."""

    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"
    HOVERING_LINK = "hovering_link"


@dataclass(frozen=True)
class HighlightSnapshot:
    """Immutable view of the highlight state at one point in time."""

    mode: HighlightMode
    node_ids: FrozenSet[str]
    edge_ids: FrozenSet[str]
    hovered_node_id: Optional[str]

    @property
    def is_active(self) -> bool:
        return bool(self.node_ids)


HighlightListener = Callable[[HighlightSnapshot], None]


class HighlightStateMachine:
    """Track highlighted nodes and edges for pointer-driven exploration.

    Event handlers are the only writers. Membership is keyed by ``node_id``
    and ``edge_id`` so snapshots stay valid after the objects are rebuilt.
    Every transition notifies subscribers with a fresh snapshot.
    """

    def __init__(self) -> None:
        self._node_ids: Set[str] = set()
        self._edge_ids: Set[str] = set()
        self._hovered_node_id: Optional[str] = None
        self._mode = HighlightMode.IDLE
        self._listeners: List[HighlightListener] = []

    @property
    def mode(self) -> HighlightMode:
        return self._mode

    @property
    def hovered_node_id(self) -> Optional[str]:
        return self._hovered_node_id

    @property
    def has_node_highlight(self) -> bool:
        return bool(self._node_ids)

    def is_node_highlighted(self, node: GraphNode) -> bool:
        return node.node_id in self._node_ids

    def is_edge_highlighted(self, edge: GraphEdge) -> bool:
        return edge.edge_id in self._edge_ids

    def snapshot(self) -> HighlightSnapshot:
        return HighlightSnapshot(
            mode=self._mode,
            node_ids=frozenset(self._node_ids),
            edge_ids=frozenset(self._edge_ids),
            hovered_node_id=self._hovered_node_id,
        )

    def subscribe(self, listener: HighlightListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def on_node_hover(self, node: Optional[GraphNode], *, pointer_held: bool) -> HighlightSnapshot:
        """Handle the pointer entering ``node`` (or leaving every node when ``None``).

        With the button up the previous highlight is cleared first; with the
        button held the new neighbourhood is added to it.
        """

        _require_node(node)
        if not pointer_held:
            self._clear_sets()
        if node is not None:
            self._grow(node)
            self._mode = HighlightMode.HOVERING
        elif not self._node_ids and not self._edge_ids:
            self._mode = HighlightMode.IDLE
        self._hovered_node_id = node.node_id if node is not None else None
        return self._emit("node_hover")

    def on_node_drag(self, node: Optional[GraphNode]) -> HighlightSnapshot:
        """Accumulate the dragged node's neighbourhood without clearing."""

        _require_node(node)
        if node is not None:
            self._grow(node)
            self._mode = HighlightMode.DRAGGING
        return self._emit("node_drag")

    def on_node_drag_end(self) -> HighlightSnapshot:
        self._clear_sets()
        self._mode = HighlightMode.IDLE
        return self._emit("node_drag_end")

    def on_link_hover(self, edge: Optional[GraphEdge]) -> HighlightSnapshot:
        """Highlight ``edge`` and its endpoints, replacing any prior highlight."""

        if edge is not None and not isinstance(edge, GraphEdge):
            raise TypeError(f"Expected GraphEdge or None, got {type(edge).__name__}")
        endpoints = (edge.source_node, edge.target_node) if edge is not None else ()
        self._clear_sets()
        if edge is None:
            self._mode = HighlightMode.IDLE
        else:
            self._edge_ids.add(edge.edge_id)
            self._node_ids.update(node.node_id for node in endpoints)
            self._mode = HighlightMode.HOVERING_LINK
        return self._emit("link_hover")

    def reset(self) -> HighlightSnapshot:
        self._clear_sets()
        self._hovered_node_id = None
        self._mode = HighlightMode.IDLE
        return self._emit("reset")

    def _grow(self, node: GraphNode) -> None:
        self._node_ids.add(node.node_id)
        for neighbor in node.neighbors:
            self._node_ids.add(neighbor.node_id)
        for edge in node.incident_edges:
            self._edge_ids.add(edge.edge_id)

    def _clear_sets(self) -> None:
        self._node_ids.clear()
        self._edge_ids.clear()

    def _emit(self, event: str) -> HighlightSnapshot:
        snapshot = self.snapshot()
        LOGGER.debug(
            "Highlight %s -> mode=%s nodes=%d edges=%d",
            event,
            snapshot.mode.value,
            len(snapshot.node_ids),
            len(snapshot.edge_ids),
        )
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot


def _require_node(node: Optional[GraphNode]) -> None:
    if node is not None and not isinstance(node, GraphNode):
        raise TypeError(f"Expected GraphNode or None, got {type(node).__name__}")

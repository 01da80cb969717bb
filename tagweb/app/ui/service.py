"""Services powering the interactive graph view."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from tagweb.app.config import AppConfig
from tagweb.app.contracts import DatasetRecord, RawGraph
from tagweb.app.graph.builder import CurvatureSettings, DatasetBuilder
from tagweb.app.graph.model import Graph, GraphEdge, GraphNode
from tagweb.app.graph.store import GraphStore
from tagweb.app.interaction.highlight import HighlightSnapshot, HighlightStateMachine
from tagweb.app.interaction.pointer import PointerTracker
from tagweb.app.render.adapter import FrameStyles, RenderingAdapter

LOGGER = logging.getLogger(__name__)


class UnknownElementError(RuntimeError):
    """Raised when an event names a node or edge absent from the current graph."""


class InteractionEvent(str, Enum):
    """Renderer callback slots that feed the highlight state machine."""

    NODE_HOVER = "node_hover"
    NODE_DRAG = "node_drag"
    NODE_DRAG_END = "node_drag_end"
    LINK_HOVER = "link_hover"


@dataclass(frozen=True)
class GraphNodeView:
    """Node payload returned to UI clients."""

    id: str
    label: str
    attributes: Dict[str, object]
    neighbors: List[str]
    links: List[str]


@dataclass(frozen=True)
class GraphEdgeView:
    """Edge payload carrying the layout curvature."""

    id: str
    source: str
    target: str
    pair_key: str
    curvature: float
    attributes: Dict[str, object]


@dataclass(frozen=True)
class GraphView:
    """Container for a prepared graph including summary counts."""

    revision: int
    nodes: List[GraphNodeView]
    edges: List[GraphEdgeView]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)


class GraphExplorerService:
    """Own the current graph and the highlight state of one viewing session.

    Handlers and frame reads are serialised with a lock so a frame never
    observes a half-applied transition or a half-swapped graph.
    """

    def __init__(self, config: AppConfig, *, builder: Optional[DatasetBuilder] = None) -> None:
        self._config = config
        settings = CurvatureSettings(
            max_curvature=config.graph.max_curvature,
            self_loop_curvature=config.graph.self_loop_curvature,
        )
        self._lock = threading.RLock()
        self._store = GraphStore(settings, builder=builder)
        self._highlight = HighlightStateMachine()
        self._pointer = PointerTracker()
        self._adapter = RenderingAdapter(self._highlight, config.ui.theme)
        self._store.on_rebuild(self._on_rebuild)

    @property
    def highlight(self) -> HighlightStateMachine:
        return self._highlight

    @property
    def adapter(self) -> RenderingAdapter:
        return self._adapter

    @property
    def graph(self) -> Graph:
        return self._store.current

    def load_records(self, records: Sequence[DatasetRecord]) -> GraphView:
        """Rebuild the graph from domain records."""

        with self._lock:
            graph = self._store.load_records(records)
            return self._view_from_graph(graph)

    def load_raw(self, raw: RawGraph) -> GraphView:
        """Rebuild the graph from a node-link payload."""

        with self._lock:
            graph = self._store.load_raw(raw)
            return self._view_from_graph(graph)

    def graph_view(self) -> GraphView:
        with self._lock:
            return self._view_from_graph(self._store.current)

    def set_pointer(self, pressed: bool) -> bool:
        with self._lock:
            if pressed:
                self._pointer.press()
            else:
                self._pointer.release()
            return self._pointer.held

    def handle_event(
        self,
        event: InteractionEvent,
        *,
        node_id: Optional[str] = None,
        edge_id: Optional[str] = None,
    ) -> HighlightSnapshot:
        """Dispatch a renderer callback to the highlight state machine.

        Raises:
            UnknownElementError: If ``node_id`` or ``edge_id`` is not in the current graph.
        """

        with self._lock:
            if event is InteractionEvent.NODE_HOVER:
                return self._highlight.on_node_hover(
                    self._lookup_node(node_id), pointer_held=self._pointer.held
                )
            if event is InteractionEvent.NODE_DRAG:
                return self._highlight.on_node_drag(self._lookup_node(node_id))
            if event is InteractionEvent.NODE_DRAG_END:
                return self._highlight.on_node_drag_end()
            if event is InteractionEvent.LINK_HOVER:
                return self._highlight.on_link_hover(self._lookup_edge(edge_id))
            raise ValueError(f"Unsupported interaction event: {event!r}")

    def frame(self) -> FrameStyles:
        with self._lock:
            return self._adapter.frame(self._store.current)

    def _on_rebuild(self, graph: Graph) -> None:
        LOGGER.info("Graph revision %d installed; clearing highlight state", graph.revision)
        self._highlight.reset()

    def _lookup_node(self, node_id: Optional[str]) -> Optional[GraphNode]:
        if node_id is None:
            return None
        node = self._store.current.node(node_id)
        if node is None:
            raise UnknownElementError(f"Unknown node: {node_id}")
        return node

    def _lookup_edge(self, edge_id: Optional[str]) -> Optional[GraphEdge]:
        if edge_id is None:
            return None
        edge = self._store.current.edge(edge_id)
        if edge is None:
            raise UnknownElementError(f"Unknown edge: {edge_id}")
        return edge

    @staticmethod
    def _view_from_graph(graph: Graph) -> GraphView:
        nodes = [
            GraphNodeView(
                id=node.node_id,
                label=node.label,
                attributes=dict(node.attributes),
                neighbors=node.neighbor_ids(),
                links=node.incident_edge_ids(),
            )
            for node in graph.iter_nodes()
        ]
        edges = [
            GraphEdgeView(
                id=edge.edge_id,
                source=edge.source_node.node_id,
                target=edge.target_node.node_id,
                pair_key=edge.pair_key,
                curvature=edge.curvature,
                attributes=dict(edge.attributes),
            )
            for edge in graph.edges
        ]
        return GraphView(revision=graph.revision, nodes=nodes, edges=edges)

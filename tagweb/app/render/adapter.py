"""Per-element style callbacks consumed by the external graph renderer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from tagweb.app.config import UIThemeConfig
from tagweb.app.graph.model import Graph, GraphEdge, GraphNode
from tagweb.app.interaction.highlight import HighlightStateMachine


@dataclass(frozen=True)
class FrameStyles:
    """Styles for every element of a graph for a single frame."""

    revision: int
    node_colors: Dict[str, str]
    link_colors: Dict[str, str]
    link_curvatures: Dict[str, float]


class RenderingAdapter:
    """Translate highlight state and curvature into renderer styles.

    Every method is a pure read; the renderer may call them many times per
    frame.
    """

    def __init__(self, state: HighlightStateMachine, theme: UIThemeConfig) -> None:
        self._state = state
        self._theme = theme

    @property
    def background_color(self) -> str:
        return self._theme.background

    def node_color(self, node: GraphNode) -> str:
        if not self._state.has_node_highlight:
            return self._theme.neutral
        if self._state.is_node_highlighted(node):
            return self._theme.active
        return self._theme.dimmed

    def link_color(self, edge: GraphEdge) -> str:
        if self._state.is_edge_highlighted(edge):
            return self._theme.active
        return self._theme.neutral

    @staticmethod
    def link_curvature(edge: GraphEdge) -> float:
        return edge.curvature

    def frame(self, graph: Graph) -> FrameStyles:
        """Evaluate every callback over ``graph``."""

        return FrameStyles(
            revision=graph.revision,
            node_colors={node.node_id: self.node_color(node) for node in graph.iter_nodes()},
            link_colors={edge.edge_id: self.link_color(edge) for edge in graph.edges},
            link_curvatures={edge.edge_id: self.link_curvature(edge) for edge in graph.edges},
        )

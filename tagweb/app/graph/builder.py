"""Assemble indexed, curved graphs from node-link inputs and tag records."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from typing_extensions import Protocol

from tagweb.app.contracts import DatasetRecord, RawGraph
from tagweb.app.graph.adjacency import build_index
from tagweb.app.graph.curvature import CurvatureSummary, assign_curvatures
from tagweb.app.graph.model import DuplicateNodeError, Graph, GraphEdge, GraphNode

LOGGER = logging.getLogger(__name__)

RECORD_KEY_PREFIX = "record:"
TAG_KEY_PREFIX = "tag:"


@dataclass(frozen=True)
class CurvatureSettings:
    """Parameters forwarded to the curvature assigner."""

    max_curvature: float = 0.5
    self_loop_curvature: Optional[float] = None


class DatasetBuilder(Protocol):
    """Protocol for turning domain records into unindexed nodes and edges."""

    def build(self, records: Sequence[DatasetRecord]) -> Tuple[List[GraphNode], List[GraphEdge]]:
        """Return nodes and edges describing ``records``."""


class TagDatasetBuilder(DatasetBuilder):
    """Link each record to one node per distinct tag.

    Record and tag node ids carry distinct prefixes so a record named like a
    tag key never collides with that tag.

    A record listing the same tag twice produces two parallel edges, which the
    curvature assigner later fans out.
    """

    def build(self, records: Sequence[DatasetRecord]) -> Tuple[List[GraphNode], List[GraphEdge]]:
        nodes: List[GraphNode] = []
        record_nodes: Dict[str, GraphNode] = {}
        tag_nodes: Dict[str, GraphNode] = {}
        edges: List[GraphEdge] = []
        for record in records:
            if record.name in record_nodes:
                raise DuplicateNodeError(f"Duplicate record name: {record.name!r}")
            node = GraphNode(
                node_id=f"{RECORD_KEY_PREFIX}{record.name}",
                label=record.name,
                attributes={"kind": "record"},
            )
            record_nodes[record.name] = node
            nodes.append(node)
        for record in records:
            for tag in record.tags:
                tag_node = tag_nodes.get(tag)
                if tag_node is None:
                    tag_node = GraphNode(
                        node_id=f"{TAG_KEY_PREFIX}{tag}",
                        label=tag,
                        attributes={"kind": "tag"},
                    )
                    tag_nodes[tag] = tag_node
                    nodes.append(tag_node)
                edges.append(GraphEdge(source=record_nodes[record.name], target=tag_node))
        return nodes, edges


def nodes_from_raw(raw: RawGraph) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """Convert validated raw payloads into unindexed model objects."""

    nodes = [
        GraphNode(node_id=item.id, label=item.label or item.id, attributes=dict(item.attributes))
        for item in raw.nodes
    ]
    edges = [
        GraphEdge(
            source=link.source,
            target=link.target,
            edge_id=link.id or "",
            attributes=dict(link.attributes),
        )
        for link in raw.links
    ]
    return nodes, edges


def prepare_graph(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    settings: CurvatureSettings,
    *,
    revision: int = 0,
) -> Graph:
    """Index adjacency, assign curvature, and wrap the result in a :class:`Graph`.

    Args:
        nodes: Ordered nodes; mutated in place.
        edges: Ordered edges; endpoints are resolved in place.
        settings: Curvature parameters.
        revision: Revision number stamped on the graph.

    Returns:
        Graph: Fully prepared graph.

    Raises:
        GraphBuildError: If indexing or curvature assignment fails.
    """

    build_index(nodes, edges)
    summary: CurvatureSummary = assign_curvatures(
        edges,
        settings.max_curvature,
        self_loop_curvature=settings.self_loop_curvature,
    )
    graph = Graph(nodes={node.node_id: node for node in nodes}, edges=list(edges), revision=revision)
    LOGGER.info(
        "Prepared graph revision %d (nodes=%d, edges=%d, bundled_pairs=%d, self_loops=%d)",
        revision,
        graph.node_count,
        graph.edge_count,
        summary.bundled_pairs,
        summary.self_loops,
    )
    return graph

"""Neighbour and incident-edge indexing for node-link datasets."""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from tagweb.app.graph.model import (
    DuplicateNodeError,
    EndpointRef,
    GraphBuildError,
    GraphEdge,
    GraphNode,
)

LOGGER = logging.getLogger(__name__)


class DanglingReferenceError(GraphBuildError):
    """Raised when an edge endpoint does not resolve to a known node."""


def index_nodes(nodes: Sequence[GraphNode]) -> Dict[str, GraphNode]:
    """Return an insertion-ordered mapping of node keys to nodes.

    Raises:
        DuplicateNodeError: If two nodes share the same key.
    """

    mapping: Dict[str, GraphNode] = {}
    for node in nodes:
        if node.node_id in mapping:
            raise DuplicateNodeError(f"Duplicate node identity: {node.node_id!r}")
        mapping[node.node_id] = node
    return mapping


def build_index(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> None:
    """Populate ``neighbors`` and ``incident_edges`` on every node.

    Edge endpoints may be given as node references, integer positions in
    ``nodes``, or node keys; they are normalised to node references. Edges
    are processed in input order, so adjacency lists follow edge order. A
    self-loop contributes its node once to its own neighbours and the edge
    once to its incident edges.

    All endpoints are resolved before any node is touched, so a failure
    leaves the inputs unchanged.

    Args:
        nodes: Ordered node collection.
        edges: Ordered edge collection referencing ``nodes``.

    Raises:
        DuplicateNodeError: If two nodes share the same key.
        DanglingReferenceError: If an edge references a node that is absent.
        GraphBuildError: If two edges share the same explicit identifier.
    """

    by_key = index_nodes(nodes)
    resolved: List[Tuple[GraphNode, GraphNode]] = []
    for position, edge in enumerate(edges):
        source = _resolve_endpoint(edge.source, nodes, by_key, position, "source")
        target = _resolve_endpoint(edge.target, nodes, by_key, position, "target")
        resolved.append((source, target))

    edge_ids: Dict[str, int] = {}
    for position, (edge, (source, target)) in enumerate(zip(edges, resolved)):
        edge_id = edge.edge_id or f"{source.node_id}->{target.node_id}#{position}"
        if edge_id in edge_ids:
            raise GraphBuildError(
                f"Duplicate edge identity {edge_id!r} at positions {edge_ids[edge_id]} and {position}"
            )
        edge_ids[edge_id] = position

    for node in nodes:
        node.neighbors = []
        node.incident_edges = []

    for edge_id, edge, (source, target) in zip(edge_ids, edges, resolved):
        edge.edge_id = edge_id
        edge.source = source
        edge.target = target
        if source is target:
            source.neighbors.append(source)
            source.incident_edges.append(edge)
            continue
        source.neighbors.append(target)
        target.neighbors.append(source)
        source.incident_edges.append(edge)
        target.incident_edges.append(edge)

    LOGGER.debug("Indexed adjacency for %d nodes and %d edges", len(nodes), len(edges))


def _resolve_endpoint(
    ref: EndpointRef,
    nodes: Sequence[GraphNode],
    by_key: Dict[str, GraphNode],
    position: int,
    role: str,
) -> GraphNode:
    if isinstance(ref, GraphNode):
        known = by_key.get(ref.node_id)
        if known is not ref:
            raise DanglingReferenceError(
                f"Edge #{position} {role} node {ref.node_id!r} is not part of the node collection"
            )
        return ref
    # bool is an int subclass but never a valid position
    if isinstance(ref, bool):
        raise DanglingReferenceError(f"Edge #{position} {role} has invalid reference {ref!r}")
    if isinstance(ref, int):
        if 0 <= ref < len(nodes):
            return nodes[ref]
        raise DanglingReferenceError(
            f"Edge #{position} {role} index {ref} is outside the node collection (size {len(nodes)})"
        )
    if isinstance(ref, str):
        node = by_key.get(ref)
        if node is None:
            raise DanglingReferenceError(f"Edge #{position} {role} references unknown node {ref!r}")
        return node
    raise DanglingReferenceError(
        f"Edge #{position} {role} has unsupported reference type {type(ref).__name__}"
    )

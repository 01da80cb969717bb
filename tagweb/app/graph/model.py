"""In-memory graph model shared by the indexer, curvature assigner, and renderer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Union


class GraphBuildError(RuntimeError):
    """Raised when a graph cannot be assembled from its node and edge inputs."""


class DuplicateNodeError(GraphBuildError):
    """Raised when two nodes share the same identity key."""


EndpointRef = Union["GraphNode", int, str]


@dataclass(eq=False)
class GraphNode:
    """Graph vertex augmented with adjacency references.

    Nodes compare and hash by identity so they can be tracked in sets even
    though they are mutable.
    """

    node_id: str
    label: str = ""
    attributes: Dict[str, object] = field(default_factory=dict)
    neighbors: List["GraphNode"] = field(default_factory=list, repr=False)
    incident_edges: List["GraphEdge"] = field(default_factory=list, repr=False)

    def neighbor_ids(self) -> List[str]:
        """Return neighbour keys in adjacency order, duplicates included."""

        return [neighbor.node_id for neighbor in self.neighbors]

    def incident_edge_ids(self) -> List[str]:
        return [edge.edge_id for edge in self.incident_edges]


@dataclass(eq=False)
class GraphEdge:
    """Connection between two nodes carrying rendering metadata.

    ``source`` and ``target`` may hold raw indices or node keys until the
    adjacency indexer resolves them into :class:`GraphNode` references.
    """

    source: EndpointRef
    target: EndpointRef
    edge_id: str = ""
    attributes: Dict[str, object] = field(default_factory=dict)
    pair_key: str = ""
    curvature: float = 0.0

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.source, GraphNode) and isinstance(self.target, GraphNode)

    @property
    def is_self_loop(self) -> bool:
        return self.is_resolved and self.source is self.target

    @property
    def source_node(self) -> GraphNode:
        if not isinstance(self.source, GraphNode):
            raise TypeError(f"Edge {self.edge_id!r} has not been indexed")
        return self.source

    @property
    def target_node(self) -> GraphNode:
        if not isinstance(self.target, GraphNode):
            raise TypeError(f"Edge {self.edge_id!r} has not been indexed")
        return self.target


@dataclass(frozen=True)
class Graph:
    """Fully indexed graph handed to the rendering engine.

    The graph owns its nodes and edges; nodes and edges only hold
    back-references to each other.
    """

    nodes: Mapping[str, GraphNode]
    edges: List[GraphEdge]
    revision: int = 0
    _edge_index: Dict[str, GraphEdge] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_edge_index", {edge.edge_id: edge for edge in self.edges})

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def links(self) -> List[GraphEdge]:
        return self.edges

    def iter_nodes(self) -> Iterator[GraphNode]:
        return iter(self.nodes.values())

    def node(self, node_id: str) -> Optional[GraphNode]:
        return self.nodes.get(node_id)

    def edge(self, edge_id: str) -> Optional[GraphEdge]:
        return self._edge_index.get(edge_id)

    @classmethod
    def empty(cls) -> "Graph":
        return cls(nodes={}, edges=[], revision=0)

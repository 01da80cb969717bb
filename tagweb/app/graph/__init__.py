"""Graph preparation: adjacency indexing, curvature assignment, and rebuilds."""

from tagweb.app.graph.adjacency import DanglingReferenceError, build_index
from tagweb.app.graph.builder import CurvatureSettings, DatasetBuilder, TagDatasetBuilder, prepare_graph
from tagweb.app.graph.curvature import CurvatureSummary, InvalidCurvatureConfigError, assign_curvatures, pair_key
from tagweb.app.graph.model import DuplicateNodeError, Graph, GraphBuildError, GraphEdge, GraphNode
from tagweb.app.graph.store import GraphStore

__all__ = [
    "CurvatureSettings",
    "CurvatureSummary",
    "DanglingReferenceError",
    "DatasetBuilder",
    "DuplicateNodeError",
    "Graph",
    "GraphBuildError",
    "GraphEdge",
    "GraphNode",
    "GraphStore",
    "InvalidCurvatureConfigError",
    "TagDatasetBuilder",
    "assign_curvatures",
    "build_index",
    "pair_key",
    "prepare_graph",
]

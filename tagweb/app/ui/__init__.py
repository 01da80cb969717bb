"""UI support services for the interactive graph view."""

from .service import (
    GraphEdgeView,
    GraphExplorerService,
    GraphNodeView,
    GraphView,
    InteractionEvent,
    UnknownElementError,
)

__all__ = [
    "GraphEdgeView",
    "GraphExplorerService",
    "GraphNodeView",
    "GraphView",
    "InteractionEvent",
    "UnknownElementError",
]

"""FastAPI application factory for the Tagweb graph explorer."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from tagweb.app.config import AppConfig, load_config
from tagweb.app.contracts import DatasetRecord, RawGraph
from tagweb.app.graph.model import GraphBuildError
from tagweb.app.interaction.highlight import HighlightSnapshot
from tagweb.app.ui import GraphExplorerService, GraphView, InteractionEvent, UnknownElementError

LOGGER = logging.getLogger(__name__)


class GraphNodePayload(BaseModel):
    """Node description returned for UI graph rendering."""

    id: str
    label: str
    attributes: Dict[str, object] = Field(default_factory=dict)
    neighbors: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)


class GraphLinkPayload(BaseModel):
    """Link description including its layout curvature."""

    id: str
    source: str
    target: str
    pair_key: str
    curvature: float
    attributes: Dict[str, object] = Field(default_factory=dict)


class GraphResponse(BaseModel):
    """Graph payload consumed by the frontend renderer."""

    revision: int
    nodes: List[GraphNodePayload]
    links: List[GraphLinkPayload]
    node_count: int
    edge_count: int


class PointerRequest(BaseModel):
    """Global pointer-button transition."""

    pressed: bool


class PointerResponse(BaseModel):
    held: bool


class InteractionRequest(BaseModel):
    """Renderer callback forwarded to the highlight state machine."""

    type: InteractionEvent
    node_id: Optional[str] = Field(default=None, min_length=1)
    edge_id: Optional[str] = Field(default=None, min_length=1)


class HighlightResponse(BaseModel):
    """Highlight state after an interaction event."""

    mode: str
    nodes: List[str]
    links: List[str]
    hovered_node: Optional[str] = None


class FrameResponse(BaseModel):
    """Per-element styles for one frame."""

    revision: int
    node_colors: Dict[str, str]
    link_colors: Dict[str, str]
    link_curvatures: Dict[str, float]


class UISettingsResponse(BaseModel):
    """UI configuration defaults served to the frontend."""

    theme: Dict[str, str]
    viewport: Dict[str, int]
    render: Dict[str, object]
    curvature: Dict[str, float]


def create_app(
    config: AppConfig | None = None,
    service: Optional[GraphExplorerService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        config: Optional pre-loaded configuration. If omitted, the default
            configuration defined in config.yaml is used.
        service: Optional explorer service. When omitted one is built from
            ``config``.

    Returns:
        FastAPI: Configured FastAPI application.
    """

    resolved_config = config or load_config()
    app = FastAPI(title="Tagweb API", version=resolved_config.pipeline.version)
    app.state.app_config = resolved_config
    app.state.explorer = service or GraphExplorerService(resolved_config)

    allowed_origins = resolved_config.ui.allowed_origins
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health", tags=["system"], summary="Service health probe")
    def health() -> dict[str, str]:
        """Return service health information."""

        return {"status": "ok", "pipeline_version": resolved_config.pipeline.version}

    @app.get("/api/ui/settings", tags=["ui"], summary="UI configuration defaults")
    def ui_settings() -> UISettingsResponse:
        """Return theme, viewport and renderer options from the configuration file."""

        ui_config = resolved_config.ui
        theme = ui_config.theme
        viewport = ui_config.viewport
        render = ui_config.render
        return UISettingsResponse(
            theme={
                "active": theme.active,
                "dimmed": theme.dimmed,
                "neutral": theme.neutral,
                "background": theme.background,
            },
            viewport={"width": viewport.width, "height": viewport.canvas_height},
            render={
                "nodeRelSize": render.node_rel_size,
                "dagMode": render.dag_mode,
                "autoPauseRedraw": render.auto_pause_redraw,
                "linkCurvature": render.link_curvature_field,
            },
            curvature={
                "max": resolved_config.graph.max_curvature,
                "self_loop": resolved_config.graph.self_loop_curvature,
            },
        )

    @app.get("/api/graph", tags=["graph"], summary="Fetch the current prepared graph")
    def get_graph() -> GraphResponse:
        return _graph_response_from_view(_require_explorer(app).graph_view())

    @app.put("/api/graph", tags=["graph"], summary="Replace the graph with a node-link dataset")
    def put_graph(payload: RawGraph) -> GraphResponse:
        """Index and curve the supplied dataset, then make it current."""

        explorer = _require_explorer(app)
        try:
            view = explorer.load_raw(payload)
        except GraphBuildError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _graph_response_from_view(view)

    @app.put("/api/graph/records", tags=["graph"], summary="Replace the graph from tagged records")
    def put_records(records: List[DatasetRecord]) -> GraphResponse:
        """Build a record/tag graph from the supplied records and make it current."""

        explorer = _require_explorer(app)
        try:
            view = explorer.load_records(records)
        except GraphBuildError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return _graph_response_from_view(view)

    @app.post("/api/ui/pointer", tags=["ui"], summary="Record a global pointer press or release")
    def pointer(request: PointerRequest) -> PointerResponse:
        held = _require_explorer(app).set_pointer(request.pressed)
        return PointerResponse(held=held)

    @app.post("/api/ui/events", tags=["ui"], summary="Apply a hover or drag event")
    def interaction(request: InteractionRequest) -> HighlightResponse:
        """Forward a renderer callback to the highlight state machine."""

        explorer = _require_explorer(app)
        try:
            snapshot = explorer.handle_event(
                request.type,
                node_id=request.node_id,
                edge_id=request.edge_id,
            )
        except UnknownElementError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _highlight_response(snapshot)

    @app.get("/api/ui/frame", tags=["ui"], summary="Per-element styles for the current frame")
    def frame() -> FrameResponse:
        styles = _require_explorer(app).frame()
        return FrameResponse(
            revision=styles.revision,
            node_colors=styles.node_colors,
            link_colors=styles.link_colors,
            link_curvatures=styles.link_curvatures,
        )

    return app


def _require_explorer(app: FastAPI) -> GraphExplorerService:
    explorer = getattr(app.state, "explorer", None)
    if explorer is None:
        raise HTTPException(status_code=503, detail="Graph explorer unavailable")
    return explorer


def _graph_response_from_view(view: GraphView) -> GraphResponse:
    nodes = [
        GraphNodePayload(
            id=node.id,
            label=node.label,
            attributes=dict(node.attributes),
            neighbors=list(node.neighbors),
            links=list(node.links),
        )
        for node in view.nodes
    ]
    links = [
        GraphLinkPayload(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            pair_key=edge.pair_key,
            curvature=edge.curvature,
            attributes=dict(edge.attributes),
        )
        for edge in view.edges
    ]
    return GraphResponse(
        revision=view.revision,
        nodes=nodes,
        links=links,
        node_count=view.node_count,
        edge_count=view.edge_count,
    )


def _highlight_response(snapshot: HighlightSnapshot) -> HighlightResponse:
    return HighlightResponse(
        mode=snapshot.mode.value,
        nodes=sorted(snapshot.node_ids),
        links=sorted(snapshot.edge_ids),
        hovered_node=snapshot.hovered_node_id,
    )

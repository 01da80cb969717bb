"""Tests for the hover/drag highlight state machine."""

from __future__ import annotations

from typing import List, Tuple

import pytest

from tagweb.app.graph.adjacency import build_index
from tagweb.app.graph.model import GraphEdge, GraphNode
from tagweb.app.interaction.highlight import HighlightMode, HighlightSnapshot, HighlightStateMachine
from tagweb.app.interaction.pointer import PointerTracker


def _graph() -> Tuple[List[GraphNode], List[GraphEdge]]:
    nodes = [GraphNode(node_id=key) for key in ("A", "B", "C", "D")]
    edges = [
        GraphEdge(source="A", target="B", edge_id="ab"),
        GraphEdge(source="A", target="C", edge_id="ac"),
        GraphEdge(source="C", target="D", edge_id="cd"),
    ]
    build_index(nodes, edges)
    return nodes, edges


def test_hover_highlights_neighbourhood_then_clears() -> None:
    (a, _b, _c, _d), _edges = _graph()
    machine = HighlightStateMachine()

    snapshot = machine.on_node_hover(a, pointer_held=False)

    assert snapshot.node_ids == {"A", "B", "C"}
    assert snapshot.edge_ids == {"ab", "ac"}
    assert snapshot.hovered_node_id == "A"
    assert snapshot.mode is HighlightMode.HOVERING

    cleared = machine.on_node_hover(None, pointer_held=False)

    assert cleared.node_ids == frozenset()
    assert cleared.edge_ids == frozenset()
    assert cleared.hovered_node_id is None
    assert cleared.mode is HighlightMode.IDLE


def test_hover_replaces_previous_highlight_when_button_is_up() -> None:
    (a, _b, _c, d), _edges = _graph()
    machine = HighlightStateMachine()

    machine.on_node_hover(a, pointer_held=False)
    snapshot = machine.on_node_hover(d, pointer_held=False)

    assert snapshot.node_ids == {"C", "D"}
    assert snapshot.edge_ids == {"cd"}


def test_hover_is_additive_while_button_is_held() -> None:
    (a, _b, _c, d), _edges = _graph()
    machine = HighlightStateMachine()
    pointer = PointerTracker()

    machine.on_node_hover(a, pointer_held=pointer.held)
    pointer.press()
    snapshot = machine.on_node_hover(d, pointer_held=pointer.held)

    assert snapshot.node_ids == {"A", "B", "C", "D"}
    assert snapshot.edge_ids == {"ab", "ac", "cd"}

    after_leave = machine.on_node_hover(None, pointer_held=pointer.held)

    assert after_leave.node_ids == {"A", "B", "C", "D"}
    assert after_leave.hovered_node_id is None
    assert after_leave.mode is HighlightMode.HOVERING


def test_drag_accumulates_and_drag_end_clears() -> None:
    (a, b, _c, d), _edges = _graph()
    machine = HighlightStateMachine()
    pointer = PointerTracker()

    machine.on_node_hover(b, pointer_held=pointer.held)
    pointer.press()
    first = machine.on_node_drag(a)

    assert first.node_ids == {"A", "B", "C"}
    assert first.mode is HighlightMode.DRAGGING

    second = machine.on_node_drag(d)

    assert second.node_ids == {"A", "B", "C", "D"}
    assert second.edge_ids == {"ab", "ac", "cd"}

    pointer.release()
    ended = machine.on_node_drag_end()

    assert ended.node_ids == frozenset()
    assert ended.edge_ids == frozenset()
    assert ended.mode is HighlightMode.IDLE


def test_drag_end_when_idle_is_a_no_op_clear() -> None:
    machine = HighlightStateMachine()

    snapshot = machine.on_node_drag_end()

    assert snapshot.node_ids == frozenset()
    assert snapshot.mode is HighlightMode.IDLE


def test_link_hover_clears_node_highlight_unconditionally() -> None:
    (a, _b, _c, _d), edges = _graph()
    machine = HighlightStateMachine()
    machine.on_node_hover(a, pointer_held=False)
    machine.on_node_drag(a)

    snapshot = machine.on_link_hover(edges[2])

    assert snapshot.node_ids == {"C", "D"}
    assert snapshot.edge_ids == {"cd"}
    assert snapshot.mode is HighlightMode.HOVERING_LINK

    cleared = machine.on_link_hover(None)

    assert not cleared.is_active
    assert cleared.edge_ids == frozenset()
    assert cleared.mode is HighlightMode.IDLE


def test_self_loop_node_hover() -> None:
    node = GraphNode(node_id="L")
    loop = GraphEdge(source="L", target="L", edge_id="loop")
    build_index([node], [loop])
    machine = HighlightStateMachine()

    snapshot = machine.on_node_hover(node, pointer_held=False)

    assert snapshot.node_ids == {"L"}
    assert snapshot.edge_ids == {"loop"}
    link_snapshot = machine.on_link_hover(loop)
    assert link_snapshot.node_ids == {"L"}


def test_listeners_receive_every_transition() -> None:
    (a, _b, _c, _d), _edges = _graph()
    machine = HighlightStateMachine()
    received: List[HighlightSnapshot] = []
    unsubscribe = machine.subscribe(received.append)

    machine.on_node_hover(a, pointer_held=False)
    machine.on_node_drag_end()
    unsubscribe()
    machine.on_node_hover(a, pointer_held=False)

    assert [snapshot.mode for snapshot in received] == [HighlightMode.HOVERING, HighlightMode.IDLE]


def test_snapshots_are_isolated_from_later_transitions() -> None:
    (a, _b, _c, _d), _edges = _graph()
    machine = HighlightStateMachine()

    snapshot = machine.on_node_hover(a, pointer_held=False)
    machine.on_node_drag_end()

    assert snapshot.node_ids == {"A", "B", "C"}
    assert machine.is_node_highlighted(a) is False


def test_reset_clears_hover_target() -> None:
    (a, _b, _c, _d), _edges = _graph()
    machine = HighlightStateMachine()
    machine.on_node_hover(a, pointer_held=False)

    snapshot = machine.reset()

    assert snapshot.hovered_node_id is None
    assert snapshot.node_ids == frozenset()


def test_wrong_argument_types_are_contract_violations() -> None:
    machine = HighlightStateMachine()

    with pytest.raises(TypeError):
        machine.on_node_hover("A", pointer_held=False)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        machine.on_link_hover(GraphNode(node_id="A"))  # type: ignore[arg-type]


def test_unindexed_edge_hover_is_a_contract_violation() -> None:
    machine = HighlightStateMachine()

    with pytest.raises(TypeError):
        machine.on_link_hover(GraphEdge(source="A", target="B", edge_id="raw"))

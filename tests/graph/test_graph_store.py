"""Tests for dataset assembly and atomic graph rebuilds."""

from __future__ import annotations

import logging
from typing import List

import pytest

from tagweb.app.contracts import DatasetRecord, RawGraph, RawLink, RawNode
from tagweb.app.graph.adjacency import DanglingReferenceError
from tagweb.app.graph.builder import CurvatureSettings, TagDatasetBuilder, nodes_from_raw, prepare_graph
from tagweb.app.graph.curvature import InvalidCurvatureConfigError
from tagweb.app.graph.model import DuplicateNodeError, Graph
from tagweb.app.graph.store import GraphStore


def _records() -> List[DatasetRecord]:
    return [
        DatasetRecord(name="Alpha", tags=["red", "blue", "red"]),
        DatasetRecord(name="Beta", tags=["blue"]),
    ]


def test_tag_builder_creates_record_and_tag_nodes() -> None:
    nodes, edges = TagDatasetBuilder().build(_records())

    assert [node.node_id for node in nodes] == ["record:Alpha", "record:Beta", "tag:red", "tag:blue"]
    assert [node.attributes["kind"] for node in nodes] == ["record", "record", "tag", "tag"]
    assert len(edges) == 4


def test_tag_builder_rejects_duplicate_record_names() -> None:
    records = [DatasetRecord(name="Same", tags=[]), DatasetRecord(name="Same", tags=["x"])]

    with pytest.raises(DuplicateNodeError):
        TagDatasetBuilder().build(records)


def test_repeated_tag_produces_curved_parallel_edges() -> None:
    nodes, edges = TagDatasetBuilder().build(_records())

    graph = prepare_graph(nodes, edges, CurvatureSettings(max_curvature=0.5), revision=3)

    assert graph.revision == 3
    red_edges = [edge for edge in graph.edges if edge.pair_key == "record:Alpha_tag:red"]
    assert [edge.curvature for edge in red_edges] == [-0.5, 0.5]
    alpha = graph.node("record:Alpha")
    assert alpha is not None
    assert alpha.neighbor_ids() == ["tag:red", "tag:blue", "tag:red"]


def test_nodes_from_raw_keeps_identifiers() -> None:
    raw = RawGraph(
        nodes=[RawNode(id="a", label="A"), RawNode(id="b")],
        links=[RawLink(source=0, target="b", id="first"), RawLink(source="b", target="a")],
    )

    nodes, edges = nodes_from_raw(raw)
    graph = prepare_graph(nodes, edges, CurvatureSettings())

    assert [node.label for node in nodes] == ["A", "b"]
    assert graph.edge("first") is edges[0]
    assert graph.edge("b->a#1") is edges[1]
    assert {edge.curvature for edge in graph.links} == {0.5}


def test_store_swaps_graph_and_notifies_listeners() -> None:
    store = GraphStore(CurvatureSettings())
    seen: List[Graph] = []
    store.on_rebuild(seen.append)

    graph = store.load_records(_records())

    assert store.current is graph
    assert graph.revision == 1
    assert seen == [graph]


def test_store_memoises_on_input_identity() -> None:
    store = GraphStore(CurvatureSettings())
    records = _records()

    first = store.load_records(records)
    second = store.load_records(records)
    third = store.load_records(list(records))

    assert second is first
    assert third is not first
    assert third.revision == 2


def test_failed_rebuild_keeps_previous_graph() -> None:
    store = GraphStore(CurvatureSettings())
    seen: List[Graph] = []
    store.on_rebuild(seen.append)
    good = store.load_records(_records())
    broken = RawGraph(nodes=[RawNode(id="a")], links=[RawLink(source="a", target="ghost")])

    with pytest.raises(DanglingReferenceError):
        store.load_raw(broken)

    assert store.current is good
    assert seen == [good]


def test_invalid_curvature_settings_fail_the_rebuild() -> None:
    store = GraphStore(CurvatureSettings(max_curvature=0.0))

    with pytest.raises(InvalidCurvatureConfigError):
        store.load_records(_records())

    assert store.current.node_count == 0


def test_unsubscribed_listener_is_not_called() -> None:
    store = GraphStore(CurvatureSettings())
    seen: List[Graph] = []
    unsubscribe = store.on_rebuild(seen.append)
    unsubscribe()

    store.load_records(_records())

    assert seen == []


def test_record_named_like_a_tag_key_does_not_collide() -> None:
    records = [DatasetRecord(name="tag:red", tags=[]), DatasetRecord(name="Alpha", tags=["red"])]
    nodes, edges = TagDatasetBuilder().build(records)

    graph = prepare_graph(nodes, edges, CurvatureSettings())

    assert [node.node_id for node in graph.iter_nodes()] == ["record:tag:red", "record:Alpha", "tag:red"]
    red = graph.node("tag:red")
    assert red is not None
    assert red.neighbor_ids() == ["record:Alpha"]


def test_builder_failure_is_logged_and_keeps_previous_graph(caplog: pytest.LogCaptureFixture) -> None:
    store = GraphStore(CurvatureSettings())
    good = store.load_records(_records())
    duplicates = [DatasetRecord(name="Same", tags=[]), DatasetRecord(name="Same", tags=["x"])]

    with caplog.at_level(logging.ERROR, logger="tagweb.app.graph.store"):
        with pytest.raises(DuplicateNodeError):
            store.load_records(duplicates)

    assert store.current is good
    assert any("Graph rebuild 2 failed" in record.getMessage() for record in caplog.records)

"""Tests for the dataset preparation utility."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts.prepare_graph import main


def test_main_prints_curved_graph(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dataset = tmp_path / "records.json"
    dataset.write_text(json.dumps([{"name": "Doc", "tags": ["a", "a", "b"]}]), encoding="utf-8")

    exit_code = main([str(dataset)])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [node["id"] for node in payload["nodes"]] == ["record:Doc", "tag:a", "tag:b"]
    assert [link["curvature"] for link in payload["links"]] == [-0.5, 0.5, 0.0]


def test_main_applies_curvature_override(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dataset = tmp_path / "graph.json"
    dataset.write_text(
        json.dumps({"nodes": [{"id": "p"}, {"id": "q"}], "links": [{"source": 0, "target": 1}] * 2}),
        encoding="utf-8",
    )

    exit_code = main([str(dataset), "--max-curvature", "0.25"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [link["curvature"] for link in payload["links"]] == [-0.25, 0.25]


def test_main_reports_dangling_links(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dataset = tmp_path / "broken.json"
    dataset.write_text(
        json.dumps({"nodes": [{"id": "p"}], "links": [{"source": "p", "target": "ghost"}]}),
        encoding="utf-8",
    )

    exit_code = main([str(dataset)])

    assert exit_code == 1
    assert "Graph preparation failed" in capsys.readouterr().err

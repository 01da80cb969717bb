#!/usr/bin/env python3
"""CLI utility that prepares a dataset for the graph renderer and prints it as JSON."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from tagweb.app.config import ConfigError, load_config
from tagweb.app.contracts import DatasetRecord, RawGraph
from tagweb.app.graph.builder import CurvatureSettings, TagDatasetBuilder, nodes_from_raw, prepare_graph
from tagweb.app.graph.model import Graph, GraphBuildError

LOGGER = logging.getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(List[DatasetRecord])


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "dataset",
        type=Path,
        help="JSON file holding either a list of {name, tags} records or a {nodes, links} object",
    )
    parser.add_argument(
        "--max-curvature",
        type=float,
        default=None,
        help="Override graph.max_curvature from config.yaml",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an alternative config.yaml",
    )
    return parser.parse_args(argv)


def load_dataset(path: Path, settings: CurvatureSettings) -> Graph:
    """Read ``path`` and return the prepared graph.

    Raises:
        ValueError: If the file does not hold a supported dataset shape.
        GraphBuildError: If the dataset cannot be indexed or curved.
    """

    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        records = _RECORDS_ADAPTER.validate_python(payload)
        nodes, edges = TagDatasetBuilder().build(records)
    elif isinstance(payload, dict):
        nodes, edges = nodes_from_raw(RawGraph.model_validate(payload))
    else:
        raise ValueError("Dataset must be a JSON list of records or a JSON object with nodes and links")
    return prepare_graph(nodes, edges, settings, revision=1)


def graph_to_payload(graph: Graph) -> Dict[str, object]:
    """Serialise ``graph`` into the node-link shape the renderer consumes."""

    return {
        "nodes": [
            {
                "id": node.node_id,
                "label": node.label,
                "neighbors": node.neighbor_ids(),
                "links": node.incident_edge_ids(),
            }
            for node in graph.iter_nodes()
        ],
        "links": [
            {
                "id": edge.edge_id,
                "source": edge.source_node.node_id,
                "target": edge.target_node.node_id,
                "pair_key": edge.pair_key,
                "curvature": edge.curvature,
            }
            for edge in graph.edges
        ],
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the dataset preparation utility.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"Unable to load configuration: {exc}", file=sys.stderr)
        return 2
    settings = CurvatureSettings(
        max_curvature=args.max_curvature if args.max_curvature is not None else config.graph.max_curvature,
        self_loop_curvature=config.graph.self_loop_curvature,
    )

    try:
        graph = load_dataset(args.dataset, settings)
    except (OSError, ValueError, ValidationError) as exc:
        print(f"Unable to read dataset {args.dataset}: {exc}", file=sys.stderr)
        return 1
    except GraphBuildError as exc:
        print(f"Graph preparation failed: {exc}", file=sys.stderr)
        return 1

    json.dump(graph_to_payload(graph), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Curvature assignment so parallel edges render as distinct arcs."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from tagweb.app.graph.model import GraphBuildError, GraphEdge

LOGGER = logging.getLogger(__name__)


class InvalidCurvatureConfigError(GraphBuildError):
    """Raised when curvature parameters cannot produce a valid fan-out."""


@dataclass(frozen=True)
class CurvatureSummary:
    """Counts describing the outcome of a curvature pass."""

    bundled_pairs: int
    bundled_edges: int
    self_loops: int


def pair_key(source_key: str, target_key: str) -> str:
    """Return the order-independent key for an unordered endpoint pair."""

    if source_key <= target_key:
        return f"{source_key}_{target_key}"
    return f"{target_key}_{source_key}"


def fan_out(count: int, max_curvature: float) -> List[float]:
    """Return evenly spaced curvatures for ``count`` same-direction parallel edges.

    The last value is always ``+max_curvature`` and the first ``-max_curvature``.
    """

    if count < 1:
        raise InvalidCurvatureConfigError(f"Group size must be positive, got {count}")
    if count == 1:
        return [0.0]
    last_index = count - 1
    delta = (2 * max_curvature) / last_index
    values = [-max_curvature + index * delta for index in range(last_index)]
    values.append(max_curvature)
    return values


def assign_curvatures(
    edges: Sequence[GraphEdge],
    max_curvature: float,
    *,
    self_loop_curvature: Optional[float] = None,
) -> CurvatureSummary:
    """Set ``pair_key`` and ``curvature`` on every edge.

    Edges are grouped by their unordered endpoint ids in first-appearance order;
    ``pair_key`` is only the display form of that grouping. Within a group of
    ``n > 1`` edges the last edge bows by ``+max_curvature`` and the others are
    spread evenly across ``[-max_curvature, +max_curvature)``; an edge running
    opposite to the last edge has its value negated so every arc bows relative
    to the same canonical direction. Single edges stay straight.

    Self-loops never join a group. They receive ``self_loop_curvature``
    (``0.0`` when omitted).

    Args:
        edges: Indexed edges in their input order.
        max_curvature: Largest absolute curvature, strictly positive.
        self_loop_curvature: Fixed curvature for self-loops, non-negative.

    Returns:
        CurvatureSummary: Counts for logging and diagnostics.

    Raises:
        InvalidCurvatureConfigError: If the curvature parameters are invalid.
        TypeError: If an edge has not been indexed.
    """

    max_value = _validate_max(max_curvature)
    loop_value = 0.0 if self_loop_curvature is None else float(self_loop_curvature)
    if not math.isfinite(loop_value) or loop_value < 0:
        raise InvalidCurvatureConfigError(
            f"Self-loop curvature must be a finite non-negative number, got {self_loop_curvature!r}"
        )

    groups: Dict[Tuple[str, str], List[GraphEdge]] = {}
    self_loops = 0
    for edge in edges:
        source = edge.source_node
        target = edge.target_node
        edge.pair_key = pair_key(source.node_id, target.node_id)
        if source is target:
            edge.curvature = loop_value
            self_loops += 1
            continue
        low, high = sorted((source.node_id, target.node_id))
        groups.setdefault((low, high), []).append(edge)

    bundled_pairs = 0
    bundled_edges = 0
    for members in groups.values():
        if len(members) == 1:
            members[0].curvature = 0.0
            continue
        bundled_pairs += 1
        bundled_edges += len(members)
        last = members[-1]
        for edge, value in zip(members, fan_out(len(members), max_value)):
            if edge is not last and edge.source is not last.source:
                value = -value
            edge.curvature = value

    summary = CurvatureSummary(
        bundled_pairs=bundled_pairs,
        bundled_edges=bundled_edges,
        self_loops=self_loops,
    )
    LOGGER.debug(
        "Assigned curvature to %d edges (bundled_pairs=%d, bundled_edges=%d, self_loops=%d)",
        len(edges),
        summary.bundled_pairs,
        summary.bundled_edges,
        summary.self_loops,
    )
    return summary


def _validate_max(max_curvature: float) -> float:
    try:
        value = float(max_curvature)
    except (TypeError, ValueError) as exc:
        raise InvalidCurvatureConfigError(f"Max curvature must be numeric, got {max_curvature!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidCurvatureConfigError(
            f"Max curvature must be a finite positive number, got {max_curvature!r}"
        )
    return value

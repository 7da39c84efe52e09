# src/exposure/computer.py — v1
"""Peer exposure term: weighted mean outcome among a node's neighbours.

With mode "out" a nominator is exposed to the outcomes of the people it
nominated. Each parallel edge counts once, weighted by its weight when the
graph carries weights. Nodes with no neighbour holding an outcome get no
entry at all, so callers can tell "no exposure" from "exposure 0".
"""

from __future__ import annotations

import logging
import math
from collections.abc import Hashable, Mapping
from typing import Literal

from peernet.core.errors import InvalidArgumentError
from peernet.graph.model import Graph

logger = logging.getLogger(__name__)

ExposureMode = Literal["out", "in", "all"]


def compute_exposure(
    graph: Graph,
    outcome_by_node: Mapping[Hashable, float | None],
    *,
    weighted: bool = True,
    mode: ExposureMode = "out",
) -> dict[Hashable, float]:
    """Compute the exposure term for every node that has one.

    Args:
        graph: Relation graph (not modified).
        outcome_by_node: Outcome per node; missing, None or NaN values are ignored.
        weighted: Use edge weights when present (edges without one count 1).
        mode: "out" (nominees), "in" (nominators) or "all" (both directions).

    Returns:
        Mapping node -> weighted mean neighbour outcome.

    Raises:
        InvalidArgumentError: Unknown mode or a negative edge weight.
    """
    if mode not in ("out", "in", "all"):
        raise InvalidArgumentError(f"Unknown exposure mode: {mode!r}")

    exposure: dict[Hashable, float] = {}
    for node in graph.nodes:
        neighbours = []
        if mode in ("out", "all"):
            neighbours.extend(graph.out_edges(node))
        if mode in ("in", "all"):
            neighbours.extend(graph.in_edges(node))

        total = 0.0
        weight_sum = 0.0
        for other, weight in neighbours:
            outcome = _outcome(outcome_by_node, other)
            if outcome is None:
                continue
            w = 1.0
            if weighted and weight is not None:
                if weight < 0:
                    raise InvalidArgumentError(
                        f"Negative weight {weight} on edge involving {node!r} and {other!r}"
                    )
                w = weight
            total += w * outcome
            weight_sum += w

        if weight_sum > 0:
            exposure[node] = total / weight_sum

    logger.debug(
        "Computed exposure for %d of %d nodes (mode=%s)",
        len(exposure), graph.number_of_nodes(), mode,
    )
    return exposure


def _outcome(outcome_by_node: Mapping[Hashable, float | None], node: Hashable) -> float | None:
    value = outcome_by_node.get(node)
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return value

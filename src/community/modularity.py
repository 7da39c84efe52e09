# src/community/modularity.py — v1
"""Newman modularity of a partition on the undirected view of a Graph.

Q = 1/2m * sum_ij (A_ij - gamma * k_i k_j / 2m) * delta(c_i, c_j)

Parallel and reciprocal nominations are summed into A. The score only
depends on which nodes share a community, never on the id values.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping

import numpy as np

from peernet.core.errors import InvalidArgumentError
from peernet.graph.model import Graph, UndirectedAdjacency


def modularity(
    graph: Graph,
    partition: Mapping[Hashable, int],
    weighted: bool = False,
    gamma: float = 1.0,
) -> float:
    """Modularity of ``partition`` (node -> community id) on ``graph``.

    Raises:
        InvalidArgumentError: If a node of the graph has no community.
    """
    missing = [n for n in graph.nodes if n not in partition]
    if missing:
        raise InvalidArgumentError(
            f"Partition does not cover {len(missing)} node(s), e.g. {missing[0]!r}"
        )
    labels = np.fromiter(
        (partition[n] for n in graph.nodes), dtype=np.int64, count=len(graph)
    )
    return modularity_from_labels(graph.undirected_adjacency(weighted), labels, gamma)


def modularity_from_labels(
    adj: UndirectedAdjacency,
    labels: np.ndarray,
    gamma: float = 1.0,
) -> float:
    """Modularity for an index-aligned label array."""
    two_m = float(adj.strength.sum())
    if two_m == 0.0 or labels.size == 0:
        return 0.0

    _, compact = np.unique(labels, return_inverse=True)
    rows = np.repeat(np.arange(labels.size), np.diff(adj.indptr))
    same = compact[rows] == compact[adj.indices]
    internal = float(adj.data[same].sum())

    community_strength = np.bincount(compact, weights=adj.strength)
    expected = float(np.square(community_strength).sum()) / two_m

    return (internal - gamma * expected) / two_m

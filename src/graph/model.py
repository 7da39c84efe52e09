# src/graph/model.py — v1
"""Directed relation graph built from nominator/nominee pairs.

Wraps a NetworkX MultiDiGraph (duplicate nominations are kept as parallel
edges) and adds the index-based bookkeeping the clustering and generation
hot loops need: nodes keep their first-encountered order and map to a
contiguous index 0..n-1.

The graph is immutable once built. Degree arrays and undirected adjacency
are derived from the edge set and cached.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any, Literal

import networkx as nx
import numpy as np

from peernet.core.errors import InvalidArgumentError, InvalidEdgeError

logger = logging.getLogger(__name__)

DegreeMode = Literal["in", "out", "total"]
SelfLoopPolicy = Literal["reject", "drop"]

EdgeTriple = tuple[Hashable, Hashable, float | None]


@dataclass(frozen=True)
class UndirectedAdjacency:
    """CSR view of the undirected graph: neighbours of index i are
    ``indices[indptr[i]:indptr[i + 1]]`` with summed edge weights in ``data``.
    """

    indptr: np.ndarray
    indices: np.ndarray
    data: np.ndarray
    strength: np.ndarray
    total_weight: float

    def neighbours(self, i: int) -> tuple[np.ndarray, np.ndarray]:
        start, end = self.indptr[i], self.indptr[i + 1]
        return self.indices[start:end], self.data[start:end]


class Graph:
    """Immutable directed relation graph with cached degree attributes.

    Use Graph.build() for raw input. The constructor expects nodes that are
    already unique and edges already normalised to (source, target, weight)
    triples, and only checks that every endpoint is a declared node.
    """

    def __init__(
        self,
        nodes: Sequence[Hashable],
        edges: Sequence[EdgeTriple],
    ) -> None:
        self._nodes: tuple[Hashable, ...] = tuple(nodes)
        self._index: dict[Hashable, int] = {n: i for i, n in enumerate(self._nodes)}
        self._edges: tuple[EdgeTriple, ...] = tuple(edges)
        for position, (u, v, _) in enumerate(self._edges):
            for endpoint in (u, v):
                if endpoint not in self._index:
                    raise InvalidEdgeError(
                        f"Edge #{position} endpoint {endpoint!r} is not a declared node"
                    )
        self._has_weights = any(w is not None for _, _, w in self._edges)

        n = len(self._nodes)
        self._in_degree = np.zeros(n, dtype=np.int64)
        self._out_degree = np.zeros(n, dtype=np.int64)
        for u, v, _ in self._edges:
            self._out_degree[self._index[u]] += 1
            self._in_degree[self._index[v]] += 1

        self._graph = nx.MultiDiGraph()
        self._graph.add_nodes_from(self._nodes)
        for u, v, w in self._edges:
            if w is None:
                self._graph.add_edge(u, v)
            else:
                self._graph.add_edge(u, v, weight=w)

        self._adjacency_cache: dict[bool, UndirectedAdjacency] = {}
        self._components: list[list[Hashable]] | None = None

    # --- Construction ---

    @classmethod
    def build(
        cls,
        edges: Iterable[Sequence[Any]],
        *,
        nodes: Iterable[Hashable] | None = None,
        self_loops: SelfLoopPolicy = "reject",
    ) -> Graph:
        """Build a graph from (source, target[, weight]) pairs.

        Args:
            edges: Iterable of 2- or 3-tuples. A ``None`` weight means unweighted.
            nodes: Optional nodes to declare up front (isolated nodes included).
            self_loops: "reject" raises on a self-loop, "drop" discards it.

        Returns:
            Graph whose nodes appear in first-encountered order.

        Raises:
            InvalidEdgeError: Malformed edge, or self-loop under "reject".
        """
        if self_loops not in ("reject", "drop"):
            raise InvalidArgumentError(f"Unknown self-loop policy: {self_loops!r}")

        ordered: dict[Hashable, None] = {}
        for node in nodes or ():
            _check_node(node)
            ordered.setdefault(node, None)

        parsed: list[EdgeTriple] = []
        dropped = 0
        for position, edge in enumerate(edges):
            u, v, w = _parse_edge(edge, position)
            if u == v:
                if self_loops == "reject":
                    raise InvalidEdgeError(
                        f"Edge #{position} is a self-loop on {u!r}"
                    )
                dropped += 1
                continue
            ordered.setdefault(u, None)
            ordered.setdefault(v, None)
            parsed.append((u, v, w))

        if dropped:
            logger.info("Dropped %d self-loop edge(s) during graph build", dropped)
        logger.debug("Built graph: %d nodes, %d edges", len(ordered), len(parsed))
        return cls(list(ordered), parsed)

    # --- Basic accessors ---

    @property
    def nodes(self) -> tuple[Hashable, ...]:
        return self._nodes

    @property
    def has_weights(self) -> bool:
        """True if at least one edge carries an explicit weight."""
        return self._has_weights

    def number_of_nodes(self) -> int:
        return len(self._nodes)

    def number_of_edges(self) -> int:
        return len(self._edges)

    def index_of(self, node: Hashable) -> int:
        return self._index[node]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        return node in self._index

    def __iter__(self):
        return iter(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={self.number_of_nodes()}, edges={self.number_of_edges()})"

    def edge_list(self) -> list[EdgeTriple]:
        """Return edges as (source, target, weight) triples; round-trips through build()."""
        return list(self._edges)

    def out_edges(self, node: Hashable) -> list[tuple[Hashable, float | None]]:
        """Outgoing (target, weight) pairs, one per parallel edge."""
        return [
            (v, data.get("weight"))
            for _, v, data in self._graph.out_edges(node, data=True)
        ]

    def in_edges(self, node: Hashable) -> list[tuple[Hashable, float | None]]:
        """Incoming (source, weight) pairs, one per parallel edge."""
        return [
            (u, data.get("weight"))
            for u, _, data in self._graph.in_edges(node, data=True)
        ]

    # --- Degrees ---

    def degree(self, node: Hashable, mode: DegreeMode = "total") -> int:
        """Degree of ``node``; total is always in + out (no self-loops)."""
        i = self._index[node]
        if mode == "in":
            return int(self._in_degree[i])
        if mode == "out":
            return int(self._out_degree[i])
        if mode == "total":
            return int(self._in_degree[i] + self._out_degree[i])
        raise InvalidArgumentError(f"Unknown degree mode: {mode!r}")

    def degree_sequence(self, mode: DegreeMode = "total") -> list[int]:
        """Degrees in node order. ``total`` is the undirected degree sequence."""
        if mode == "in":
            return self._in_degree.tolist()
        if mode == "out":
            return self._out_degree.tolist()
        if mode == "total":
            return (self._in_degree + self._out_degree).tolist()
        raise InvalidArgumentError(f"Unknown degree mode: {mode!r}")

    # --- Components ---

    def components(self) -> list[list[Hashable]]:
        """Weakly connected components, ordered by first-encountered member."""
        if self._components is None:
            # NetworkX yields components in node insertion order.
            self._components = [
                sorted(c, key=self._index.__getitem__)
                for c in nx.weakly_connected_components(self._graph)
            ]
        return self._components

    def membership(self) -> dict[Hashable, int]:
        """Map each node to its 1-based component id."""
        return {
            node: cid
            for cid, members in enumerate(self.components(), start=1)
            for node in members
        }

    def largest_component(self) -> Graph:
        """Subgraph induced on the giant component (first one wins on ties)."""
        comps = self.components()
        if not comps:
            return Graph([], [])
        giant = max(comps, key=len)
        return self.subgraph(giant)

    def subgraph(self, nodes: Iterable[Hashable]) -> Graph:
        """Induced subgraph keeping original node order, directions and weights."""
        keep = set(nodes)
        missing = keep.difference(self._index)
        if missing:
            raise KeyError(f"Nodes not in graph: {sorted(map(repr, missing))}")
        ordered = [n for n in self._nodes if n in keep]
        edges = [(u, v, w) for u, v, w in self._edges if u in keep and v in keep]
        return Graph(ordered, edges)

    # --- Export ---

    def to_networkx(self) -> nx.MultiDiGraph:
        """Copy as a NetworkX MultiDiGraph with degree attributes on every node."""
        g = self._graph.copy()
        for node, i in self._index.items():
            g.nodes[node]["in_degree"] = int(self._in_degree[i])
            g.nodes[node]["out_degree"] = int(self._out_degree[i])
            g.nodes[node]["total_degree"] = int(self._in_degree[i] + self._out_degree[i])
        return g

    def undirected_adjacency(self, weighted: bool = False) -> UndirectedAdjacency:
        """Symmetric CSR adjacency; parallel and reciprocal edges are summed.

        Unweighted mode counts each directed edge as 1. Weighted mode uses
        the edge weight, defaulting to 1 for edges without one.
        """
        if weighted in self._adjacency_cache:
            return self._adjacency_cache[weighted]

        n = len(self._nodes)
        m = len(self._edges)
        src = np.fromiter((self._index[u] for u, _, _ in self._edges), dtype=np.int64, count=m)
        dst = np.fromiter((self._index[v] for _, v, _ in self._edges), dtype=np.int64, count=m)
        if weighted:
            w = np.fromiter(
                (1.0 if x is None else float(x) for _, _, x in self._edges),
                dtype=np.float64,
                count=m,
            )
            if np.any(w < 0):
                raise InvalidArgumentError("Negative edge weights are not allowed here")
        else:
            w = np.ones(m, dtype=np.float64)

        rows = np.concatenate([src, dst])
        cols = np.concatenate([dst, src])
        vals = np.concatenate([w, w])

        if rows.size:
            keys = rows * n + cols
            order = np.argsort(keys, kind="stable")
            keys, vals = keys[order], vals[order]
            unique_keys, starts = np.unique(keys, return_index=True)
            data = np.add.reduceat(vals, starts)
            r = unique_keys // n
            indices = unique_keys % n
        else:
            data = np.zeros(0, dtype=np.float64)
            r = np.zeros(0, dtype=np.int64)
            indices = np.zeros(0, dtype=np.int64)

        indptr = np.zeros(n + 1, dtype=np.int64)
        np.cumsum(np.bincount(r, minlength=n), out=indptr[1:])
        strength = np.bincount(r, weights=data, minlength=n).astype(np.float64)

        adj = UndirectedAdjacency(
            indptr=indptr,
            indices=indices.astype(np.int64),
            data=data,
            strength=strength,
            total_weight=float(w.sum()),
        )
        self._adjacency_cache[weighted] = adj
        return adj


def _check_node(node: Any) -> None:
    if node is None or not isinstance(node, Hashable):
        raise InvalidEdgeError(f"Invalid node identifier: {node!r}")


def _parse_edge(edge: Sequence[Any], position: int) -> EdgeTriple:
    """Validate a raw edge and normalise it to a (source, target, weight) triple."""
    try:
        arity = len(edge)
    except TypeError:
        raise InvalidEdgeError(f"Edge #{position} is not a sequence: {edge!r}") from None
    if arity not in (2, 3):
        raise InvalidEdgeError(f"Edge #{position} must have 2 or 3 items, got {arity}")

    u, v = edge[0], edge[1]
    _check_node(u)
    _check_node(v)

    weight: float | None = None
    if arity == 3 and edge[2] is not None:
        raw = edge[2]
        if not isinstance(raw, Real) or not math.isfinite(float(raw)):
            raise InvalidEdgeError(f"Edge #{position} has a non-finite weight: {raw!r}")
        weight = float(raw)
    return u, v, weight

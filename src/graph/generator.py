# src/graph/generator.py — v1
"""Degree-preserving random graph generation (null model).

Two methods produce a simple undirected realization of a target degree
sequence, returned as a Graph on nodes 0..n-1 with each edge oriented from
the lower to the higher index:

- "edge_swap": deterministic Havel-Hakimi realization, then randomized by
  double edge swaps that keep every degree fixed (Viger-Latapy style).
- "stub_matching": shuffle degree stubs and pair them, rejecting any
  configuration with a self-loop or a repeated pair; retried up to
  ``max_tries`` times before GenerationExhaustedError.

Output is bit-for-bit reproducible for a fixed seed and sequence.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal

import networkx as nx
import numpy as np

from peernet.core.errors import (
    DegreeSequenceError,
    GenerationExhaustedError,
    InvalidArgumentError,
)
from peernet.graph.model import Graph

logger = logging.getLogger(__name__)

GenerationMethod = Literal["edge_swap", "stub_matching"]

DEFAULT_MAX_TRIES = 1000
DEFAULT_SWAPS_PER_EDGE = 10
# Swap attempts allowed per requested swap before randomization stops.
_SWAP_ATTEMPT_FACTOR = 10

SeedLike = int | np.random.SeedSequence


def validate_degree_sequence(degree_sequence: Sequence[int]) -> list[int]:
    """Return the sequence as a list of ints, or raise DegreeSequenceError.

    A sequence is accepted when every entry is a non-negative integer, the
    sum is even and the Erdos-Gallai inequalities hold.
    """
    seq: list[int] = []
    for d in degree_sequence:
        try:
            whole = int(d)
        except (TypeError, ValueError, OverflowError):
            raise DegreeSequenceError(f"Degree {d!r} is not an integer") from None
        if isinstance(d, bool) or whole != d:
            raise DegreeSequenceError(f"Degree {d!r} is not an integer")
        if d < 0:
            raise DegreeSequenceError(f"Degree {d!r} is negative")
        seq.append(whole)

    if sum(seq) % 2:
        raise DegreeSequenceError(f"Degree sum {sum(seq)} is odd")
    if not nx.is_graphical(seq, method="eg"):
        raise DegreeSequenceError("No simple graph realizes this degree sequence")
    return seq


def generate(
    degree_sequence: Sequence[int],
    seed: SeedLike,
    *,
    method: GenerationMethod = "edge_swap",
    max_tries: int = DEFAULT_MAX_TRIES,
    swaps_per_edge: int = DEFAULT_SWAPS_PER_EDGE,
) -> Graph:
    """Generate a simple graph whose undirected degree sequence is ``degree_sequence``.

    Args:
        degree_sequence: Target degree per node; node i gets degree_sequence[i].
        seed: Integer seed or SeedSequence; same seed gives the same graph.
        method: "edge_swap" (default) or "stub_matching".
        max_tries: Stub-matching attempts before giving up.
        swaps_per_edge: Successful double edge swaps requested per edge.

    Returns:
        Graph on nodes 0..n-1.

    Raises:
        DegreeSequenceError: If the sequence is not graphical.
        GenerationExhaustedError: If stub matching exhausts ``max_tries``.
    """
    if max_tries < 1:
        raise InvalidArgumentError(f"max_tries must be >= 1, got {max_tries}")
    if swaps_per_edge < 0:
        raise InvalidArgumentError(f"swaps_per_edge must be >= 0, got {swaps_per_edge}")

    seq = validate_degree_sequence(degree_sequence)
    rng = np.random.default_rng(seed)

    if method == "edge_swap":
        pairs = _havel_hakimi_pairs(seq)
        _randomize_by_swaps(pairs, rng, swaps_per_edge * len(pairs))
    elif method == "stub_matching":
        pairs = _stub_matching_pairs(seq, rng, max_tries)
    else:
        raise InvalidArgumentError(f"Unknown generation method: {method!r}")

    edges = sorted((min(u, v), max(u, v)) for u, v in pairs)
    return Graph.build(edges, nodes=range(len(seq)))


def _havel_hakimi_pairs(seq: list[int]) -> list[list[int]]:
    """Deterministic simple realization as a list of mutable [u, v] pairs."""
    hh = nx.havel_hakimi_graph(seq)
    return [[int(u), int(v)] for u, v in hh.edges()]


def _randomize_by_swaps(
    pairs: list[list[int]],
    rng: np.random.Generator,
    target_swaps: int,
) -> int:
    """Apply degree-preserving double edge swaps in place.

    Edge pair (a, b), (c, d) becomes (a, d), (c, b), or (a, c), (b, d) after
    a random flip. Swaps that would create a self-loop or a repeated pair
    are rejected. Returns the number of successful swaps.
    """
    m = len(pairs)
    if m < 2 or target_swaps == 0:
        return 0

    present = {_key(u, v) for u, v in pairs}
    max_attempts = target_swaps * _SWAP_ATTEMPT_FACTOR
    done = 0
    attempts = 0
    while done < target_swaps and attempts < max_attempts:
        attempts += 1
        i, j = rng.integers(m, size=2)
        if i == j:
            continue
        a, b = pairs[i]
        c, d = pairs[j]
        if rng.random() < 0.5:
            c, d = d, c
        if a == d or c == b:
            continue
        new1, new2 = _key(a, d), _key(c, b)
        if new1 == new2 or new1 in present or new2 in present:
            continue
        present.discard(_key(a, b))
        present.discard(_key(c, d))
        present.add(new1)
        present.add(new2)
        pairs[i] = [a, d]
        pairs[j] = [c, b]
        done += 1

    if done < target_swaps:
        logger.debug(
            "Edge swap randomization stopped at %d/%d swaps after %d attempts",
            done, target_swaps, attempts,
        )
    return done


def _stub_matching_pairs(
    seq: list[int],
    rng: np.random.Generator,
    max_tries: int,
) -> list[list[int]]:
    """Pair shuffled stubs; retry until the result is simple."""
    stubs = np.repeat(np.arange(len(seq), dtype=np.int64), seq)
    if stubs.size == 0:
        return []

    for attempt in range(1, max_tries + 1):
        pairs = rng.permutation(stubs).reshape(-1, 2)
        lo = pairs.min(axis=1)
        hi = pairs.max(axis=1)
        if np.any(lo == hi):
            continue
        keys = lo * len(seq) + hi
        if np.unique(keys).size != keys.size:
            continue
        logger.debug("Stub matching succeeded after %d attempt(s)", attempt)
        return [[int(u), int(v)] for u, v in zip(lo, hi)]

    raise GenerationExhaustedError(
        f"No simple realization found in {max_tries} stub-matching attempts",
        attempts=max_tries,
    )


def _key(u: int, v: int) -> tuple[int, int]:
    return (u, v) if u < v else (v, u)

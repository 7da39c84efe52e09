# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides small relation graphs with known structure and a fast annealing
schedule so clustering-heavy tests stay quick.
"""

from __future__ import annotations

import pytest

from peernet.community.models import SpinGlassConfig
from peernet.graph.model import Graph
from peernet.logging.context import clear_context


# === FIXTURES: Edge lists ===


@pytest.fixture
def scenario_edges() -> list[tuple[str, str]]:
    """Triangle A-B-C plus a separate pair D-E."""
    return [("A", "B"), ("A", "C"), ("B", "C"), ("D", "E")]


@pytest.fixture
def two_clique_edges() -> list[tuple[str, str]]:
    """Two 5-cliques (a*, b*) joined by the single bridge a4 -> b0."""
    edges: list[tuple[str, str]] = []
    for prefix in ("a", "b"):
        for i in range(5):
            for j in range(i + 1, 5):
                edges.append((f"{prefix}{i}", f"{prefix}{j}"))
    edges.append(("a4", "b0"))
    return edges


@pytest.fixture
def weighted_edges() -> list[tuple[str, str, float]]:
    """Nominations with relate weights."""
    return [
        ("ann", "bob", 1.0),
        ("ann", "cat", 3.0),
        ("bob", "cat", 2.0),
        ("cat", "ann", 1.0),
        ("dan", "ann", 0.5),
    ]


# === FIXTURES: Graphs ===


@pytest.fixture
def scenario_graph(scenario_edges) -> Graph:
    return Graph.build(scenario_edges)


@pytest.fixture
def two_clique_graph(two_clique_edges) -> Graph:
    return Graph.build(two_clique_edges)


@pytest.fixture
def weighted_graph(weighted_edges) -> Graph:
    return Graph.build(weighted_edges)


# === FIXTURES: Configuration ===


@pytest.fixture
def fast_config() -> SpinGlassConfig:
    """Short cooling schedule (about 90 sweeps) for quick tests."""
    return SpinGlassConfig(cool_fact=0.95)


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()

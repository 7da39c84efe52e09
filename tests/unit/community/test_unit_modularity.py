# tests/unit/community/test_unit_modularity.py — v1
"""Tests for community/modularity.py."""

from __future__ import annotations

import networkx as nx
import pytest

from peernet.community.modularity import modularity
from peernet.core.errors import InvalidArgumentError
from peernet.graph.model import Graph


def _nx_modularity(edges, groups) -> float:
    g = nx.Graph()
    g.add_edges_from(edges)
    return nx.community.modularity(g, groups)


class TestModularity:
    def test_matches_networkx(self, two_clique_edges):
        g = Graph.build(two_clique_edges)
        partition = {n: 1 if n.startswith("a") else 2 for n in g.nodes}
        expected = _nx_modularity(
            two_clique_edges,
            [{n for n in g.nodes if n.startswith("a")}, {n for n in g.nodes if n.startswith("b")}],
        )
        assert modularity(g, partition) == pytest.approx(expected)

    def test_single_community_is_zero(self, scenario_graph):
        partition = {n: 1 for n in scenario_graph.nodes}
        assert modularity(scenario_graph, partition) == pytest.approx(0.0)

    def test_relabel_invariant(self, scenario_graph):
        p1 = {"A": 1, "B": 1, "C": 2, "D": 3, "E": 3}
        p2 = {"A": 9, "B": 9, "C": 4, "D": 1, "E": 1}
        assert modularity(scenario_graph, p1) == pytest.approx(modularity(scenario_graph, p2))

    def test_components_as_communities(self, scenario_graph):
        partition = {"A": 1, "B": 1, "C": 1, "D": 2, "E": 2}
        # m = 4; (3/4 - (6/8)^2) + (1/4 - (2/8)^2)
        assert modularity(scenario_graph, partition) == pytest.approx(0.375)

    def test_bounded_above_by_one(self, two_clique_graph):
        singletons = {n: i for i, n in enumerate(two_clique_graph.nodes)}
        assert modularity(two_clique_graph, singletons) < 0
        halves = {n: 1 if n.startswith("a") else 2 for n in two_clique_graph.nodes}
        assert modularity(two_clique_graph, halves) < 1

    def test_no_edges(self):
        g = Graph.build([], nodes=["a", "b"])
        assert modularity(g, {"a": 1, "b": 2}) == 0.0

    def test_missing_node(self, scenario_graph):
        with pytest.raises(InvalidArgumentError, match="does not cover"):
            modularity(scenario_graph, {"A": 1})

    def test_weighted_differs(self, weighted_graph):
        partition = {"ann": 1, "cat": 1, "bob": 2, "dan": 2}
        unweighted = modularity(weighted_graph, partition)
        weighted = modularity(weighted_graph, partition, weighted=True)
        assert unweighted != pytest.approx(weighted)

    def test_gamma_scales_expected_term(self, scenario_graph):
        partition = {"A": 1, "B": 1, "C": 1, "D": 2, "E": 2}
        assert modularity(scenario_graph, partition, gamma=0.0) == pytest.approx(1.0)

# tests/unit/graph/test_unit_model.py — v1
"""Tests for graph/model.py — construction, degrees, components, adjacency."""

from __future__ import annotations

import math

import networkx as nx
import pytest

from peernet.core.errors import InvalidArgumentError, InvalidEdgeError
from peernet.graph.model import Graph


class TestBuild:
    def test_nodes_in_first_encountered_order(self, scenario_graph):
        assert scenario_graph.nodes == ("A", "B", "C", "D", "E")
        assert scenario_graph.number_of_edges() == 4

    def test_self_loop_rejected_by_default(self):
        with pytest.raises(InvalidEdgeError, match="self-loop"):
            Graph.build([("A", "B"), ("B", "B")])

    def test_self_loop_dropped_on_request(self):
        g = Graph.build([("A", "B"), ("B", "B")], self_loops="drop")
        assert g.number_of_edges() == 1
        assert g.degree("B", "total") == 1

    def test_unknown_self_loop_policy(self):
        with pytest.raises(InvalidArgumentError):
            Graph.build([("A", "B")], self_loops="keep")  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "edge",
        [
            ("A",), ("A", "B", 1.0, "x"), (None, "B"), ("A", "B", "heavy"),
            ("A", "B", math.nan), ("A", "B", math.inf), ("A", "B", -math.inf),
        ],
    )
    def test_malformed_edges(self, edge):
        with pytest.raises(InvalidEdgeError):
            Graph.build([edge])

    def test_non_sequence_edge(self):
        with pytest.raises(InvalidEdgeError):
            Graph.build([42])  # type: ignore[list-item]

    def test_constructor_rejects_undeclared_endpoint(self):
        with pytest.raises(InvalidEdgeError, match="not a declared node"):
            Graph(["A"], [("A", "B", None)])

    def test_duplicates_kept(self):
        g = Graph.build([("A", "B"), ("A", "B")])
        assert g.number_of_edges() == 2
        assert g.degree("A", "out") == 2
        assert g.degree("B", "in") == 2

    def test_declared_isolated_nodes(self):
        g = Graph.build([("A", "B")], nodes=["Z"])
        assert g.nodes == ("Z", "A", "B")
        assert g.degree("Z") == 0

    def test_none_weight_is_unweighted(self):
        g = Graph.build([("A", "B", None), ("B", "C")])
        assert g.has_weights is False
        assert g.edge_list() == [("A", "B", None), ("B", "C", None)]

    def test_weights_recorded(self, weighted_graph):
        assert weighted_graph.has_weights is True
        assert ("ann", "cat", 3.0) in weighted_graph.edge_list()

    def test_empty(self):
        g = Graph.build([])
        assert len(g) == 0
        assert g.components() == []
        assert g.largest_component().number_of_nodes() == 0


class TestDegrees:
    def test_scenario_degrees(self, scenario_graph):
        assert scenario_graph.degree("A", "out") == 2
        assert scenario_graph.degree("A", "in") == 0
        assert scenario_graph.degree("C", "in") == 2
        assert scenario_graph.degree("C", "total") == 2

    def test_total_is_in_plus_out(self, weighted_graph, two_clique_graph):
        for g in (weighted_graph, two_clique_graph):
            for node in g:
                assert g.degree(node, "in") + g.degree(node, "out") == g.degree(node, "total")

    def test_degree_sequence(self, scenario_graph):
        assert scenario_graph.degree_sequence("total") == [2, 2, 2, 1, 1]
        assert scenario_graph.degree_sequence("out") == [2, 1, 0, 1, 0]
        assert scenario_graph.degree_sequence("in") == [0, 1, 2, 0, 1]

    def test_unknown_mode(self, scenario_graph):
        with pytest.raises(InvalidArgumentError):
            scenario_graph.degree("A", "both")  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            scenario_graph.degree_sequence("both")  # type: ignore[arg-type]

    def test_unknown_node(self, scenario_graph):
        with pytest.raises(KeyError):
            scenario_graph.degree("Q")


class TestComponents:
    def test_scenario_components(self, scenario_graph):
        assert scenario_graph.components() == [["A", "B", "C"], ["D", "E"]]
        assert scenario_graph.membership() == {"A": 1, "B": 1, "C": 1, "D": 2, "E": 2}

    def test_giant_component(self, scenario_graph):
        giant = scenario_graph.largest_component()
        assert set(giant.nodes) == {"A", "B", "C"}
        assert giant.number_of_edges() == 3
        assert giant.edge_list() == [("A", "B", None), ("A", "C", None), ("B", "C", None)]

    def test_giant_tie_goes_to_first_component(self):
        g = Graph.build([("C", "D"), ("A", "B")])
        assert g.largest_component().nodes == ("C", "D")

    def test_direction_ignored(self):
        g = Graph.build([("A", "B"), ("C", "B")])
        assert len(g.components()) == 1

    def test_giant_keeps_weights(self, weighted_graph):
        giant = weighted_graph.largest_component()
        assert giant.edge_list() == weighted_graph.edge_list()

    def test_subgraph_unknown_node(self, scenario_graph):
        with pytest.raises(KeyError):
            scenario_graph.subgraph(["A", "Q"])


class TestRoundTrip:
    def test_edge_list_round_trip_preserves_degrees(self, weighted_graph):
        rebuilt = Graph.build(weighted_graph.edge_list())
        for mode in ("in", "out", "total"):
            assert rebuilt.degree_sequence(mode) == weighted_graph.degree_sequence(mode)
        assert rebuilt.nodes == weighted_graph.nodes

    def test_to_networkx_has_degree_attributes(self, scenario_graph):
        g = scenario_graph.to_networkx()
        assert isinstance(g, nx.MultiDiGraph)
        assert g.nodes["A"]["out_degree"] == 2
        assert g.nodes["C"]["total_degree"] == 2

    def test_to_networkx_is_a_copy(self, scenario_graph):
        g = scenario_graph.to_networkx()
        g.add_edge("A", "E")
        assert scenario_graph.number_of_edges() == 4


class TestUndirectedAdjacency:
    def test_scenario_strength(self, scenario_graph):
        adj = scenario_graph.undirected_adjacency()
        assert adj.strength.tolist() == [2.0, 2.0, 2.0, 1.0, 1.0]
        assert adj.total_weight == 4.0
        nbrs, _ = adj.neighbours(0)
        assert sorted(nbrs.tolist()) == [1, 2]

    def test_reciprocal_edges_summed(self):
        g = Graph.build([("A", "B"), ("B", "A")])
        adj = g.undirected_adjacency()
        nbrs, data = adj.neighbours(0)
        assert nbrs.tolist() == [1]
        assert data.tolist() == [2.0]

    def test_weighted(self, weighted_graph):
        adj = weighted_graph.undirected_adjacency(weighted=True)
        ann = weighted_graph.index_of("ann")
        cat = weighted_graph.index_of("cat")
        nbrs, data = adj.neighbours(ann)
        assert dict(zip(nbrs.tolist(), data.tolist()))[cat] == 4.0
        assert adj.total_weight == pytest.approx(7.5)

    def test_negative_weight_rejected(self):
        g = Graph.build([("A", "B", -1.0)])
        with pytest.raises(InvalidArgumentError):
            g.undirected_adjacency(weighted=True)

    def test_no_edges(self):
        g = Graph.build([], nodes=["A", "B"])
        adj = g.undirected_adjacency()
        assert adj.indptr.tolist() == [0, 0, 0]
        assert adj.strength.sum() == 0

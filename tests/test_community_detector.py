"""
Tests for label propagation and Louvain community detection.
"""

import networkx as nx
import pytest

from slicewise.analysis.decomposition.community_detector import (
    LabelPropagationDetector,
    LouvainDetector,
    propagate_labels,
    undirected_projection,
)


class TestPropagateLabels:
    """One synchronous pass."""

    def test_majority_label_wins(self):
        g = nx.Graph([("a", "b"), ("a", "c"), ("a", "d")])
        labels = {"a": 0, "b": 5, "c": 5, "d": 7}
        assert propagate_labels(g, labels)["a"] == 5

    def test_tie_goes_to_lowest_label(self):
        g = nx.Graph([("a", "b")])
        assert propagate_labels(g, {"a": 3, "b": 1}) == {"a": 1, "b": 1}

    def test_does_not_mutate_input(self):
        g = nx.Graph([("a", "b")])
        labels = {"a": 3, "b": 1}
        propagate_labels(g, labels)
        assert labels == {"a": 3, "b": 1}


class TestLabelPropagationDetector:
    """Tests for the detector."""

    def test_two_disjoint_groups(self, two_cliques):
        result = LabelPropagationDetector().detect(two_cliques)

        assert result.converged
        assert result.communities == (
            frozenset(f"a.A{i}" for i in range(5)),
            frozenset(f"b.B{i}" for i in range(5)),
        )

    def test_isolated_nodes_are_singletons(self, graph_factory):
        graph = graph_factory(["x.A", "x.B", "y.C", "z.D"], [("x.A", "x.B")])
        result = LabelPropagationDetector().detect(graph)
        assert result.communities == (
            frozenset({"x.A", "x.B"}),
            frozenset({"y.C"}),
            frozenset({"z.D"}),
        )

    def test_partition_is_disjoint_and_complete(self, graph_factory):
        names = [f"m.N{i:02d}" for i in range(20)]
        edges = [(names[i], names[(i * 7 + 3) % 20]) for i in range(20) if i != (i * 7 + 3) % 20]
        graph = graph_factory(names, edges)

        result = LabelPropagationDetector().detect(graph)

        members = [name for community in result.communities for name in community]
        assert sorted(members) == names
        assert len(members) == len(set(members))

    def test_detection_is_deterministic(self, graph_factory):
        names = [f"m.N{i:02d}" for i in range(15)]
        edges = [(names[i], names[(i + 1) % 15]) for i in range(15)]
        graph = graph_factory(names, edges)

        first = LabelPropagationDetector().detect(graph)
        second = LabelPropagationDetector().detect(graph)
        assert first == second

    def test_iteration_cap(self, graph_factory):
        graph = graph_factory(["p.A", "p.B"], [("p.A", "p.B")])
        result = LabelPropagationDetector(max_iterations=1).detect(graph)
        assert result.iterations == 1
        assert not result.converged
        assert result.communities == (frozenset({"p.A", "p.B"}),)

    def test_subset_of_names(self, two_cliques):
        subset = [f"a.A{i}" for i in range(3)] + ["b.B0"]
        result = LabelPropagationDetector().detect(two_cliques, subset)
        assert result.communities == (
            frozenset({"a.A0", "a.A1", "a.A2"}),
            frozenset({"b.B0"}),
        )

    def test_empty_graph(self, graph_factory):
        result = LabelPropagationDetector().detect(graph_factory([]))
        assert result.communities == ()
        assert result.converged

    def test_invalid_iteration_cap(self):
        with pytest.raises(ValueError):
            LabelPropagationDetector(max_iterations=0)


class TestLouvainDetector:
    """Tests for the seeded Louvain detector."""

    def test_two_disjoint_groups(self, two_cliques):
        result = LouvainDetector().detect(two_cliques)

        assert result.converged
        assert result.communities == (
            frozenset(f"a.A{i}" for i in range(5)),
            frozenset(f"b.B{i}" for i in range(5)),
        )

    def test_same_seed_gives_same_partition(self, graph_factory):
        names = [f"m.N{i:02d}" for i in range(30)]
        edges = [(names[i], names[(i * 7 + 3) % 30]) for i in range(30) if i != (i * 7 + 3) % 30]
        edges += [(names[i], names[i + 1]) for i in range(29)]
        graph = graph_factory(names, edges)

        first = LouvainDetector(seed=7).detect(graph)
        second = LouvainDetector(seed=7).detect(graph)

        assert first == second
        members = [name for community in first.communities for name in community]
        assert sorted(members) == names
        assert len(members) == len(set(members))

    def test_isolated_nodes_are_singletons(self, graph_factory):
        graph = graph_factory(["x.A", "x.B", "y.C"], [("x.A", "x.B")])
        result = LouvainDetector().detect(graph)
        assert result.communities == (frozenset({"x.A", "x.B"}), frozenset({"y.C"}))

    def test_graph_without_edges(self, graph_factory):
        result = LouvainDetector().detect(graph_factory(["x.A", "y.B"]))
        assert result.communities == (frozenset({"x.A"}), frozenset({"y.B"}))

    def test_subset_of_names(self, two_cliques):
        subset = [f"a.A{i}" for i in range(3)] + ["b.B0"]
        result = LouvainDetector().detect(two_cliques, subset)
        assert result.communities == (
            frozenset({"a.A0", "a.A1", "a.A2"}),
            frozenset({"b.B0"}),
        )

    def test_empty_graph(self, graph_factory):
        result = LouvainDetector().detect(graph_factory([]))
        assert result.communities == ()
        assert result.iterations == 0

    def test_invalid_resolution(self):
        with pytest.raises(ValueError):
            LouvainDetector(resolution=0)


class TestUndirectedProjection:
    """Tests for the undirected view used by detection."""

    def test_edge_in_either_direction(self, graph_factory):
        graph = graph_factory(["a.A", "b.B"], [("a.A", "b.B"), ("b.B", "a.A")])
        undirected = undirected_projection(graph)
        assert undirected.number_of_edges() == 1
        assert undirected.has_edge("b.B", "a.A")

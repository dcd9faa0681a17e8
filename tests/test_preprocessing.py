"""
Tests for hub filtering and hub reassignment.
"""

import logging

import pytest

from slicewise.analysis.decomposition.preprocessing import (
    filter_by_package,
    filter_hub_nodes,
    filter_hub_nodes_advanced,
    preprocess,
    reassign_hub_nodes,
)
from slicewise.config import HubFiltering, HubStrategy

LEAVES = [f"app.L{i}" for i in range(9)]


@pytest.fixture
def star(graph_factory):
    """Nine leaves that all depend on one hub."""
    return graph_factory(["app.Hub"] + LEAVES, [(leaf, "app.Hub") for leaf in LEAVES])


class TestDegreeFilter:
    """Tests for filter_hub_nodes."""

    def test_star_center_is_a_hub(self, star):
        result = filter_hub_nodes(star, percentile=0.95)
        assert result.hubs == ["app.Hub"]
        assert sorted(result.regular) == sorted(LEAVES)
        assert result.has_hubs

    def test_uniform_degrees_filter_nothing(self, graph_factory, caplog):
        names = [f"ring.N{i}" for i in range(6)]
        graph = graph_factory(names, [(names[i], names[(i + 1) % 6]) for i in range(6)])

        with caplog.at_level(logging.WARNING):
            result = filter_hub_nodes(graph, percentile=0.5)

        assert result.hubs == []
        assert result.regular == names
        assert "skipping hub filtering" in caplog.text

    def test_isolated_nodes_are_never_hubs(self, graph_factory):
        result = filter_hub_nodes(graph_factory(["a.A", "b.B"]), percentile=1.0)
        assert result.hubs == []

    @pytest.mark.parametrize("percentile", [0.0, -0.1, 1.5])
    def test_invalid_percentile(self, star, percentile):
        with pytest.raises(ValueError):
            filter_hub_nodes(star, percentile=percentile)


class TestPackageFilter:
    """Tests for filter_by_package."""

    def test_common_packages(self):
        result = filter_by_package(
            ["app.utils.Strings", "app.orders.Order", "app.core.Clock", "app.helper.Retry"]
        )
        assert result.hubs == ["app.utils.Strings", "app.core.Clock", "app.helper.Retry"]
        assert result.regular == ["app.orders.Order"]

    def test_custom_patterns(self):
        result = filter_by_package(["app.orders.Order", "app.audit.Log"], [r".*\.audit\..*"])
        assert result.hubs == ["app.audit.Log"]

    def test_combined_filter(self, graph_factory):
        names = ["app.Hub"] + LEAVES + ["app.common.Config"]
        graph = graph_factory(names, [(leaf, "app.Hub") for leaf in LEAVES])

        result = filter_hub_nodes_advanced(graph, percentile=0.95)

        assert result.hubs == ["app.Hub", "app.common.Config"]
        assert "app.common.Config" not in result.regular


class TestPreprocess:
    """Tests for mode dispatch."""

    def test_none_keeps_everything(self, star):
        result = preprocess(star, HubFiltering.NONE)
        assert result.regular == star.node_names()
        assert not result.has_hubs

    def test_degree_mode(self, star):
        assert preprocess(star, HubFiltering.DEGREE, 0.95).hubs == ["app.Hub"]


class TestReassign:
    """Tests for putting hubs back."""

    @pytest.fixture
    def graph(self, graph_factory):
        return graph_factory(
            ["a.A1", "a.A2", "b.B1", "h.H", "h.Lone"],
            [("h.H", "b.B1"), ("b.B1", "h.H"), ("a.A1", "h.H")],
        )

    def test_strongest_coupling(self, graph):
        result = reassign_hub_nodes([{"a.A1", "a.A2"}, {"b.B1"}], ["h.H"], graph)
        assert result == [{"a.A1", "a.A2"}, {"b.B1", "h.H"}]

    def test_uncoupled_hub_joins_largest(self, graph):
        result = reassign_hub_nodes([{"b.B1"}, {"a.A1", "a.A2"}], ["h.Lone"], graph)
        assert result == [{"b.B1"}, {"a.A1", "a.A2", "h.Lone"}]

    def test_shared_service(self, graph):
        result = reassign_hub_nodes(
            [{"a.A1", "a.A2"}, {"b.B1"}], ["h.Lone", "h.H"], graph, HubStrategy.SHARED_SERVICE
        )
        assert result == [{"a.A1", "a.A2"}, {"b.B1"}, {"h.H", "h.Lone"}]

    def test_no_communities_left(self, graph):
        assert reassign_hub_nodes([], ["h.H"], graph) == [{"h.H"}]

    def test_no_hubs(self, graph):
        assert reassign_hub_nodes([frozenset({"a.A1"})], [], graph) == [{"a.A1"}]

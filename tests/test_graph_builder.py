"""
Tests for GraphBuilder.
"""

import ast
import logging
import random

import pytest

from slicewise.analysis.graph.declarations import ClassDeclaration
from slicewise.analysis.graph.graph_builder import GraphBuilder, NodeSpec, build_dependency_graph
from slicewise.analysis.graph.models import ReferenceWeights


SHOP_MODULES = {
    "shop.catalog": (
        "class Product:\n"
        "    def __init__(self, price: int):\n"
        "        self.price = price\n"
    ),
    "shop.orders": (
        "from typing import List\n"
        "from shop.catalog import Product\n"
        "\n"
        "class OrderLine:\n"
        "    product: Product\n"
        "\n"
        "    def subtotal(self) -> int:\n"
        "        return self.product.price\n"
        "\n"
        "class Order:\n"
        "    lines: List[OrderLine]\n"
        "\n"
        "    def add(self, product: Product) -> 'OrderLine':\n"
        "        line = OrderLine()\n"
        "        line.product = product\n"
        "        return line\n"
        "\n"
        "    def first(self) -> 'Order':\n"
        "        return self\n"
    ),
}


def _weights(method_calls=0, field_accesses=0, object_creations=0, type_references=0):
    return ReferenceWeights(method_calls, field_accesses, object_creations, type_references)


class TestBuildFromWeights:
    """Tests for building graphs from precomputed weigher output."""

    def test_nodes_are_sorted_by_name(self):
        graph = GraphBuilder("p").build_from_weights(
            [NodeSpec("z.Z"), NodeSpec("a.A"), NodeSpec("m.M")], {}
        )
        assert graph.node_names() == ["a.A", "m.M", "z.Z"]

    def test_self_and_external_references_are_dropped(self):
        graph = GraphBuilder("p").build_from_weights(
            [NodeSpec("a.A"), NodeSpec("b.B")],
            {
                "a.A": {
                    "a.A": _weights(method_calls=3),
                    "b.B": _weights(type_references=1),
                    "typing.List": _weights(type_references=2),
                }
            },
        )
        assert graph.edge_count == 1
        assert graph.dependency("a.A", "b.B").type_references == 1

    def test_zero_weight_targets_are_skipped(self):
        graph = GraphBuilder("p").build_from_weights(
            [NodeSpec("a.A"), NodeSpec("b.B")], {"a.A": {"b.B": _weights()}}
        )
        assert graph.edge_count == 0

    def test_duplicate_specs_keep_first(self, caplog):
        with caplog.at_level(logging.WARNING):
            graph = GraphBuilder("p").build_from_weights(
                [NodeSpec("a.A", simple_name="First"), NodeSpec("a.A", simple_name="Second")], {}
            )
        assert len(graph) == 1
        assert graph.get("a.A").simple_name == "First"
        assert "Duplicate" in caplog.text

    def test_input_order_does_not_matter(self):
        names = [f"pkg.C{i}" for i in range(12)]
        rng = random.Random(7)
        weights = {}
        for source in names:
            for target in rng.sample(names, 4):
                weights.setdefault(source, {})[target] = _weights(
                    method_calls=rng.randint(0, 2), type_references=rng.randint(1, 2)
                )

        first = GraphBuilder("p").build_from_weights([NodeSpec(n) for n in names], weights)

        shuffled_names = names[:]
        rng.shuffle(shuffled_names)
        shuffled_weights = {
            source: dict(reversed(list(targets.items())))
            for source, targets in reversed(list(weights.items()))
        }
        second = GraphBuilder("p").build_from_weights(
            [NodeSpec(n) for n in shuffled_names], shuffled_weights
        )

        assert first.to_dict() == second.to_dict()


class TestBuildFromDeclarations:
    """Tests for building graphs from parsed declarations."""

    @pytest.fixture
    def graph(self, declarations_factory):
        declarations = declarations_factory(SHOP_MODULES)
        return build_dependency_graph(list(declarations.values()), project_id="shop")

    def test_nodes(self, graph):
        assert graph.node_names() == [
            "shop.catalog.Product",
            "shop.orders.Order",
            "shop.orders.OrderLine",
        ]

    def test_edges_and_breakdown(self, graph):
        order_to_line = graph.dependency("shop.orders.Order", "shop.orders.OrderLine")
        # return annotation + local `line` + constructor call + `line.product` access
        assert order_to_line.type_references == 2
        assert order_to_line.object_creations == 1
        assert order_to_line.field_accesses == 1

        line_to_product = graph.dependency("shop.orders.OrderLine", "shop.catalog.Product")
        # field annotation + `self.product.price`
        assert line_to_product.type_references == 1
        assert line_to_product.field_accesses == 1

    def test_no_self_edges(self, graph):
        assert all(dep.source != dep.target for dep in graph.edges())

    def test_no_dangling_edges(self, graph):
        for dep in graph.edges():
            assert 0 <= dep.target < len(graph)
            assert 0 <= dep.source < len(graph)

    def test_weight_equals_breakdown(self, graph):
        for dep in graph.edges():
            assert dep.weight == (
                dep.method_calls + dep.field_accesses + dep.object_creations + dep.type_references
            )
            assert dep.weight >= 1

    def test_repeated_builds_are_identical(self, declarations_factory):
        first = build_dependency_graph(list(declarations_factory(SHOP_MODULES).values()))
        second = build_dependency_graph(list(reversed(declarations_factory(SHOP_MODULES).values())))
        assert first.to_dict() == second.to_dict()

    def test_failing_declaration_keeps_zero_edges(self, declarations_factory, caplog):
        declarations = list(declarations_factory(SHOP_MODULES).values())
        broken_node = ast.parse("class Broken(Base):\n    pass\n").body[0]
        declarations.append(ClassDeclaration("shop.broken.Broken", broken_node, resolver=object()))

        with caplog.at_level(logging.WARNING):
            graph = GraphBuilder("shop").build(declarations)

        assert "shop.broken.Broken" in graph
        assert graph.outgoing(graph.index_of("shop.broken.Broken")) == []
        assert graph.edge_count > 0
        assert "Error while weighing shop.broken.Broken" in caplog.text

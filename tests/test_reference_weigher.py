"""
Tests for the reference weigher.
"""

import ast

import pytest

from slicewise.analysis.graph.declarations import ClassDeclaration
from slicewise.analysis.graph.reference_weigher import ReferenceWeigher, weigh_declaration


B_MODULE = """
class B:
    total: int = 0

    def compute(self) -> int:
        return self.total
"""


class TestScenarioC:
    """Method calls and field accesses are attributed to the receiver's type."""

    @pytest.fixture
    def declarations(self, declarations_factory):
        return declarations_factory(
            {
                "shop.b": B_MODULE,
                "shop.a": (
                    "from shop.b import B\n"
                    "\n"
                    "class A:\n"
                    "    def run(self, b: B) -> None:\n"
                    "        b.compute()\n"
                ),
                "shop.c": (
                    "from shop.b import B\n"
                    "\n"
                    "class C:\n"
                    "    def read(self, b: B) -> int:\n"
                    "        return b.total\n"
                ),
            }
        )

    def test_method_call_on_receiver(self, declarations):
        refs = weigh_declaration(declarations["shop.a.A"])
        assert refs["shop.b.B"].method_calls == 1
        assert refs["shop.b.B"].field_accesses == 0

    def test_field_access_on_receiver(self, declarations):
        refs = weigh_declaration(declarations["shop.c.C"])
        assert refs["shop.b.B"].field_accesses == 1
        assert refs["shop.b.B"].method_calls == 0

    def test_no_reverse_references(self, declarations):
        refs = weigh_declaration(declarations["shop.b.B"])
        assert "shop.a.A" not in refs
        assert "shop.c.C" not in refs


class TestCategories:
    """Each syntactic construct lands in its category."""

    def test_base_classes_are_type_references(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.base": "class Base:\n    pass\n",
                "pkg.child": "from pkg.base import Base\n\nclass Child(Base):\n    pass\n",
            }
        )
        refs = weigh_declaration(decls["pkg.child.Child"])
        assert refs["pkg.base.Base"].type_references == 1
        assert refs["pkg.base.Base"].total_weight == 1

    def test_creation_call_and_annotations(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.b": B_MODULE,
                "pkg.factory": (
                    "from pkg.b import B\n"
                    "\n"
                    "class Factory:\n"
                    "    def make(self) -> B:\n"
                    "        item = B()\n"
                    "        item.compute()\n"
                    "        return item\n"
                ),
            }
        )
        weights = weigh_declaration(decls["pkg.factory.Factory"])["pkg.b.B"]
        # return annotation + local `item` bound to `B()`
        assert weights.type_references == 2
        assert weights.object_creations == 1
        assert weights.method_calls == 1
        assert weights.field_accesses == 0

    def test_fields_and_locals_are_type_references(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.b": B_MODULE,
                "pkg.holder": (
                    "from typing import Optional\n"
                    "from pkg.b import B\n"
                    "\n"
                    "class Holder:\n"
                    "    primary: B\n"
                    "\n"
                    "    def __init__(self, *extra: B, **named: B):\n"
                    "        self.backup: Optional[B] = None\n"
                    "        current: 'B' = self.primary\n"
                ),
            }
        )
        weights = weigh_declaration(decls["pkg.holder.Holder"])["pkg.b.B"]
        # class field, *extra, **named, self.backup, local `current`
        assert weights.type_references == 5
        assert weights.object_creations == 0

    def test_constructor_bound_locals_are_type_references(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.b": B_MODULE,
                "pkg.user": (
                    "from pkg.b import B\n"
                    "\n"
                    "class User:\n"
                    "    def go(self):\n"
                    "        first = second = B()\n"
                    "        self.cached = B()\n"
                    "        count = len([])\n"
                ),
            }
        )
        weights = weigh_declaration(decls["pkg.user.User"])["pkg.b.B"]
        assert weights.type_references == 1
        assert weights.object_creations == 2

    def test_class_level_assignments_are_not_locals(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.b": B_MODULE,
                "pkg.holder": "from pkg.b import B\n\nclass Holder:\n    default = B()\n",
            }
        )
        weights = weigh_declaration(decls["pkg.holder.Holder"])["pkg.b.B"]
        assert weights.type_references == 0
        assert weights.object_creations == 1

    def test_receiverless_calls_contribute_nothing(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.b": B_MODULE,
                "pkg.util": (
                    "from pkg.b import B\n"
                    "\n"
                    "def helper():\n"
                    "    return 1\n"
                    "\n"
                    "class User:\n"
                    "    def go(self):\n"
                    "        helper()\n"
                ),
            }
        )
        assert weigh_declaration(decls["pkg.util.User"]) == {}

    def test_nested_classes_are_not_descended_into(self, declarations_factory):
        decls = declarations_factory(
            {
                "pkg.b": B_MODULE,
                "pkg.outer": (
                    "from pkg.b import B\n"
                    "\n"
                    "class Outer:\n"
                    "    class Inner:\n"
                    "        value: B\n"
                ),
            }
        )
        assert "pkg.b.B" not in weigh_declaration(decls["pkg.outer.Outer"])
        assert weigh_declaration(decls["pkg.outer.Outer.Inner"])["pkg.b.B"].type_references == 1


class ExplodingResolver:
    """Resolves bare names to `pkg.<name>` but raises on `Boom`."""

    def resolve_type(self, annotation):
        if isinstance(annotation, ast.Name):
            if annotation.id == "Boom":
                raise RuntimeError("cannot resolve Boom")
            return f"pkg.{annotation.id}"
        return None

    def resolve_expression(self, expr, scope):
        return None

    def resolve_instantiation(self, call):
        return None


class TestResolutionFailures:
    """A failing resolution never aborts the traversal."""

    def test_exception_in_resolver_is_skipped(self):
        node = ast.parse(
            "class Host(Base):\n"
            "    def f(self, a: Boom, b: Target) -> Other:\n"
            "        ...\n"
        ).body[0]
        declaration = ClassDeclaration("pkg.Host", node, ExplodingResolver())

        weigher = ReferenceWeigher(declaration)
        refs = weigher.weigh()

        assert set(refs) == {"pkg.Base", "pkg.Target", "pkg.Other"}
        assert all(w.type_references == 1 for w in refs.values())
        assert weigher.unresolved >= 1

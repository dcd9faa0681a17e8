"""
Project Index

Every class of the analyzed project with the facts the type resolver needs:
the owning module's symbols, declared field types, instance attributes
assigned in methods, and method definitions.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from ..analysis.graph.declarations import FunctionNode
from .ast_helpers import attr_path_from_ast, iter_class_defs
from .import_resolver import ModuleSymbols

logger = logging.getLogger(__name__)

MAX_ALIAS_DEPTH = 8


@dataclass
class IndexedClass:
    """One project class and the members the resolver looks up."""
    fully_qualified_name: str
    node: ast.ClassDef
    symbols: ModuleSymbols
    file_path: str = ""
    # field name -> annotation (class body `x: T` or `self.x: T` in a method)
    field_annotations: Dict[str, ast.expr] = field(default_factory=dict)
    # field name -> (assigned value, method it was assigned in) for `self.x = value`
    field_values: Dict[str, Tuple[ast.expr, FunctionNode]] = field(default_factory=dict)
    methods: Dict[str, FunctionNode] = field(default_factory=dict)
    # simple name -> fqn of classes nested directly in this class
    nested: Dict[str, str] = field(default_factory=dict)
    enclosing: Optional[str] = None

    @property
    def module(self) -> str:
        return self.symbols.module


def _collect_members(indexed: IndexedClass) -> None:
    for stmt in indexed.node.body:
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            indexed.field_annotations[stmt.target.id] = stmt.annotation
        elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
            indexed.methods[stmt.name] = stmt
            _collect_instance_attributes(indexed, stmt)


def _collect_instance_attributes(indexed: IndexedClass, method: FunctionNode) -> None:
    if not method.args.args:
        return
    self_name = method.args.args[0].arg

    for node in ast.walk(method):
        if isinstance(node, ast.AnnAssign):
            target = node.target
            if _is_self_attribute(target, self_name):
                indexed.field_annotations.setdefault(target.attr, node.annotation)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                if _is_self_attribute(target, self_name):
                    indexed.field_values.setdefault(target.attr, (node.value, method))


def _is_self_attribute(node: ast.AST, self_name: str) -> bool:
    return (
        isinstance(node, ast.Attribute)
        and isinstance(node.value, ast.Name)
        and node.value.id == self_name
    )


class ProjectIndex:
    """All modules and classes of one project, addressed by fully-qualified name."""

    def __init__(self):
        self.modules: Dict[str, ModuleSymbols] = {}
        self.classes: Dict[str, IndexedClass] = {}

    def add_module(
        self, module: str, tree: ast.Module, file_path: str = "", is_package: bool = False
    ) -> ModuleSymbols:
        """Index one parsed module; classes already indexed under the same fqn are kept."""
        symbols = ModuleSymbols.from_tree(tree, module, is_package)
        self.modules[module] = symbols

        for qualified, node in iter_class_defs(tree.body, ""):
            fqn = f"{module}.{qualified}" if module else qualified
            if fqn in self.classes:
                logger.warning(f"Class {fqn} is defined more than once, keeping the first")
                continue

            enclosing_name, sep, _ = qualified.rpartition(".")
            enclosing = None
            if sep:
                enclosing = f"{module}.{enclosing_name}" if module else enclosing_name

            indexed = IndexedClass(
                fully_qualified_name=fqn,
                node=node,
                symbols=symbols,
                file_path=file_path,
                enclosing=enclosing,
            )
            _collect_members(indexed)
            self.classes[fqn] = indexed
            if enclosing in self.classes:
                self.classes[enclosing].nested[node.name] = fqn

        return symbols

    def __contains__(self, fully_qualified_name: object) -> bool:
        return fully_qualified_name in self.classes

    def __len__(self) -> int:
        return len(self.classes)

    def __iter__(self) -> Iterator[IndexedClass]:
        return iter(self.classes[fqn] for fqn in sorted(self.classes))

    def get(self, fully_qualified_name: str) -> Optional[IndexedClass]:
        return self.classes.get(fully_qualified_name)

    # --------------------------
    # Name resolution
    # --------------------------

    def resolve_name(self, dotted: str, owner: Optional[str] = None) -> Optional[str]:
        """
        Fully-qualified name of `dotted` as written inside class `owner`.

        Nested classes of the owner (and its enclosing classes) shadow module
        names. Re-exports (`from .orders import Order` in a package
        `__init__`) are followed to the defining module.
        """
        if not dotted:
            return None
        head, _, rest = dotted.partition(".")

        scope = self.classes.get(owner) if owner else None
        while scope is not None:
            if head in scope.nested:
                base = scope.nested[head]
                return self.canonical(f"{base}.{rest}" if rest else base)
            scope = self.classes.get(scope.enclosing) if scope.enclosing else None

        symbols = self.classes[owner].symbols if owner in self.classes else None
        if symbols is None:
            return None
        qualified = symbols.qualify(dotted)
        return self.canonical(qualified) if qualified else None

    def canonical(self, candidate: str) -> str:
        """Follow module-level re-exports until `candidate` names a project class or stops changing."""
        for _ in range(MAX_ALIAS_DEPTH):
            if candidate in self.classes:
                return candidate
            module, rest = self._split_module(candidate)
            if module is None or not rest:
                return candidate
            requalified = self.modules[module].qualify(rest)
            if requalified is None or requalified == candidate:
                return candidate
            candidate = requalified
        return candidate

    def _split_module(self, dotted: str) -> Tuple[Optional[str], str]:
        """Longest known module prefix of `dotted` and the remainder."""
        parts = dotted.split(".")
        for cut in range(len(parts) - 1, 0, -1):
            module = ".".join(parts[:cut])
            if module in self.modules:
                return module, ".".join(parts[cut:])
        return None, ""

    def lineage(self, fully_qualified_name: str) -> List[str]:
        """The class followed by its project base classes, breadth first."""
        result: List[str] = []
        pending = [fully_qualified_name]
        while pending:
            current = pending.pop(0)
            if current in result or current not in self.classes:
                continue
            result.append(current)
            for base in self.classes[current].node.bases:
                resolved = self.resolve_name(attr_path_from_ast(base), current)
                if resolved and resolved in self.classes:
                    pending.append(resolved)
        return result

"""
Python Type Resolver

Best-effort static typing for one class: resolves annotations and the
expressions the reference weigher asks about to fully-qualified class names.

Only annotations, constructor calls and simple assignments are used; there
is no inference beyond that. Anything unclear resolves to None.
"""

from __future__ import annotations

import ast
import logging
from typing import List, Optional, Set, Tuple

from ..analysis.graph.declarations import FunctionNode
from .ast_helpers import attr_path_from_ast, looks_like_class_ref
from .project_index import ProjectIndex

logger = logging.getLogger(__name__)

_WRAPPERS = {"Optional", "Union", "Annotated", "Final", "ClassVar"}
_SELF_NAMES = {"self", "cls"}


def _is_none(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def _union_members(node: ast.expr) -> List[ast.expr]:
    """Flatten `A | B | None` into its members."""
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _union_members(node.left) + _union_members(node.right)
    return [node]


def _subscript_args(slice_node: ast.expr) -> List[ast.expr]:
    if isinstance(slice_node, ast.Tuple):
        return list(slice_node.elts)
    return [slice_node]


class PythonTypeResolver:
    """Resolver for the members of one project class."""

    def __init__(self, index: ProjectIndex, owner: str):
        self.index = index
        self.owner = owner
        self._in_progress: Set[Tuple[str, int]] = set()

    # --------------------------
    # Annotations
    # --------------------------

    def resolve_type(self, annotation: Optional[ast.expr]) -> Optional[str]:
        return self._resolve_type_in(annotation, self.owner)

    def _resolve_type_in(self, annotation: Optional[ast.expr], owner: str) -> Optional[str]:
        if annotation is None or _is_none(annotation):
            return None

        if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
            try:
                parsed = ast.parse(annotation.value.strip(), mode="eval")
            except SyntaxError:
                return None
            return self._resolve_type_in(parsed.body, owner)

        if isinstance(annotation, ast.BinOp) and isinstance(annotation.op, ast.BitOr):
            return self._resolve_union(_union_members(annotation), owner)

        if isinstance(annotation, ast.Subscript):
            base = attr_path_from_ast(annotation.value)
            base_last = base.split(".")[-1] if base else ""
            args = _subscript_args(annotation.slice)
            if base_last in ("Optional", "Union"):
                return self._resolve_union(args, owner)
            if base_last in _WRAPPERS:
                return self._resolve_type_in(args[0], owner) if args else None
            # other generics resolve to the container itself
            return self.index.resolve_name(base, owner)

        if isinstance(annotation, (ast.Name, ast.Attribute)):
            return self.index.resolve_name(attr_path_from_ast(annotation), owner)

        return None

    def _resolve_union(self, members: List[ast.expr], owner: str) -> Optional[str]:
        concrete = [m for m in members if not _is_none(m)]
        if len(concrete) != 1:
            return None
        return self._resolve_type_in(concrete[0], owner)

    # --------------------------
    # Expressions
    # --------------------------

    def resolve_expression(self, expr: ast.expr, scope: Optional[FunctionNode]) -> Optional[str]:
        key = (self.owner, id(expr))
        if key in self._in_progress:
            return None
        self._in_progress.add(key)
        try:
            return self._resolve_expression(expr, scope)
        finally:
            self._in_progress.discard(key)

    def _resolve_expression(self, expr: ast.expr, scope: Optional[FunctionNode]) -> Optional[str]:
        if isinstance(expr, ast.Name):
            return self._resolve_local_name(expr.id, scope)

        if isinstance(expr, ast.Attribute):
            owner_type = self.resolve_expression(expr.value, scope)
            if owner_type and owner_type in self.index:
                member = self._field_type(owner_type, expr.attr)
                if member:
                    return member
            # static access through a module path: `models.Order`
            dotted = attr_path_from_ast(expr)
            resolved = self.index.resolve_name(dotted, self.owner) if dotted else None
            if resolved and resolved in self.index:
                return resolved
            return None

        if isinstance(expr, ast.Call):
            created = self.resolve_instantiation(expr)
            if created:
                return created
            if isinstance(expr.func, ast.Attribute):
                receiver = self.resolve_expression(expr.func.value, scope)
                if receiver and receiver in self.index:
                    return self._method_return_type(receiver, expr.func.attr)
            return None

        if isinstance(expr, ast.Await):
            return self.resolve_expression(expr.value, scope)

        return None

    def _resolve_local_name(self, name: str, scope: Optional[FunctionNode]) -> Optional[str]:
        if scope is not None:
            if name in _SELF_NAMES and self._is_first_parameter(name, scope):
                return self.owner

            args = scope.args
            for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]:
                if arg.arg == name:
                    return self.resolve_type(arg.annotation) if arg.annotation is not None else None

            local = self._local_type(name, scope)
            if local:
                return local

        resolved = self.index.resolve_name(name, self.owner)
        if resolved and resolved in self.index:
            return resolved
        return None

    @staticmethod
    def _is_first_parameter(name: str, scope: FunctionNode) -> bool:
        params = [*scope.args.posonlyargs, *scope.args.args]
        return bool(params) and params[0].arg == name

    def _local_type(self, name: str, scope: FunctionNode) -> Optional[str]:
        """Type of a local from `x: T` or `x = Known(...)` anywhere in the function."""
        assigned: Optional[ast.expr] = None
        for node in ast.walk(scope):
            if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
                if node.target.id == name:
                    return self.resolve_type(node.annotation)
            elif isinstance(node, ast.Assign) and assigned is None:
                if any(isinstance(t, ast.Name) and t.id == name for t in node.targets):
                    assigned = node.value
        if assigned is not None:
            return self.resolve_expression(assigned, scope)
        return None

    def _field_type(self, class_fqn: str, attr: str) -> Optional[str]:
        for candidate in self.index.lineage(class_fqn):
            indexed = self.index.classes[candidate]
            if attr in indexed.nested:
                return indexed.nested[attr]
            if attr in indexed.field_annotations:
                return self._resolve_type_in(indexed.field_annotations[attr], candidate)
            if attr in indexed.field_values:
                value, method = indexed.field_values[attr]
                other = self if candidate == self.owner else PythonTypeResolver(self.index, candidate)
                other._in_progress |= self._in_progress
                return other.resolve_expression(value, method)
        return None

    def _method_return_type(self, class_fqn: str, method_name: str) -> Optional[str]:
        for candidate in self.index.lineage(class_fqn):
            method = self.index.classes[candidate].methods.get(method_name)
            if method is not None:
                return self._resolve_type_in(method.returns, candidate)
        return None

    # --------------------------
    # Constructor calls
    # --------------------------

    def resolve_instantiation(self, call: ast.Call) -> Optional[str]:
        dotted = attr_path_from_ast(call.func)
        if not dotted:
            return None
        resolved = self.index.resolve_name(dotted, self.owner)
        if not resolved:
            return None
        if resolved in self.index:
            return resolved
        if looks_like_class_ref(resolved):
            # imported third-party class; dropped later as external
            return resolved
        return None

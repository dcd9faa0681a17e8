"""
Reference Weigher

Visits one class declaration and tallies, per referenced class, how it is
used: type references, object creations, method calls and field accesses.
"""

from __future__ import annotations

import ast
import logging
from typing import Callable, Dict, List, Optional

from .declarations import ClassDeclaration, FunctionNode
from .models import ReferenceWeights

logger = logging.getLogger(__name__)

TYPE_REFERENCE = "type_references"
OBJECT_CREATION = "object_creations"
METHOD_CALL = "method_calls"
FIELD_ACCESS = "field_accesses"


class ReferenceWeigher(ast.NodeVisitor):
    """
    Collects weighted references from a class to other types.

    Categories:
    - type_references: base classes, field annotations, method return and
      parameter annotations, annotated local variables and locals
      assigned straight from a constructor call (`line = OrderLine()`)
    - object_creations: constructor calls (`Order(...)`)
    - method_calls: calls with an explicit receiver, attributed to the
      receiver's static type
    - field_accesses: attribute reads/writes, attributed to the type of the
      accessed expression

    Type annotations and base lists are only resolved as types; they are never
    walked as expressions. Nested classes are skipped because each one is a
    declaration of its own.
    """

    def __init__(self, declaration: ClassDeclaration):
        self.declaration = declaration
        self.resolver = declaration.resolver
        self.references: Dict[str, ReferenceWeights] = {}
        self.function_stack: List[FunctionNode] = []
        self.unresolved = 0

    def weigh(self) -> Dict[str, ReferenceWeights]:
        """Visit the declaration and return the per-target tally."""
        self.references = {}
        self.function_stack = []
        self.unresolved = 0
        self.visit(self.declaration.node)
        if self.unresolved:
            logger.debug(
                f"{self.declaration.fully_qualified_name}: {self.unresolved} references "
                f"could not be resolved"
            )
        return dict(self.references)

    # --------------------------
    # Declarations
    # --------------------------

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        if node is not self.declaration.node:
            return

        for base in node.bases:
            self._count_type(base)
        for keyword in node.keywords:
            self.visit(keyword.value)
        for decorator in node.decorator_list:
            self.visit(decorator)
        for stmt in node.body:
            self.visit(stmt)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node)

    def _visit_function(self, node: FunctionNode) -> None:
        for decorator in node.decorator_list:
            self.visit(decorator)

        if node.returns is not None:
            self._count_type(node.returns)

        args = node.args
        all_args = [*args.posonlyargs, *args.args, *args.kwonlyargs]
        if args.vararg is not None:
            all_args.append(args.vararg)
        if args.kwarg is not None:
            all_args.append(args.kwarg)
        for arg in all_args:
            if arg.annotation is not None:
                self._count_type(arg.annotation)

        for default in args.defaults:
            self.visit(default)
        for default in args.kw_defaults:
            if default is not None:
                self.visit(default)

        self.function_stack.append(node)
        try:
            for stmt in node.body:
                self.visit(stmt)
        finally:
            self.function_stack.pop()

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        # Class-body annotations and `self.x: T` are fields, bare names inside
        # functions are locals; each counts once as a type reference.
        self._count_type(node.annotation)
        if not isinstance(node.target, ast.Name):
            self.visit(node.target)
        if node.value is not None:
            self.visit(node.value)

    def visit_Assign(self, node: ast.Assign) -> None:
        # A local bound to a constructor call is typed by that call.
        if (
            self.function_stack
            and isinstance(node.value, ast.Call)
            and any(isinstance(target, ast.Name) for target in node.targets)
        ):
            created = self._resolve(self.resolver.resolve_instantiation, node.value)
            if created:
                self._add(created, TYPE_REFERENCE)
        self.generic_visit(node)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        for default in node.args.defaults:
            self.visit(default)
        self.visit(node.body)

    # --------------------------
    # Expressions
    # --------------------------

    def visit_Call(self, node: ast.Call) -> None:
        created = self._resolve(self.resolver.resolve_instantiation, node)
        func = node.func

        if created:
            self._add(created, OBJECT_CREATION)
        elif isinstance(func, ast.Attribute):
            receiver_type = self._resolve(self.resolver.resolve_expression, func.value, self._scope)
            if receiver_type:
                self._add(receiver_type, METHOD_CALL)
        # Receiver-less calls (`helper()`) contribute nothing.

        if isinstance(func, ast.Attribute):
            self.visit(func.value)
        elif not isinstance(func, ast.Name):
            self.visit(func)

        for arg in node.args:
            self.visit(arg)
        for keyword in node.keywords:
            self.visit(keyword.value)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        owner = self._resolve(self.resolver.resolve_expression, node.value, self._scope)
        if owner:
            self._add(owner, FIELD_ACCESS)
        self.visit(node.value)

    # --------------------------
    # Helpers
    # --------------------------

    @property
    def _scope(self) -> Optional[FunctionNode]:
        return self.function_stack[-1] if self.function_stack else None

    def _count_type(self, annotation: ast.expr) -> None:
        fqn = self._resolve(self.resolver.resolve_type, annotation)
        if fqn:
            self._add(fqn, TYPE_REFERENCE)

    def _resolve(self, fn: Callable[..., Optional[str]], *args) -> Optional[str]:
        try:
            result = fn(*args)
        except Exception as e:
            # resolution is best-effort: one failure never aborts the traversal
            logger.debug(
                f"Resolution failed in {self.declaration.fully_qualified_name} "
                f"({fn.__name__}): {e}"
            )
            result = None
        if not result:
            self.unresolved += 1
            return None
        return result

    def _add(self, fqn: str, category: str) -> None:
        weights = self.references.get(fqn)
        if weights is None:
            weights = self.references[fqn] = ReferenceWeights()
        setattr(weights, category, getattr(weights, category) + 1)


def weigh_declaration(declaration: ClassDeclaration) -> Dict[str, ReferenceWeights]:
    """Convenience wrapper: weigh a single declaration."""
    return ReferenceWeigher(declaration).weigh()

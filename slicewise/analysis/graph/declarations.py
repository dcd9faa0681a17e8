"""
Declarations consumed by the graph engine.

A declaration is one class-like definition together with a resolver that maps
type annotations and expressions inside it to fully-qualified class names.
Resolution is best-effort: a resolver answers None for anything it cannot
resolve and the engine simply skips that reference.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from .models import ClassKind

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


class TypeResolver(Protocol):
    """Maps syntax inside one declaration to fully-qualified class names."""

    def resolve_type(self, annotation: ast.expr) -> Optional[str]:
        """Resolve a type annotation (or base-class expression)."""
        ...

    def resolve_expression(self, expr: ast.expr, scope: Optional[FunctionNode]) -> Optional[str]:
        """Resolve the static type of an expression evaluated inside `scope`."""
        ...

    def resolve_instantiation(self, call: ast.Call) -> Optional[str]:
        """Return the created class when `call` is a constructor call, else None."""
        ...


@dataclass(frozen=True)
class ClassDeclaration:
    """One class-like declaration of the analyzed project."""
    fully_qualified_name: str
    node: ast.ClassDef
    resolver: TypeResolver
    kind: ClassKind = ClassKind.CLASS
    module: str = ""
    file_path: str = ""

    @property
    def simple_name(self) -> str:
        return self.node.name

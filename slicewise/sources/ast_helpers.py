"""
AST helper functions shared by the Python source frontend.
"""

from __future__ import annotations

import ast
from typing import Iterator, List, Tuple


def attr_path_from_ast(node: ast.AST) -> str:
    """
    Dotted path of a Name/Attribute chain.

    Examples:
      - Name(id="Order") -> "Order"
      - Attribute(Attribute(Name("shop"), "orders"), "Order") -> "shop.orders.Order"
      - anything else (calls, subscripts) -> ""
    """
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = attr_path_from_ast(node.value)
        return f"{base}.{node.attr}" if base else ""
    return ""


def looks_like_class_ref(ref: str) -> bool:
    """
    Heuristic: accept class references where the last segment starts with uppercase.

    Examples:
      - "OrderService" -> True
      - "shop.orders.Order" -> True
      - "create_order" -> False
    """
    if not ref:
        return False
    last = ref.split(".")[-1]
    return bool(last) and last[0].isupper()


def iter_toplevel_import_nodes(tree: ast.Module) -> Iterator[ast.stmt]:
    """Yield top-level Import/ImportFrom nodes, including ones inside top-level If/Try."""

    def walk(nodes: List[ast.stmt]) -> Iterator[ast.stmt]:
        for node in nodes:
            if isinstance(node, (ast.Import, ast.ImportFrom)):
                yield node
            elif isinstance(node, ast.If):
                yield from walk(node.body)
                yield from walk(node.orelse)
            elif isinstance(node, ast.Try):
                yield from walk(node.body)
                yield from walk(node.orelse)
                yield from walk(node.finalbody)
                for handler in node.handlers:
                    yield from walk(handler.body)

    yield from walk(list(getattr(tree, "body", []) or []))


def iter_class_defs(body: List[ast.stmt], prefix: str) -> Iterator[Tuple[str, ast.ClassDef]]:
    """
    Yield (qualified name, ClassDef) for classes in `body` and classes nested
    in their bodies. Classes defined inside functions are not visited.
    """
    for node in body:
        if isinstance(node, ast.ClassDef):
            qualified = f"{prefix}.{node.name}" if prefix else node.name
            yield qualified, node
            yield from iter_class_defs(node.body, qualified)
        elif isinstance(node, (ast.If, ast.Try)):
            # classes defined conditionally at module level
            nested: List[ast.stmt] = [*node.body, *node.orelse]
            if isinstance(node, ast.Try):
                nested.extend(node.finalbody)
                for handler in node.handlers:
                    nested.extend(handler.body)
            yield from iter_class_defs(nested, prefix)

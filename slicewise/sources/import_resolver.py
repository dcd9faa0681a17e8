"""
Import Resolution

Builds per-module symbol tables: which local names refer to which
fully-qualified modules or classes.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Dict, Optional

from .ast_helpers import iter_class_defs, iter_toplevel_import_nodes


def resolve_absolute_module(
    node: ast.ImportFrom, current_module: str, is_package: bool = False
) -> Optional[str]:
    """
    Resolve a (possibly relative) `from ... import` to an absolute module name.

    Examples, inside module `shop.orders.service`:
        - from . import models       -> shop.orders
        - from .models import Order  -> shop.orders.models
        - from .. import billing     -> shop

    Inside a package `__init__` the package itself is the level-1 base.
    Returns None when the import climbs above the top-level package.
    """
    if not node.level:
        return node.module

    if not current_module:
        return None
    parts = current_module.split(".")
    drop = node.level - 1 if is_package else node.level
    if drop > len(parts) or (drop == len(parts) and not node.module):
        return None
    base = ".".join(parts[: len(parts) - drop])
    if node.module:
        return f"{base}.{node.module}" if base else node.module
    return base or None


@dataclass
class ModuleSymbols:
    """
    Names bound at the top level of one module.

    `imports` maps a local alias to the module or symbol it refers to;
    `classes` maps the module's own top-level class names to their fqn.
    """
    module: str
    is_package: bool = False
    imports: Dict[str, str] = field(default_factory=dict)
    classes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_tree(cls, tree: ast.Module, module: str, is_package: bool = False) -> "ModuleSymbols":
        symbols = cls(module=module, is_package=is_package)

        for node in iter_toplevel_import_nodes(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        symbols.imports[alias.asname] = alias.name
                    else:
                        # `import a.b` binds `a`
                        head = alias.name.split(".")[0]
                        symbols.imports[head] = head

            elif isinstance(node, ast.ImportFrom):
                abs_mod = resolve_absolute_module(node, module, is_package)
                if not abs_mod:
                    continue
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    symbols.imports[alias.asname or alias.name] = f"{abs_mod}.{alias.name}"

        for qualified, _ in iter_class_defs(tree.body, ""):
            if "." not in qualified:
                symbols.classes[qualified] = f"{module}.{qualified}" if module else qualified

        return symbols

    def qualify(self, dotted: str) -> Optional[str]:
        """
        Expand a dotted name used in this module to its fully-qualified form.

        Returns None when the first segment is not bound at module level
        (builtins, locals, undefined names).
        """
        if not dotted:
            return None
        head, _, rest = dotted.partition(".")
        if head in self.classes:
            base = self.classes[head]
        elif head in self.imports:
            base = self.imports[head]
        else:
            return None
        return f"{base}.{rest}" if rest else base

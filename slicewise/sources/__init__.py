"""
Python source frontend for SliceWise.

Discovers and parses a project's Python files and turns every class into a
ClassDeclaration with a best-effort type resolver.
"""

from .ast_helpers import attr_path_from_ast, iter_class_defs, looks_like_class_ref
from .import_resolver import ModuleSymbols, resolve_absolute_module
from .project_index import IndexedClass, ProjectIndex
from .resolver import PythonTypeResolver
from .collector import (
    SourceCollector,
    collect_declarations,
    declarations_from_index,
    detect_kind,
    module_name_for,
)

__all__ = [
    "attr_path_from_ast",
    "iter_class_defs",
    "looks_like_class_ref",
    "ModuleSymbols",
    "resolve_absolute_module",
    "IndexedClass",
    "ProjectIndex",
    "PythonTypeResolver",
    "SourceCollector",
    "collect_declarations",
    "declarations_from_index",
    "detect_kind",
    "module_name_for",
]

"""
Source Collector

Discovers the Python files of a project, parses them, indexes their classes
and produces one ClassDeclaration per class for the graph engine.
"""

from __future__ import annotations

import ast
import fnmatch
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..analysis.graph.declarations import ClassDeclaration
from ..analysis.graph.models import ClassKind
from ..config import SourceConfig
from ..exceptions import SourceCollectionError
from .ast_helpers import attr_path_from_ast
from .project_index import IndexedClass, ProjectIndex
from .resolver import PythonTypeResolver

logger = logging.getLogger(__name__)

ENUM_BASES = {"enum.Enum", "enum.IntEnum", "enum.StrEnum", "enum.Flag", "enum.IntFlag"}
INTERFACE_BASES = {"typing.Protocol", "typing_extensions.Protocol", "abc.ABC"}
INTERFACE_METACLASSES = {"abc.ABCMeta"}


def _is_excluded(rel: str, exclude_patterns: Sequence[str]) -> bool:
    for pattern in exclude_patterns:
        pat = pattern.replace("\\", "/")
        # leading "**/" should also match files at the root
        if fnmatch.fnmatch(rel, pat) or fnmatch.fnmatch(f"/{rel}", pat):
            return True
    return False


def module_name_for(rel_path: Path) -> Tuple[str, bool]:
    """
    Module name for a path relative to the project root.

    `shop/orders.py` -> ("shop.orders", False), `shop/__init__.py` -> ("shop", True);
    a leading `src/` directory is not part of the module name.
    """
    parts = list(rel_path.with_suffix("").parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    is_package = bool(parts) and parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def detect_kind(resolver: PythonTypeResolver, node: ast.ClassDef) -> ClassKind:
    """ENUM for enum subclasses, INTERFACE for protocols and ABCs, else CLASS."""
    bases = {resolver.resolve_type(base) for base in node.bases}
    if bases & ENUM_BASES:
        return ClassKind.ENUM
    if bases & INTERFACE_BASES:
        return ClassKind.INTERFACE
    for keyword in node.keywords:
        if keyword.arg == "metaclass":
            metaclass = resolver.index.resolve_name(attr_path_from_ast(keyword.value), resolver.owner)
            if metaclass in INTERFACE_METACLASSES:
                return ClassKind.INTERFACE
    return ClassKind.CLASS


class SourceCollector:
    """Collects class declarations from a Python source tree."""

    def __init__(self, root: str, config: Optional[SourceConfig] = None):
        self.root = Path(root)
        self.config = config or SourceConfig()
        self.logger = logger
        self.skipped: Dict[str, str] = {}

    def discover_files(self) -> List[Path]:
        """Files matching the include patterns and none of the exclude patterns, sorted."""
        if not self.root.is_dir():
            raise SourceCollectionError(f"Project path is not a directory: {self.root}")

        found = set()
        for pattern in self.config.include_patterns:
            for path in self.root.glob(pattern):
                if not path.is_file():
                    continue
                rel = path.relative_to(self.root).as_posix()
                if _is_excluded(rel, self.config.exclude_patterns):
                    continue
                found.add(path)

        files = sorted(found, key=lambda p: p.as_posix())
        self.logger.info(f"Discovered {len(files)} Python files under {self.root}")
        return files

    def build_index(self) -> ProjectIndex:
        """Parse every discovered file into a ProjectIndex; unreadable files are skipped."""
        index = ProjectIndex()
        self.skipped = {}

        for path in self.discover_files():
            rel = path.relative_to(self.root)
            try:
                size = path.stat().st_size
                if size > self.config.max_file_size:
                    self._skip(rel, f"file too large ({size} bytes)")
                    continue
                source = path.read_text(encoding="utf-8")
                tree = ast.parse(source, filename=str(path))
            except (SyntaxError, UnicodeDecodeError, OSError) as e:
                self._skip(rel, str(e))
                continue

            module, is_package = module_name_for(rel)
            index.add_module(module, tree, file_path=str(path), is_package=is_package)

        self.logger.info(
            f"Indexed {len(index.classes)} classes from {len(index.modules)} modules "
            f"({len(self.skipped)} files skipped)"
        )
        return index

    def collect(self) -> List[ClassDeclaration]:
        """Declarations for every class of the project, ordered by fully-qualified name."""
        return declarations_from_index(self.build_index())

    def _skip(self, rel: Path, reason: str) -> None:
        self.skipped[rel.as_posix()] = reason
        self.logger.warning(f"Skipping {rel.as_posix()}: {reason}")


def declarations_from_index(index: ProjectIndex) -> List[ClassDeclaration]:
    return [_declaration(index, indexed) for indexed in index]


def _declaration(index: ProjectIndex, indexed: IndexedClass) -> ClassDeclaration:
    resolver = PythonTypeResolver(index, indexed.fully_qualified_name)
    return ClassDeclaration(
        fully_qualified_name=indexed.fully_qualified_name,
        node=indexed.node,
        resolver=resolver,
        kind=detect_kind(resolver, indexed.node),
        module=indexed.module,
        file_path=indexed.file_path,
    )


def collect_declarations(root: str, config: Optional[SourceConfig] = None) -> List[ClassDeclaration]:
    """Convenience wrapper around SourceCollector.collect()."""
    return SourceCollector(root, config).collect()

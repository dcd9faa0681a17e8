"""
Shared fixtures for SliceWise tests.
"""

import ast
from pathlib import Path
from typing import Dict, Iterable, Sequence, Tuple, Union

import pytest

from slicewise.analysis.graph.graph_builder import GraphBuilder, NodeSpec
from slicewise.analysis.graph.models import DependencyGraph, ReferenceWeights
from slicewise.sources.collector import declarations_from_index
from slicewise.sources.project_index import ProjectIndex

Edge = Union[Tuple[str, str], Tuple[str, str, ReferenceWeights]]

SAMPLE_PROJECT = Path(__file__).parent / "fixtures" / "sample_project"


def make_graph(names: Sequence[str], edges: Iterable[Edge] = (), project_id: str = "test") -> DependencyGraph:
    """Graph over `names`; an edge without weights counts as one method call."""
    weights: Dict[str, Dict[str, ReferenceWeights]] = {}
    for edge in edges:
        source, target = edge[0], edge[1]
        edge_weights = edge[2] if len(edge) > 2 else ReferenceWeights(method_calls=1)
        weights.setdefault(source, {})[target] = edge_weights
    return GraphBuilder(project_id).build_from_weights([NodeSpec(n) for n in names], weights)


def make_index(modules: Dict[str, str]) -> ProjectIndex:
    """ProjectIndex from {module name: source}; names ending in `.__init__` are packages."""
    index = ProjectIndex()
    for name, source in modules.items():
        is_package = name.endswith(".__init__")
        module = name[: -len(".__init__")] if is_package else name
        index.add_module(module, ast.parse(source), file_path=f"{name}.py", is_package=is_package)
    return index


@pytest.fixture
def graph_factory():
    """Build a DependencyGraph from node names and (source, target[, weights]) edges."""
    return make_graph


@pytest.fixture
def index_factory():
    """Build a ProjectIndex from module sources."""
    return make_index


@pytest.fixture
def declarations_factory():
    """Declarations for every class in the given module sources, by fqn."""

    def build(modules: Dict[str, str]):
        return {d.fully_qualified_name: d for d in declarations_from_index(make_index(modules))}

    return build


@pytest.fixture
def project_factory(tmp_path):
    """Write {relative path: source} files under tmp_path/project and return the root."""

    def write(files: Dict[str, str]) -> Path:
        root = tmp_path / "project"
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        return root

    return write


@pytest.fixture
def sample_project() -> Path:
    """Small shop application with orders, catalog and billing packages."""
    return SAMPLE_PROJECT


@pytest.fixture
def two_cliques(graph_factory):
    """Two disjoint groups of five classes, each fully connected internally."""
    a = [f"a.A{i}" for i in range(5)]
    b = [f"b.B{i}" for i in range(5)]
    edges = [(g[i], g[j]) for g in (a, b) for i in range(5) for j in range(i + 1, 5)]
    return graph_factory(a + b, edges)

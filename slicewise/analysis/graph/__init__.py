"""
Class dependency graph for SliceWise.

1. Reference weighing (per-declaration usage tallies)
2. Graph building (flat node array + weighted adjacency)
3. Graph metrics (internal/external counts, cohesion, projections)
"""

from .models import (
    ClassKind,
    ClassNode,
    Dependency,
    DependencyGraph,
    ReferenceWeights,
)
from .declarations import ClassDeclaration, TypeResolver
from .reference_weigher import ReferenceWeigher, weigh_declaration
from .graph_builder import GraphBuilder, NodeSpec, build_dependency_graph
from .metrics import (
    cohesion,
    cohesion_from_counts,
    count_external,
    count_internal,
    coupling_strength,
    node_degrees,
    to_directed_graph,
)

__all__ = [
    # Models
    "ClassKind",
    "ClassNode",
    "Dependency",
    "DependencyGraph",
    "ReferenceWeights",
    "ClassDeclaration",
    "TypeResolver",
    # Components
    "ReferenceWeigher",
    "weigh_declaration",
    "GraphBuilder",
    "NodeSpec",
    "build_dependency_graph",
    # Metrics
    "cohesion",
    "cohesion_from_counts",
    "count_external",
    "count_internal",
    "coupling_strength",
    "node_degrees",
    "to_directed_graph",
]

"""
Graph metrics over sets of class names.

All functions are pure: they read the graph and never mutate it. A name that
is not part of the graph raises GraphIntegrityError.
"""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, Set

import networkx as nx

from .models import DependencyGraph


def _member_indices(graph: DependencyGraph, names: Iterable[str]) -> Set[int]:
    return {graph.index_of(name) for name in names}


def count_internal(graph: DependencyGraph, names: AbstractSet[str]) -> int:
    """Number of edges from a member of `names` to another member."""
    members = _member_indices(graph, names)
    return sum(
        1 for source in members for dep in graph.outgoing(source) if dep.target in members
    )


def count_external(graph: DependencyGraph, names: AbstractSet[str]) -> int:
    """Number of edges from a member of `names` to a non-member."""
    members = _member_indices(graph, names)
    return sum(
        1 for source in members for dep in graph.outgoing(source) if dep.target not in members
    )


def cohesion(graph: DependencyGraph, names: AbstractSet[str]) -> float:
    """
    Ratio of internal to total outgoing references of a set, in [0, 1].

    0.0 when the set has no outgoing references at all.
    """
    internal = count_internal(graph, names)
    external = count_external(graph, names)
    return cohesion_from_counts(internal, external)


def cohesion_from_counts(internal: int, external: int) -> float:
    total = internal + external
    if total == 0:
        return 0.0
    return internal / total


def coupling_strength(
    graph: DependencyGraph, first: AbstractSet[str], second: AbstractSet[str]
) -> int:
    """Edges first -> second plus edges second -> first."""
    a = _member_indices(graph, first)
    b = _member_indices(graph, second)
    forward = sum(1 for s in a for dep in graph.outgoing(s) if dep.target in b)
    backward = sum(1 for s in b for dep in graph.outgoing(s) if dep.target in a)
    return forward + backward


def node_degrees(graph: DependencyGraph) -> Dict[str, int]:
    """In-degree plus out-degree of every node, counting distinct neighbors per direction."""
    degrees = {node.fully_qualified_name: 0 for node in graph.nodes}
    for dep in graph.edges():
        degrees[graph.name_of(dep.source)] += 1
        degrees[graph.name_of(dep.target)] += 1
    return degrees


def to_directed_graph(graph: DependencyGraph) -> nx.DiGraph:
    """
    Unweighted directed projection: one vertex per class name, one edge per
    dependency. Used by community detection and modularity.
    """
    directed = nx.DiGraph()
    directed.add_nodes_from(graph.node_names())
    directed.add_edges_from(
        (graph.name_of(dep.source), graph.name_of(dep.target)) for dep in graph.edges()
    )
    return directed

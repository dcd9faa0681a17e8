"""
Data models for the class dependency graph.

The graph is a flat array of ClassNode records indexed by integer id, plus a
separate adjacency structure of Dependency edges. Nodes never reference each
other directly, so there are no object cycles and an index is the only handle
needed to walk the graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

from ...exceptions import GraphIntegrityError


class ClassKind(str, Enum):
    """Kinds of class-like declarations."""
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"


@dataclass
class ReferenceWeights:
    """
    Per-target tally of relationship kinds collected from one declaration.

    Mutable while a declaration is being visited; frozen into a Dependency
    once the graph is built.
    """
    method_calls: int = 0
    field_accesses: int = 0
    object_creations: int = 0
    type_references: int = 0

    @property
    def total_weight(self) -> int:
        return self.method_calls + self.field_accesses + self.object_creations + self.type_references

    def merge(self, other: "ReferenceWeights") -> None:
        self.method_calls += other.method_calls
        self.field_accesses += other.field_accesses
        self.object_creations += other.object_creations
        self.type_references += other.type_references

    def to_dict(self) -> Dict[str, int]:
        return {
            "method_calls": self.method_calls,
            "field_accesses": self.field_accesses,
            "object_creations": self.object_creations,
            "type_references": self.type_references,
        }


@dataclass(frozen=True)
class ClassNode:
    """One class, interface or enum of the analyzed project."""
    index: int
    fully_qualified_name: str
    simple_name: str
    project_id: str
    kind: ClassKind = ClassKind.CLASS

    @property
    def package(self) -> str:
        """Everything before the last dotted segment ('' for top-level names)."""
        head, _, _ = self.fully_qualified_name.rpartition(".")
        return head


@dataclass(frozen=True)
class Dependency:
    """
    Weighted directed edge between two nodes, addressed by node index.

    `weight` always equals the sum of the four breakdown counters.
    """
    source: int
    target: int
    method_calls: int = 0
    field_accesses: int = 0
    object_creations: int = 0
    type_references: int = 0

    @property
    def weight(self) -> int:
        return self.method_calls + self.field_accesses + self.object_creations + self.type_references

    @classmethod
    def from_weights(cls, source: int, target: int, weights: ReferenceWeights) -> "Dependency":
        return cls(
            source=source,
            target=target,
            method_calls=weights.method_calls,
            field_accesses=weights.field_accesses,
            object_creations=weights.object_creations,
            type_references=weights.type_references,
        )


@dataclass
class DependencyGraph:
    """
    Directed weighted graph over ClassNodes.

    Each run owns a fresh instance; nothing is shared across runs.
    """
    project_id: str = ""
    nodes: List[ClassNode] = field(default_factory=list)
    _index: Dict[str, int] = field(default_factory=dict, repr=False)
    _outgoing: Dict[int, Dict[int, Dependency]] = field(default_factory=dict, repr=False)

    # --------------------------
    # Nodes
    # --------------------------

    def add_node(
        self,
        fully_qualified_name: str,
        simple_name: Optional[str] = None,
        kind: ClassKind = ClassKind.CLASS,
    ) -> ClassNode:
        """Append a node with no edges. Duplicate names are an integrity error."""
        if fully_qualified_name in self._index:
            raise GraphIntegrityError(f"Duplicate class node: {fully_qualified_name}")

        node = ClassNode(
            index=len(self.nodes),
            fully_qualified_name=fully_qualified_name,
            simple_name=simple_name or fully_qualified_name.rsplit(".", 1)[-1],
            project_id=self.project_id,
            kind=kind,
        )
        self.nodes.append(node)
        self._index[fully_qualified_name] = node.index
        self._outgoing[node.index] = {}
        return node

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, fully_qualified_name: object) -> bool:
        return fully_qualified_name in self._index

    def node_names(self) -> List[str]:
        return [n.fully_qualified_name for n in self.nodes]

    def index_of(self, fully_qualified_name: str) -> int:
        """Index of a node; unknown names are an integrity error."""
        try:
            return self._index[fully_qualified_name]
        except KeyError:
            raise GraphIntegrityError(
                f"Class {fully_qualified_name!r} is not part of the dependency graph"
            ) from None

    def get(self, fully_qualified_name: str) -> ClassNode:
        return self.nodes[self.index_of(fully_qualified_name)]

    def name_of(self, index: int) -> str:
        if not 0 <= index < len(self.nodes):
            raise GraphIntegrityError(f"Node index {index} is out of range")
        return self.nodes[index].fully_qualified_name

    # --------------------------
    # Edges
    # --------------------------

    def add_dependency(self, source: int, target: int, weights: ReferenceWeights) -> Dependency:
        """
        Add (or accumulate into) the edge source -> target.

        References between the same pair accumulate into one edge.
        """
        self.name_of(source)
        self.name_of(target)
        if source == target:
            raise GraphIntegrityError(f"Self-dependency on {self.name_of(source)!r}")
        if weights.total_weight < 1:
            raise GraphIntegrityError(
                f"Dependency {self.name_of(source)!r} -> {self.name_of(target)!r} has no weight"
            )

        existing = self._outgoing[source].get(target)
        if existing is not None:
            combined = ReferenceWeights(
                method_calls=existing.method_calls,
                field_accesses=existing.field_accesses,
                object_creations=existing.object_creations,
                type_references=existing.type_references,
            )
            combined.merge(weights)
            weights = combined

        dependency = Dependency.from_weights(source, target, weights)
        self._outgoing[source][target] = dependency
        return dependency

    def outgoing(self, index: int) -> List[Dependency]:
        """Outgoing edges of a node, ordered by target index."""
        self.name_of(index)
        edges = self._outgoing[index]
        return [edges[t] for t in sorted(edges)]

    def dependency(self, source_name: str, target_name: str) -> Optional[Dependency]:
        """Edge between two named nodes, or None."""
        return self._outgoing[self.index_of(source_name)].get(self.index_of(target_name))

    def edges(self) -> Iterator[Dependency]:
        """All edges, ordered by (source, target) index."""
        for source in range(len(self.nodes)):
            yield from self.outgoing(source)

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._outgoing.values())

    def subgraph_names(self, names: Iterable[str]) -> List[str]:
        """Validate names against the graph and return them in index order."""
        return sorted(set(names), key=self.index_of)

    def to_dict(self) -> Dict[str, object]:
        """Plain-data view used by reports and debugging."""
        return {
            "project_id": self.project_id,
            "nodes": [
                {
                    "fully_qualified_name": n.fully_qualified_name,
                    "simple_name": n.simple_name,
                    "kind": n.kind.value,
                }
                for n in self.nodes
            ],
            "edges": [
                {
                    "source": self.name_of(e.source),
                    "target": self.name_of(e.target),
                    "weight": e.weight,
                    "method_calls": e.method_calls,
                    "field_accesses": e.field_accesses,
                    "object_creations": e.object_creations,
                    "type_references": e.type_references,
                }
                for e in self.edges()
            ],
        }

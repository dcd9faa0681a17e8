"""
Graph Builder

Turns class declarations and their weighed references into a DependencyGraph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ...exceptions import GraphIntegrityError
from .declarations import ClassDeclaration
from .models import ClassKind, DependencyGraph, ReferenceWeights
from .reference_weigher import ReferenceWeigher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeSpec:
    """Minimal description of a node for building graphs without declarations."""
    fully_qualified_name: str
    kind: ClassKind = ClassKind.CLASS
    simple_name: Optional[str] = None


class GraphBuilder:
    """
    Builds the class dependency graph in three phases:

    1. create one edge-less node per declaration (sorted by name) so every
       target can be looked up regardless of discovery order
    2. drop self-references and references to classes outside the node map
       (standard library, third-party code)
    3. add one weighted edge per remaining target, in sorted target order

    The result depends only on the input, never on its order.
    """

    def __init__(self, project_id: str = ""):
        self.project_id = project_id
        self.logger = logger

    def build(self, declarations: Sequence[ClassDeclaration]) -> DependencyGraph:
        """Build the graph by weighing every declaration."""
        unique = self._deduplicate(declarations)
        specs = [
            NodeSpec(d.fully_qualified_name, d.kind, d.simple_name) for d in unique.values()
        ]

        weights: Dict[str, Mapping[str, ReferenceWeights]] = {}
        for fqn, declaration in unique.items():
            try:
                weights[fqn] = ReferenceWeigher(declaration).weigh()
            except GraphIntegrityError:
                raise
            except Exception as e:
                self.logger.warning(f"Error while weighing {fqn}: {e}")
                weights[fqn] = {}

        return self.build_from_weights(specs, weights)

    def build_from_weights(
        self,
        nodes: Iterable[NodeSpec],
        weights: Mapping[str, Mapping[str, ReferenceWeights]],
    ) -> DependencyGraph:
        """
        Build the graph from precomputed weigher output.

        Args:
            nodes: One spec per class; duplicates by name keep the first spec
            weights: source fqn -> (target fqn -> weights)
        """
        graph = DependencyGraph(project_id=self.project_id)

        specs: Dict[str, NodeSpec] = {}
        for spec in nodes:
            if spec.fully_qualified_name in specs:
                self.logger.warning(f"Duplicate class {spec.fully_qualified_name}, keeping first")
                continue
            specs[spec.fully_qualified_name] = spec

        # Phase 1: nodes with empty references
        for fqn in sorted(specs):
            spec = specs[fqn]
            graph.add_node(fqn, simple_name=spec.simple_name, kind=spec.kind)

        # Phases 2 and 3: filtered, weighted edges
        dropped_external = 0
        for source_fqn in sorted(specs):
            source = graph.index_of(source_fqn)
            for target_fqn, target_weights in self._filtered_targets(source_fqn, weights, graph):
                if target_weights is None:
                    dropped_external += 1
                    continue
                graph.add_dependency(source, graph.index_of(target_fqn), target_weights)

        self.logger.info(
            f"Built dependency graph with {len(graph)} classes and {graph.edge_count} dependencies "
            f"({dropped_external} external references dropped)"
        )
        return graph

    def _filtered_targets(
        self,
        source_fqn: str,
        weights: Mapping[str, Mapping[str, ReferenceWeights]],
        graph: DependencyGraph,
    ) -> List[Tuple[str, Optional[ReferenceWeights]]]:
        """Targets of one source in sorted order; None marks an external target."""
        result: List[Tuple[str, Optional[ReferenceWeights]]] = []
        for target_fqn in sorted(weights.get(source_fqn, {})):
            if target_fqn == source_fqn:
                continue
            target_weights = weights[source_fqn][target_fqn]
            if target_weights.total_weight < 1:
                continue
            if target_fqn not in graph:
                result.append((target_fqn, None))
                continue
            result.append((target_fqn, target_weights))
        return result

    def _deduplicate(self, declarations: Sequence[ClassDeclaration]) -> Dict[str, ClassDeclaration]:
        unique: Dict[str, ClassDeclaration] = {}
        for declaration in declarations:
            fqn = declaration.fully_qualified_name
            if fqn in unique:
                self.logger.warning(
                    f"Duplicate declaration of {fqn} in {declaration.file_path or '<unknown>'}, "
                    f"keeping the first one"
                )
                continue
            unique[fqn] = declaration
        return unique


def build_dependency_graph(
    declarations: Sequence[ClassDeclaration], project_id: str = ""
) -> DependencyGraph:
    """Build a dependency graph from declarations."""
    return GraphBuilder(project_id).build(declarations)

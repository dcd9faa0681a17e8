"""
Community Detector

Clusters the undirected projection of the class dependency graph. Two
detectors share one result type: deterministic label propagation (default)
and seeded Louvain modularity optimisation.

Label propagation:
  1. Project the directed graph to an undirected simple graph
  2. Every class starts with its own label (its node index)
  3. Each pass, every class adopts the label most frequent among its
     neighbors and itself; ties go to the lowest label
  4. Stop when a pass changes nothing or the iteration cap is reached
  5. Group classes by label; isolated classes stay as singletons

Labels live in an explicit name -> label map. A pass reads only the previous
map and writes a new one, so the result does not depend on visiting order.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional

import networkx as nx

from ..graph.metrics import to_directed_graph
from ..graph.models import DependencyGraph
from .models import DetectionResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_LOUVAIN_RESOLUTION = 1.0
DEFAULT_SEED = 42


def undirected_projection(graph: DependencyGraph, names: Optional[Iterable[str]] = None) -> nx.Graph:
    """Undirected simple graph: an edge exists iff either direction exists."""
    directed = to_directed_graph(graph)
    if names is not None:
        directed = directed.subgraph(graph.subgraph_names(names))
    return directed.to_undirected()


def propagate_labels(undirected: nx.Graph, labels: Dict[str, int]) -> Dict[str, int]:
    """
    One synchronous pass: compute every node's next label from `labels`.

    The node's own label counts as one vote, which keeps two-node components
    from swapping labels forever.
    """
    next_labels: Dict[str, int] = {}
    for node, current in labels.items():
        votes = Counter({current: 1})
        for neighbor in undirected.neighbors(node):
            votes[labels[neighbor]] += 1
        best = max(votes.values())
        next_labels[node] = min(label for label, count in votes.items() if count == best)
    return next_labels


class LabelPropagationDetector:
    """Clusters classes into initial communities."""

    def __init__(self, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self.max_iterations = max_iterations
        self.logger = logger

    def detect(
        self, graph: DependencyGraph, names: Optional[Iterable[str]] = None
    ) -> DetectionResult:
        """
        Partition the graph (or the subset `names`) into communities.

        Returns communities ordered by their lowest node index.
        """
        undirected = undirected_projection(graph, names)
        members = sorted(undirected.nodes, key=graph.index_of)
        if not members:
            return DetectionResult(communities=(), iterations=0, converged=True)

        labels = {name: graph.index_of(name) for name in members}

        iterations = 0
        converged = False
        while iterations < self.max_iterations:
            iterations += 1
            next_labels = propagate_labels(undirected, labels)
            if next_labels == labels:
                converged = True
                break
            labels = next_labels

        if not converged:
            self.logger.warning(
                f"Label propagation stopped after {iterations} iterations without converging"
            )

        communities = self._group_by_label(labels, graph)
        self.logger.info(
            f"Label propagation found {len(communities)} communities among {len(members)} classes "
            f"in {iterations} iterations"
        )
        return DetectionResult(
            communities=tuple(communities), iterations=iterations, converged=converged
        )

    @staticmethod
    def _group_by_label(labels: Dict[str, int], graph: DependencyGraph) -> List[FrozenSet[str]]:
        groups: Dict[int, List[str]] = defaultdict(list)
        for name, label in labels.items():
            groups[label].append(name)

        communities = [frozenset(group) for group in groups.values() if group]
        communities.sort(key=lambda c: min(graph.index_of(n) for n in c))
        return communities


class LouvainDetector:
    """
    Clusters classes by Louvain modularity optimisation.

    The seed fixes the order in which Louvain visits nodes, so equal seeds
    give equal partitions. Isolated classes stay as singletons.
    """

    def __init__(self, resolution: float = DEFAULT_LOUVAIN_RESOLUTION, seed: int = DEFAULT_SEED):
        if resolution <= 0:
            raise ValueError("resolution must be positive")
        self.resolution = resolution
        self.seed = seed
        self.logger = logger

    def detect(
        self, graph: DependencyGraph, names: Optional[Iterable[str]] = None
    ) -> DetectionResult:
        """Partition the graph (or the subset `names`), ordered by lowest node index."""
        undirected = undirected_projection(graph, names)
        if undirected.number_of_nodes() == 0:
            return DetectionResult(communities=(), iterations=0, converged=True)

        partition = nx.community.louvain_communities(
            undirected, resolution=self.resolution, seed=self.seed
        )
        communities = [frozenset(group) for group in partition if group]
        communities.sort(key=lambda c: min(graph.index_of(n) for n in c))

        self.logger.info(
            f"Louvain found {len(communities)} communities among "
            f"{undirected.number_of_nodes()} classes (resolution {self.resolution}, seed {self.seed})"
        )
        return DetectionResult(communities=tuple(communities), iterations=1, converged=True)

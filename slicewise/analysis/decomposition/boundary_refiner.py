"""
Boundary Refiner

Turns raw communities into the final list of service boundaries:
  1. Merge the smallest community into its most strongly coupled neighbor
     (or the largest community when nothing is coupled) until every
     community reaches the minimum size and the count is within the target
  2. Measure each boundary (size, cohesion, coupling, dependency counts)
  3. Name each boundary after its dominant package
  4. Score the whole partition with modularity

Every merge removes one community, so the loop runs at most once per
initial community.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import AbstractSet, Callable, Dict, FrozenSet, List, Optional, Sequence

from ...exceptions import GraphIntegrityError
from ..graph.metrics import cohesion_from_counts, count_external, count_internal
from ..graph.models import DependencyGraph
from .models import (
    BoundaryDetectionAlgorithm,
    BoundaryMetrics,
    CommunityBoundary,
    ServiceBoundary,
    Suggestion,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_COMMUNITY_SIZE = 20
MIN_TARGET_SERVICES = 2
MAX_TARGET_SERVICES = 15

BoundaryNamer = Callable[[int, FrozenSet[str]], str]


def calculate_target_service_count(total_classes: int, min_community_size: int) -> int:
    """
    Target number of services for a codebase of `total_classes` classes.

    Formula: round(sqrt(total_classes / min_community_size)) bounded by [2, 15]
    - small codebases (< 50 classes): 2-3 services
    - very large codebases (500+ classes): 10-15 services
    """
    if total_classes <= 0:
        return MIN_TARGET_SERVICES
    raw_target = int(math.floor(math.sqrt(total_classes / min_community_size) + 0.5))
    return max(MIN_TARGET_SERVICES, min(MAX_TARGET_SERVICES, raw_target))


def extract_package_prefix(fully_qualified_name: str) -> str:
    """All but the last dotted segment ('' for undotted names)."""
    head, sep, _ = fully_qualified_name.rpartition(".")
    return head if sep else ""


def derive_service_name(community_id: int, class_names: AbstractSet[str]) -> str:
    """
    Name a boundary after the most common package among its classes.

    `shop.orders.Order` and `shop.orders.Invoice` give "Orders Service";
    ties go to the alphabetically first package.
    """
    package_counts = Counter(extract_package_prefix(name) for name in class_names)
    if not package_counts:
        return f"Service Cluster {community_id}"

    dominant, _ = min(package_counts.items(), key=lambda item: (-item[1], item[0]))
    if not dominant:
        return f"Service Cluster {community_id}"

    last_segment = dominant.split(".")[-1]
    return f"{last_segment[:1].upper()}{last_segment[1:]} Service"


class BoundaryRefiner:
    """Merges, measures, names and scores communities."""

    def __init__(
        self,
        min_community_size: int = DEFAULT_MIN_COMMUNITY_SIZE,
        target_service_count: Optional[int] = None,
        namer: Optional[BoundaryNamer] = None,
    ):
        if min_community_size < 1:
            raise ValueError("min_community_size must be at least 1")
        if target_service_count is not None and target_service_count < 1:
            raise ValueError("target_service_count must be at least 1")
        self.min_community_size = min_community_size
        self.target_service_count = target_service_count
        self.namer: BoundaryNamer = namer or derive_service_name
        self.logger = logger

    # --------------------------
    # Public API
    # --------------------------

    def refine(
        self,
        communities: Sequence[AbstractSet[str]],
        graph: DependencyGraph,
        algorithm: BoundaryDetectionAlgorithm = BoundaryDetectionAlgorithm.LABEL_PROPAGATION,
    ) -> Suggestion:
        """Merge communities and build the final suggestion."""
        merged = self.merge_communities(communities, graph)
        boundaries = self.build_boundaries(merged, graph)
        modularity = calculate_modularity(boundaries, graph)
        return Suggestion(
            algorithm=algorithm,
            modularity_score=modularity,
            boundaries=tuple(boundaries),
        )

    def effective_target(self, total_classes: int) -> int:
        if self.target_service_count is not None:
            return self.target_service_count
        return calculate_target_service_count(total_classes, self.min_community_size)

    def merge_communities(
        self, communities: Sequence[AbstractSet[str]], graph: DependencyGraph
    ) -> List[CommunityBoundary]:
        """
        Merge small communities until both constraints hold or no merge is possible.

        Returns the surviving communities ordered by id.
        """
        arena = self._build_arena(communities, graph)
        owner: Dict[int, int] = {
            graph.index_of(name): community.community_id
            for community in arena.values()
            for name in community.members
        }

        total_classes = sum(c.size for c in arena.values())
        target = self.effective_target(total_classes)
        min_size = self.min_community_size
        merges = 0

        while arena:
            too_many = len(arena) > target
            too_small = any(c.size < min_size for c in arena.values())
            if not too_many and not too_small:
                break

            smallest = min(arena.values(), key=lambda c: (c.size, c.community_id))
            if len(arena) == 1:
                break

            partner = self._best_merge_candidate(smallest, arena, owner, graph)
            keep, drop = sorted((smallest, partner), key=lambda c: c.community_id)
            keep.absorb(drop)
            for name in drop.members:
                owner[graph.index_of(name)] = keep.community_id
            del arena[drop.community_id]
            merges += 1

        self.logger.info(
            f"Refined {len(communities)} communities into {len(arena)} "
            f"({merges} merges, target {target}, min size {min_size})"
        )
        return [arena[cid] for cid in sorted(arena)]

    def build_boundaries(
        self, communities: Sequence[CommunityBoundary], graph: DependencyGraph
    ) -> List[ServiceBoundary]:
        """Measure and name communities; largest boundaries first."""
        owner: Dict[int, int] = {}
        for community in communities:
            for name in community.members:
                owner[graph.index_of(name)] = community.community_id

        measured = []
        for community in communities:
            if not community.members:
                continue
            members = frozenset(community.members)
            metrics = self._measure(community, graph, owner)
            boundary = ServiceBoundary(
                suggested_name=self.namer(community.community_id, members),
                class_names=members,
                metrics=metrics,
            )
            measured.append((community.community_id, boundary))

        measured.sort(key=lambda item: (-item[1].metrics.size, item[0]))
        return [boundary for _, boundary in measured]

    # --------------------------
    # Internals
    # --------------------------

    def _build_arena(
        self, communities: Sequence[AbstractSet[str]], graph: DependencyGraph
    ) -> Dict[int, CommunityBoundary]:
        arena: Dict[int, CommunityBoundary] = {}
        seen: Dict[str, int] = {}
        next_id = 1
        for members in communities:
            if not members:
                continue
            for name in members:
                graph.index_of(name)
                if name in seen:
                    raise GraphIntegrityError(
                        f"Class {name!r} belongs to communities {seen[name]} and {next_id}"
                    )
                seen[name] = next_id
            arena[next_id] = CommunityBoundary(community_id=next_id, members=set(members))
            next_id += 1
        return arena

    def _best_merge_candidate(
        self,
        source: CommunityBoundary,
        arena: Dict[int, CommunityBoundary],
        owner: Dict[int, int],
        graph: DependencyGraph,
    ) -> CommunityBoundary:
        """
        Community with the strongest symmetric coupling to `source`; the
        largest other community when nothing is coupled. Ties go to the
        lowest id.
        """
        source_id = source.community_id
        scores: Counter = Counter()
        for dep in graph.edges():
            source_owner = owner.get(dep.source)
            target_owner = owner.get(dep.target)
            if source_owner == source_id and target_owner not in (None, source_id):
                scores[target_owner] += 1
            elif target_owner == source_id and source_owner not in (None, source_id):
                scores[source_owner] += 1

        if scores:
            best_id, _ = max(scores.items(), key=lambda item: (item[1], -item[0]))
            return arena[best_id]

        others = [c for c in arena.values() if c.community_id != source_id]
        return max(others, key=lambda c: (c.size, -c.community_id))

    def _measure(
        self,
        community: CommunityBoundary,
        graph: DependencyGraph,
        owner: Dict[int, int],
    ) -> BoundaryMetrics:
        members = community.members
        internal = count_internal(graph, members)
        external = count_external(graph, members)

        referenced = set()
        for name in members:
            for dep in graph.outgoing(graph.index_of(name)):
                target_owner = owner.get(dep.target)
                if target_owner is not None and target_owner != community.community_id:
                    referenced.add(target_owner)

        return BoundaryMetrics(
            size=len(members),
            cohesion=cohesion_from_counts(internal, external),
            coupling=len(referenced),
            internal_dependencies=internal,
            external_dependencies=external,
        )


def calculate_modularity(boundaries: Sequence[ServiceBoundary], graph: DependencyGraph) -> float:
    """
    Modularity of a set of boundaries:
    Q = (1/2m) * sum(internal_i - (internal_i + external_i)^2 / 2m)
    with m the number of directed edges. 0.0 without boundaries or edges.
    """
    total_edges = graph.edge_count
    if not boundaries or total_edges == 0:
        return 0.0

    two_m = 2.0 * total_edges
    modularity = 0.0
    for boundary in boundaries:
        internal = boundary.metrics.internal_dependencies
        degree = internal + boundary.metrics.external_dependencies
        modularity += internal - (degree * degree) / two_m

    return modularity / two_m

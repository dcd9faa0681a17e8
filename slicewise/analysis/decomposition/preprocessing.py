"""
Hub preprocessing

Utility classes (loggers, helpers, shared configuration) tend to be referenced
from everywhere and pull unrelated communities together. These functions set
such hub classes aside before clustering and put them back afterwards.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Optional, Sequence, Set

from ...config import HubFiltering, HubStrategy
from ..graph.metrics import coupling_strength, node_degrees
from ..graph.models import DependencyGraph

logger = logging.getLogger(__name__)

DEFAULT_HUB_PERCENTILE = 0.90

COMMON_PACKAGE_PATTERNS = [
    r".*\.utils?\..*",
    r".*\.common\..*",
    r".*\.shared\..*",
    r".*\.config\..*",
    r".*\.core\..*",
    r".*\.infrastructure\..*",
    r".*\.exceptions?\..*",
    r".*\.constants?\..*",
    r".*\.helpers?\..*",
]


@dataclass
class HubPreprocessResult:
    """Split of the class names into regular nodes and hubs."""
    regular: List[str] = field(default_factory=list)
    hubs: List[str] = field(default_factory=list)

    @property
    def has_hubs(self) -> bool:
        return bool(self.hubs)


def filter_hub_nodes(
    graph: DependencyGraph,
    names: Optional[Iterable[str]] = None,
    percentile: float = DEFAULT_HUB_PERCENTILE,
) -> HubPreprocessResult:
    """
    Separate high-degree nodes (in + out degree at or above the percentile).

    Nothing is filtered when fewer than half of the nodes would remain.
    """
    if not 0.0 < percentile <= 1.0:
        raise ValueError("percentile must be in (0, 1]")

    candidates = graph.subgraph_names(names if names is not None else graph.node_names())
    if not candidates:
        return HubPreprocessResult()

    degrees = node_degrees(graph)
    sorted_degrees = sorted(degrees[name] for name in candidates)
    position = min(int(len(sorted_degrees) * percentile), len(sorted_degrees) - 1)
    threshold = sorted_degrees[position]

    hubs = [n for n in candidates if degrees[n] >= threshold and degrees[n] > 0]
    hub_set = set(hubs)
    regular = [n for n in candidates if n not in hub_set]

    if len(regular) < len(candidates) / 2:
        logger.warning(
            f"Degree filter would keep only {len(regular)} of {len(candidates)} classes, "
            f"skipping hub filtering"
        )
        return HubPreprocessResult(regular=candidates, hubs=[])

    logger.info(f"Filtered {len(hubs)} hub classes (degree >= {threshold})")
    return HubPreprocessResult(regular=regular, hubs=hubs)


def filter_by_package(
    names: Iterable[str], patterns: Optional[Sequence[str]] = None
) -> HubPreprocessResult:
    """Treat classes living in common utility packages as hubs."""
    compiled = [re.compile(p) for p in (patterns or COMMON_PACKAGE_PATTERNS)]
    regular: List[str] = []
    hubs: List[str] = []
    for name in names:
        if any(p.match(name) for p in compiled):
            hubs.append(name)
        else:
            regular.append(name)

    if hubs:
        logger.info(f"Filtered {len(hubs)} classes in common packages")
    return HubPreprocessResult(regular=regular, hubs=hubs)


def filter_hub_nodes_advanced(
    graph: DependencyGraph,
    names: Optional[Iterable[str]] = None,
    percentile: float = DEFAULT_HUB_PERCENTILE,
    patterns: Optional[Sequence[str]] = None,
) -> HubPreprocessResult:
    """Degree filter followed by the package filter on what remains."""
    by_degree = filter_hub_nodes(graph, names, percentile)
    by_package = filter_by_package(by_degree.regular, patterns)
    return HubPreprocessResult(
        regular=by_package.regular,
        hubs=sorted(set(by_degree.hubs) | set(by_package.hubs), key=graph.index_of),
    )


def preprocess(
    graph: DependencyGraph,
    mode: HubFiltering,
    percentile: float = DEFAULT_HUB_PERCENTILE,
) -> HubPreprocessResult:
    """Apply the configured hub filter to every node of the graph."""
    names = graph.node_names()
    if mode == HubFiltering.DEGREE:
        return filter_hub_nodes(graph, names, percentile)
    if mode == HubFiltering.PACKAGE:
        return filter_by_package(names)
    if mode == HubFiltering.COMBINED:
        return filter_hub_nodes_advanced(graph, names, percentile)
    return HubPreprocessResult(regular=names, hubs=[])


def reassign_hub_nodes(
    communities: Sequence[AbstractSet[str]],
    hubs: Iterable[str],
    graph: DependencyGraph,
    strategy: HubStrategy = HubStrategy.STRONGEST_COUPLING,
) -> List[Set[str]]:
    """
    Put hub classes back into the partition.

    STRONGEST_COUPLING: each hub joins the community it is most coupled with
    (ties to the earliest community, no coupling at all to the largest one).
    SHARED_SERVICE: all hubs form one extra community.
    """
    result: List[Set[str]] = [set(c) for c in communities if c]
    hub_list = sorted(set(hubs))
    if not hub_list:
        return result

    if strategy == HubStrategy.SHARED_SERVICE or not result:
        result.append(set(hub_list))
        logger.info(f"Grouped {len(hub_list)} hub classes into a shared community")
        return result

    for hub in hub_list:
        scores = [coupling_strength(graph, {hub}, community) for community in result]
        best_score = max(scores)
        if best_score > 0:
            target = scores.index(best_score)
        else:
            largest = max(len(c) for c in result)
            target = next(i for i, c in enumerate(result) if len(c) == largest)
        result[target].add(hub)

    logger.info(f"Reassigned {len(hub_list)} hub classes to their strongest communities")
    return result

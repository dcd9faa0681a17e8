"""
Data models for service decomposition.

Communities are the raw output of clustering; service boundaries are the
refined, named and measured communities that make up a Suggestion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Set, Tuple


class BoundaryDetectionAlgorithm(str, Enum):
    """Algorithm that produced a suggestion."""
    LABEL_PROPAGATION = "community_detection_label_propagation"
    LOUVAIN = "community_detection_louvain"


@dataclass
class CommunityBoundary:
    """
    Community under refinement: an id plus its member class names.

    Lives in an arena keyed by id while merging; compared by id, never by
    object identity.
    """
    community_id: int
    members: Set[str] = field(default_factory=set)

    @property
    def size(self) -> int:
        return len(self.members)

    def absorb(self, other: "CommunityBoundary") -> None:
        self.members |= other.members


@dataclass(frozen=True)
class DetectionResult:
    """Output of community detection."""
    communities: Tuple[FrozenSet[str], ...]
    iterations: int
    converged: bool

    @property
    def community_count(self) -> int:
        return len(self.communities)


@dataclass(frozen=True)
class BoundaryMetrics:
    """
    Metrics for evaluating the quality of a service boundary.

    - size: number of classes in the boundary
    - cohesion: internal / (internal + external) references, 0.0 to 1.0
      (higher is better)
    - coupling: number of distinct other boundaries referenced (lower is better)
    - internal_dependencies: edges between members
    - external_dependencies: edges from members to non-members
    """
    size: int
    cohesion: float
    coupling: int
    internal_dependencies: int
    external_dependencies: int

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("Size must be positive")
        if not 0.0 <= self.cohesion <= 1.0:
            raise ValueError("Cohesion must be between 0.0 and 1.0")
        if self.coupling < 0:
            raise ValueError("Coupling must be non-negative")
        if self.internal_dependencies < 0:
            raise ValueError("Internal dependencies must be non-negative")
        if self.external_dependencies < 0:
            raise ValueError("External dependencies must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "cohesion": self.cohesion,
            "coupling": self.coupling,
            "internal_dependencies": self.internal_dependencies,
            "external_dependencies": self.external_dependencies,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundaryMetrics":
        return cls(
            size=int(data["size"]),
            cohesion=float(data["cohesion"]),
            coupling=int(data["coupling"]),
            internal_dependencies=int(data["internal_dependencies"]),
            external_dependencies=int(data["external_dependencies"]),
        )


@dataclass(frozen=True)
class ServiceBoundary:
    """A suggested microservice: a named, measured group of classes."""
    suggested_name: str
    class_names: FrozenSet[str]
    metrics: BoundaryMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggested_name": self.suggested_name,
            "class_names": sorted(self.class_names),
            "metrics": self.metrics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceBoundary":
        return cls(
            suggested_name=data["suggested_name"],
            class_names=frozenset(data.get("class_names", [])),
            metrics=BoundaryMetrics.from_dict(data["metrics"]),
        )


@dataclass(frozen=True)
class Suggestion:
    """Decomposition proposal produced by one analysis run."""
    algorithm: BoundaryDetectionAlgorithm
    modularity_score: float
    boundaries: Tuple[ServiceBoundary, ...] = ()

    @property
    def class_count(self) -> int:
        return sum(b.metrics.size for b in self.boundaries)

    def boundary_for(self, class_name: str) -> ServiceBoundary:
        """Boundary containing a class; KeyError if none does."""
        for boundary in self.boundaries:
            if class_name in boundary.class_names:
                return boundary
        raise KeyError(class_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm.value,
            "modularity_score": self.modularity_score,
            "boundaries": [b.to_dict() for b in self.boundaries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suggestion":
        boundaries: List[ServiceBoundary] = [
            ServiceBoundary.from_dict(b) for b in data.get("boundaries", [])
        ]
        return cls(
            algorithm=BoundaryDetectionAlgorithm(data["algorithm"]),
            modularity_score=float(data["modularity_score"]),
            boundaries=tuple(boundaries),
        )

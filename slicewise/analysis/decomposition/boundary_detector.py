"""
Boundary Detector

Runs the decomposition pipeline on a dependency graph:
hub filtering -> community detection -> hub reassignment -> refinement.

The configured algorithm (label propagation or Louvain) picks the detector
and tags the resulting suggestion.
"""

from __future__ import annotations

import logging
from typing import Optional

from ...config import DetectionAlgorithm, DetectionConfig, HubFiltering
from ..graph.models import DependencyGraph
from .boundary_refiner import BoundaryNamer, BoundaryRefiner
from .community_detector import LabelPropagationDetector, LouvainDetector
from .models import BoundaryDetectionAlgorithm, Suggestion
from .preprocessing import preprocess, reassign_hub_nodes

logger = logging.getLogger(__name__)


class BoundaryDetector:
    """Suggests service boundaries for a dependency graph."""

    def __init__(self, config: Optional[DetectionConfig] = None, namer: Optional[BoundaryNamer] = None):
        self.config = config or DetectionConfig()
        self.logger = logger
        if self.config.algorithm == DetectionAlgorithm.LOUVAIN:
            self.algorithm = BoundaryDetectionAlgorithm.LOUVAIN
            self.detector = LouvainDetector(
                resolution=self.config.louvain_resolution, seed=self.config.seed
            )
        else:
            self.algorithm = BoundaryDetectionAlgorithm.LABEL_PROPAGATION
            self.detector = LabelPropagationDetector(max_iterations=self.config.max_iterations)
        self.refiner = BoundaryRefiner(
            min_community_size=self.config.min_community_size,
            target_service_count=self.config.target_service_count,
            namer=namer,
        )

    def detect(self, graph: DependencyGraph) -> Suggestion:
        algorithm = self.algorithm
        if len(graph) == 0:
            self.logger.warning("Dependency graph is empty, no boundaries to suggest")
            return Suggestion(algorithm=algorithm, modularity_score=0.0, boundaries=())

        self.logger.info(
            f"Detecting service boundaries for {len(graph)} classes "
            f"and {graph.edge_count} dependencies using {self.config.algorithm.value}"
        )

        split = preprocess(graph, self.config.hub_filtering, self.config.hub_percentile)
        if self.config.hub_filtering != HubFiltering.NONE:
            self.logger.info(
                f"Hub filtering '{self.config.hub_filtering.value}' set aside {len(split.hubs)} classes"
            )

        detection = self.detector.detect(graph, split.regular)
        communities = reassign_hub_nodes(
            detection.communities, split.hubs, graph, self.config.hub_strategy
        )

        suggestion = self.refiner.refine(communities, graph, algorithm)
        self.logger.info(
            f"Suggested {len(suggestion.boundaries)} service boundaries "
            f"(modularity {suggestion.modularity_score:.3f})"
        )
        return suggestion

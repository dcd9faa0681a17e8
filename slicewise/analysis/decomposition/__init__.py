"""
Service decomposition for SliceWise.

Turns a class dependency graph into suggested service boundaries through:

1. Optional hub preprocessing (set aside classes referenced from everywhere)
2. Community detection (deterministic label propagation or seeded Louvain)
3. Boundary refinement (merge to size/count constraints, measure, name)
4. Reporting (JSON, YAML, text)
"""

from .models import (
    BoundaryDetectionAlgorithm,
    BoundaryMetrics,
    CommunityBoundary,
    DetectionResult,
    ServiceBoundary,
    Suggestion,
)

from .community_detector import (
    LabelPropagationDetector,
    LouvainDetector,
    propagate_labels,
    undirected_projection,
)
from .boundary_refiner import (
    BoundaryRefiner,
    calculate_modularity,
    calculate_target_service_count,
    derive_service_name,
)
from .preprocessing import (
    HubPreprocessResult,
    filter_by_package,
    filter_hub_nodes,
    filter_hub_nodes_advanced,
    reassign_hub_nodes,
)
from .boundary_detector import BoundaryDetector
from .report_generator import DecompositionReportGenerator

__all__ = [
    # Models
    "BoundaryDetectionAlgorithm",
    "BoundaryMetrics",
    "CommunityBoundary",
    "DetectionResult",
    "ServiceBoundary",
    "Suggestion",
    # Components
    "LabelPropagationDetector",
    "LouvainDetector",
    "propagate_labels",
    "undirected_projection",
    "BoundaryRefiner",
    "calculate_modularity",
    "calculate_target_service_count",
    "derive_service_name",
    "HubPreprocessResult",
    "filter_by_package",
    "filter_hub_nodes",
    "filter_hub_nodes_advanced",
    "reassign_hub_nodes",
    "BoundaryDetector",
    "DecompositionReportGenerator",
]

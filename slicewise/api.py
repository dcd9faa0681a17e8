"""
Main API interface for SliceWise

Provides a single facade over source collection, graph building and boundary
detection.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .analysis.decomposition.boundary_detector import BoundaryDetector
from .analysis.decomposition.boundary_refiner import BoundaryNamer
from .analysis.decomposition.models import Suggestion
from .analysis.graph.graph_builder import GraphBuilder
from .analysis.graph.models import DependencyGraph
from .config import SliceWiseConfig
from .exceptions import SourceCollectionError
from .sources.collector import SourceCollector

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Standardized analysis result structure."""

    success: bool
    data: Dict[str, Any]
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


class SliceWise:
    """
    Main API class for SliceWise.

    Typical use:
        result = SliceWise().analyze_project("path/to/project")
        suggestion = Suggestion.from_dict(result.data["suggestion"])
    """

    def __init__(self, config: Optional[SliceWiseConfig] = None, namer: Optional[BoundaryNamer] = None):
        self.config = config or SliceWiseConfig.default()
        self.namer = namer
        logger.debug("SliceWise initialized with configuration")

    def build_graph(
        self, project_path: Union[str, Path], project_id: Optional[str] = None
    ) -> DependencyGraph:
        """Collect the project's classes and build its dependency graph."""
        project_path = Path(project_path)
        collector = SourceCollector(str(project_path), self.config.source_settings)
        declarations = collector.collect()
        builder = GraphBuilder(project_id if project_id is not None else project_path.name)
        return builder.build(declarations)

    def suggest_boundaries(self, graph: DependencyGraph) -> Suggestion:
        """Run boundary detection on an already built graph."""
        detector = BoundaryDetector(self.config.detection_settings, namer=self.namer)
        return detector.detect(graph)

    def analyze_project(
        self, project_path: Union[str, Path], project_id: Optional[str] = None
    ) -> AnalysisResult:
        """
        Build the dependency graph of a project and suggest service boundaries.

        Collection problems are reported in the result; graph integrity
        violations propagate.
        """
        project_path = Path(project_path)
        started = datetime.now()
        if not project_path.exists():
            return AnalysisResult(
                success=False,
                data={},
                errors=[f"Project path does not exist: {project_path}"],
                metadata={"project_path": str(project_path)},
            )

        logger.info(f"Starting service boundary analysis for: {project_path}")
        warnings: List[str] = []

        try:
            collector = SourceCollector(str(project_path), self.config.source_settings)
            declarations = collector.collect()
            for rel, reason in sorted(collector.skipped.items()):
                warnings.append(f"Skipped {rel}: {reason}")

            builder = GraphBuilder(project_id if project_id is not None else project_path.name)
            graph = builder.build(declarations)
            suggestion = self.suggest_boundaries(graph)
        except SourceCollectionError as e:
            logger.error(f"Source collection failed: {e}")
            return AnalysisResult(
                success=False,
                data={},
                errors=[str(e)],
                warnings=warnings,
                metadata={"project_path": str(project_path)},
            )

        if len(graph) == 0:
            warnings.append("No classes found in project")

        return AnalysisResult(
            success=True,
            data={
                "suggestion": suggestion.to_dict(),
                "graph": {
                    "project_id": graph.project_id,
                    "classes": len(graph),
                    "dependencies": graph.edge_count,
                },
            },
            warnings=warnings,
            metadata={
                "project_path": str(project_path),
                "timestamp": started.isoformat(),
                "duration_seconds": (datetime.now() - started).total_seconds(),
                "configuration": self.config.to_dict(),
            },
        )

"""
Decomposition Report Generator

Renders service boundary suggestions as JSON, YAML or a plain-text summary.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ...config import OutputConfig
from ..graph.models import DependencyGraph
from .models import Suggestion

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("json", "yaml", "text")


class DecompositionReportGenerator:
    """Generates reports for service decomposition suggestions."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.logger = logger
        self.config = config or OutputConfig()

    # --------------------------
    # Public API
    # --------------------------

    def build_report_data(
        self, suggestion: Suggestion, graph: Optional[DependencyGraph] = None
    ) -> Dict[str, Any]:
        """Plain-data report: metadata, statistics and the suggestion itself."""
        report: Dict[str, Any] = {
            "metadata": {
                "generated_at": datetime.now().isoformat(),
                "algorithm": suggestion.algorithm.value,
            },
            "statistics": {
                "total_boundaries": len(suggestion.boundaries),
                "total_classes": suggestion.class_count,
                "modularity_score": suggestion.modularity_score,
            },
            "suggestion": suggestion.to_dict(),
        }
        if graph is not None:
            report["metadata"]["project_id"] = graph.project_id
            report["statistics"]["graph_classes"] = len(graph)
            report["statistics"]["graph_dependencies"] = graph.edge_count
        return report

    def render(
        self,
        suggestion: Suggestion,
        graph: Optional[DependencyGraph] = None,
        format: Optional[str] = None,
    ) -> str:
        """Render the report as a string in the requested (or configured) format."""
        fmt = (format or self.config.format).lower()
        if fmt == "json":
            return self.generate_json(suggestion, graph)
        if fmt == "yaml":
            return self.generate_yaml(suggestion, graph)
        if fmt == "text":
            return self.generate_text(suggestion, graph)
        raise ValueError(f"Unsupported report format: {fmt} (expected one of {SUPPORTED_FORMATS})")

    def write_report(
        self,
        suggestion: Suggestion,
        output_file: str,
        graph: Optional[DependencyGraph] = None,
        format: Optional[str] = None,
    ) -> str:
        """Render and write the report; returns the written path."""
        content = self.render(suggestion, graph, format)
        out = Path(output_file)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(content, encoding="utf-8")
        self.logger.info(f"Generated report: {output_file}")
        return str(out)

    def generate_json(self, suggestion: Suggestion, graph: Optional[DependencyGraph] = None) -> str:
        return json.dumps(
            self.build_report_data(suggestion, graph), indent=2, ensure_ascii=False, sort_keys=True
        )

    def generate_yaml(self, suggestion: Suggestion, graph: Optional[DependencyGraph] = None) -> str:
        return yaml.safe_dump(
            self.build_report_data(suggestion, graph), default_flow_style=False, sort_keys=False
        )

    def generate_text(self, suggestion: Suggestion, graph: Optional[DependencyGraph] = None) -> str:
        lines: List[str] = [
            "Service Decomposition Suggestion",
            "================================",
            f"Algorithm: {suggestion.algorithm.value}",
            f"Modularity: {suggestion.modularity_score:.4f}",
            f"Boundaries: {len(suggestion.boundaries)}",
            f"Classes: {suggestion.class_count}",
        ]
        if graph is not None:
            lines.append(f"Dependencies: {graph.edge_count}")
        lines.append("")

        if not suggestion.boundaries:
            lines.append("No service boundaries suggested.")
            return "\n".join(lines) + "\n"

        limit = self.config.max_classes_listed
        for position, boundary in enumerate(suggestion.boundaries, 1):
            metrics = boundary.metrics
            lines.append(f"{position}. {boundary.suggested_name}")
            lines.append(
                f"   size={metrics.size} cohesion={metrics.cohesion:.2f} coupling={metrics.coupling} "
                f"internal={metrics.internal_dependencies} external={metrics.external_dependencies}"
            )
            names = sorted(boundary.class_names)
            for name in names[:limit]:
                lines.append(f"   - {name}")
            if len(names) > limit:
                lines.append(f"   ... and {len(names) - limit} more")
            lines.append("")

        return "\n".join(lines)

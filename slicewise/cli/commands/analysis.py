"""
Analysis command handlers.

Handles the analyze command: build the dependency graph of a project, suggest
service boundaries and print or write the report.
"""

import sys
from pathlib import Path

from slicewise.analysis.decomposition.report_generator import DecompositionReportGenerator
from slicewise.api import SliceWise
from slicewise.cli.rich_output import get_rich_output
from slicewise.config import DetectionAlgorithm, HubFiltering, HubStrategy, SliceWiseConfig


def apply_overrides(args, config: SliceWiseConfig) -> SliceWiseConfig:
    """Apply command-line overrides on top of file/environment configuration."""
    detection = config.detection_settings
    if getattr(args, "min_size", None) is not None:
        detection.min_community_size = args.min_size
    if getattr(args, "target", None) is not None:
        detection.target_service_count = args.target
    if getattr(args, "max_iterations", None) is not None:
        detection.max_iterations = args.max_iterations
    if getattr(args, "algorithm", None):
        detection.algorithm = DetectionAlgorithm(args.algorithm)
    if getattr(args, "hub_filtering", None):
        detection.hub_filtering = HubFiltering(args.hub_filtering)
    if getattr(args, "hub_strategy", None):
        detection.hub_strategy = HubStrategy(args.hub_strategy)
    if getattr(args, "format", None):
        config.output_settings.format = args.format
    config.validate()
    return config


def cmd_analyze(args, config: SliceWiseConfig) -> int:
    """Handle analyze command."""
    path = Path(args.path)
    if not path.is_dir():
        print(f"Error: Project directory does not exist: {path}", file=sys.stderr)
        return 1

    config = apply_overrides(args, config)
    slicewise = SliceWise(config)
    output = get_rich_output()

    graph = slicewise.build_graph(path, project_id=getattr(args, "project_id", None))
    suggestion = slicewise.suggest_boundaries(graph)

    generator = DecompositionReportGenerator(config.output_settings)
    format_type = config.output_settings.format

    if args.output:
        generator.write_report(suggestion, args.output, graph, format_type)
        print(f"Report written to {args.output}", file=sys.stderr)
        return 0

    if format_type == "text":
        output.print_header("SliceWise", f"Service boundaries for {graph.project_id or path}")
        output.console.print(f"Classes: {len(graph)}  Dependencies: {graph.edge_count}")
        output.print_suggestion(suggestion, config.output_settings.max_classes_listed)
    else:
        print(generator.render(suggestion, graph, format_type))
    return 0

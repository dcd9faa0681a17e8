"""
Command-line interface for SliceWise

Suggests microservice boundaries for a Python codebase from its class
dependency graph.
"""

import argparse
import logging
import sys
from typing import List, Optional

from slicewise import __version__
from slicewise.cli.commands.analysis import cmd_analyze
from slicewise.cli.commands.config import cmd_config
from slicewise.cli.rich_output import set_rich_enabled
from slicewise.config import (
    ConfigurationError,
    DetectionAlgorithm,
    HubFiltering,
    HubStrategy,
    load_config,
)
from slicewise.exceptions import SliceWiseError


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="slicewise",
        description="SliceWise - service boundary suggestions for monolithic codebases",
        epilog='Use "slicewise <command> --help" for detailed command help.',
    )

    # Global options
    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output and debug logging",
    )
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable rich terminal output (use plain text)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze", help="Suggest service boundaries for a project directory"
    )
    analyze_parser.add_argument("path", help="Path to the project directory")
    analyze_parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json", "yaml"],
        help="Output format (default: from configuration, text)",
    )
    analyze_parser.add_argument("--output", "-o", help="Write the report to this file")
    analyze_parser.add_argument("--project-id", help="Project identifier (default: directory name)")
    analyze_parser.add_argument("--min-size", type=int, help="Minimum classes per service")
    analyze_parser.add_argument("--target", type=int, help="Target number of services")
    analyze_parser.add_argument(
        "--algorithm",
        choices=[a.value for a in DetectionAlgorithm],
        help="Community detection algorithm (default: label_propagation)",
    )
    analyze_parser.add_argument(
        "--max-iterations", type=int, help="Label propagation iteration cap"
    )
    analyze_parser.add_argument(
        "--hub-filtering",
        choices=[h.value for h in HubFiltering],
        help="Set hub classes aside before clustering",
    )
    analyze_parser.add_argument(
        "--hub-strategy",
        choices=[s.value for s in HubStrategy],
        help="How hub classes are put back after clustering",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_action", help="Config actions")

    config_subparsers.add_parser("show", help="Show current configuration")

    init_parser = config_subparsers.add_parser("init", help="Create a default configuration file")
    init_parser.add_argument(
        "--path", default="slicewise.json", help="Configuration file path (default: slicewise.json)"
    )
    init_parser.add_argument(
        "--format", choices=["json", "yaml"], default="json", help="Configuration file format"
    )

    validate_parser = config_subparsers.add_parser("validate", help="Validate a configuration file")
    validate_parser.add_argument("config_file", help="Configuration file to validate")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(getattr(args, "verbose", False))
    set_rich_enabled(not getattr(args, "no_rich", False))

    try:
        if args.command == "config":
            if not args.config_action:
                print("Error: config requires an action (show, init, validate)", file=sys.stderr)
                return 1
            return cmd_config(args)

        config = load_config(getattr(args, "config", None))
        if args.command == "analyze":
            return cmd_analyze(args, config)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 1
    except (SliceWiseError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if getattr(args, "verbose", False):
            import traceback

            traceback.print_exc()
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

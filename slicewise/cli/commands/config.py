"""
Configuration command handlers for SliceWise CLI.

Handles `config show`, `config init` and `config validate`.
"""

import sys

from slicewise.config import ConfigurationError, SliceWiseConfig


def cmd_config(args) -> int:
    """Handle config command."""
    if args.config_action == "show":
        config = SliceWiseConfig.load(getattr(args, "config", None))
        print("Current SliceWise Configuration:")
        print(config.get_config_summary())
        return 0

    if args.config_action == "init":
        config = SliceWiseConfig.default()
        try:
            config.to_file(args.path, args.format)
        except ConfigurationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Default configuration file created at {args.path}")
        print("Edit the file to customize your SliceWise settings.")
        return 0

    if args.config_action == "validate":
        try:
            SliceWiseConfig.load(args.config_file, use_env=False, validate=True)
        except (ConfigurationError, ValueError, TypeError) as e:
            print(f"Error: Configuration file is invalid: {e}", file=sys.stderr)
            return 1
        print(f"Configuration file {args.config_file} is valid")
        return 0

    print("Error: Unknown config action", file=sys.stderr)
    return 1

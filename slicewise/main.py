"""
Main entry point for SliceWise CLI.

This module provides the main() function used by the `slicewise` console script.
"""

import sys


def main() -> int:
    """Main CLI entry point."""
    from slicewise.cli_entry import main as cli_main

    try:
        rv = cli_main()
        return int(rv) if rv is not None else 0
    except SystemExit as e:
        # argparse exits on --help/--version and usage errors
        code = getattr(e, "code", 0)
        return code if isinstance(code, int) else 1


if __name__ == "__main__":
    sys.exit(main())

"""Entry point for running slicewise as a module."""

import sys

from slicewise.main import main

if __name__ == "__main__":
    sys.exit(main())

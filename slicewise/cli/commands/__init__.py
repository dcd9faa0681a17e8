"""
CLI command handlers.

- analysis.py: service boundary analysis
- config.py: configuration show, init and validate
"""

from .analysis import apply_overrides, cmd_analyze
from .config import cmd_config

__all__ = ["apply_overrides", "cmd_analyze", "cmd_config"]

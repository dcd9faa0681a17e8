"""Command-line support modules for SliceWise (output helpers and command handlers)."""

"""
Rich terminal output utilities for SliceWise CLI.

Provides tables, panels and status lines; plain mode prints the same content
without markup or colors.
"""

from typing import Any, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..analysis.decomposition.models import Suggestion


class RichOutputManager:
    """Manages rich terminal output with a plain-text mode."""

    def __init__(self, use_rich: bool = True, console: Optional[Console] = None):
        """Initialize the output manager."""
        self.use_rich = use_rich
        if console is not None:
            self.console = console
        elif use_rich:
            self.console = Console()
        else:
            self.console = Console(no_color=True, highlight=False, markup=False, emoji=False)

    def print_header(self, title: str, subtitle: Optional[str] = None) -> None:
        """Print a formatted header."""
        if self.use_rich:
            if subtitle:
                header_text = f"[bold blue]{title}[/bold blue]\n[dim]{subtitle}[/dim]"
            else:
                header_text = f"[bold blue]{title}[/bold blue]"

            self.console.print(Panel(header_text, border_style="blue", padding=(1, 2)))
        else:
            self.console.print(f"\n=== {title} ===")
            if subtitle:
                self.console.print(subtitle)
            self.console.print()

    def print_section(self, title: str) -> None:
        """Print a section separator."""
        if self.use_rich:
            self.console.rule(f"[bold]{title}[/bold]", style="blue")
        else:
            self.console.print(f"\n--- {title} ---")

    def print_warning(self, message: str) -> None:
        if self.use_rich:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
        else:
            self.console.print(f"WARNING: {message}")

    def create_table(self, title: str, columns: List[str]) -> Table:
        """Create a table; plain mode uses a borderless table without styles."""
        if self.use_rich:
            table = Table(title=title, show_header=True, header_style="bold blue")
        else:
            table = Table(title=title, show_header=True, box=None, header_style="")
        for column in columns:
            table.add_column(column)
        return table

    def add_table_row(self, table: Table, *values: Any) -> None:
        table.add_row(*[str(v) for v in values])

    def print_table(self, table: Table) -> None:
        self.console.print(table)

    def print_suggestion(self, suggestion: Suggestion, max_classes: int = 10) -> None:
        """Print boundaries as a summary table followed by per-boundary class lists."""
        self.print_section("Service Boundaries")
        self.console.print(
            f"Algorithm: {suggestion.algorithm.value}  "
            f"Modularity: {suggestion.modularity_score:.4f}  "
            f"Classes: {suggestion.class_count}"
        )

        if not suggestion.boundaries:
            self.print_warning("No service boundaries suggested")
            return

        table = self.create_table(
            "Suggested services",
            ["#", "Service", "Size", "Cohesion", "Coupling", "Internal", "External"],
        )
        for position, boundary in enumerate(suggestion.boundaries, 1):
            m = boundary.metrics
            self.add_table_row(
                table,
                position,
                boundary.suggested_name,
                m.size,
                f"{m.cohesion:.2f}",
                m.coupling,
                m.internal_dependencies,
                m.external_dependencies,
            )
        self.print_table(table)

        for position, boundary in enumerate(suggestion.boundaries, 1):
            names = sorted(boundary.class_names)
            self.console.print(f"{position}. {boundary.suggested_name}")
            for name in names[:max_classes]:
                self.console.print(f"    {name}")
            if len(names) > max_classes:
                self.console.print(f"    ... and {len(names) - max_classes} more")


# Global instance
rich_output = RichOutputManager()


def set_rich_enabled(enabled: bool) -> None:
    """Enable or disable rich output globally."""
    global rich_output
    rich_output = RichOutputManager(use_rich=enabled)


def get_rich_output() -> RichOutputManager:
    """Get the global rich output manager."""
    return rich_output

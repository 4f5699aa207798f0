"""
CLI output helpers built on rich.

Environment handling:
- Respects NO_COLOR and FORCE_COLOR environment variables
- Falls back to plain text when stdout is not a terminal
"""

from __future__ import annotations

import os

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

# Nord color palette (https://www.nordtheme.com/)
MCPROBE_THEME = Theme(
    {
        "info": "#88C0D0",
        "error": "#BF616A bold",
        "muted": "#D8DEE9",
    }
)

console = Console(
    theme=MCPROBE_THEME,
    force_terminal=os.environ.get("FORCE_COLOR") is not None,
    no_color=os.environ.get("NO_COLOR") is not None,
)

# Diagnostics go to stderr so stdout stays machine readable
err_console = Console(
    theme=MCPROBE_THEME,
    stderr=True,
    soft_wrap=True,
    no_color=os.environ.get("NO_COLOR") is not None,
)


def error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]✗ {escape(message)}[/error]")


def info(message: str) -> None:
    """Print an info message."""
    err_console.print(f"[info]ℹ {escape(message)}[/info]")


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[str]],
    show_header: bool = True,
) -> None:
    """Print a formatted table."""
    table = Table(title=title, show_header=show_header)

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*row)

    console.print(table)

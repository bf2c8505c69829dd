"""
Terminal output for the promadapter CLI, built on rich.

Results go to stdout through ``console``; diagnostics go to stderr through
``err_console`` so that ``--format json`` output can be piped.  Colour
follows the NO_COLOR and FORCE_COLOR conventions.
"""

from __future__ import annotations

import os

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

ADAPTER_THEME = Theme(
    {
        "success": "#A3BE8C",
        "warning": "#EBCB8B",
        "error": "#BF616A bold",
        "heading": "#88C0D0 bold",
    }
)

_NO_COLOR = os.environ.get("NO_COLOR") is not None

console = Console(
    theme=ADAPTER_THEME,
    force_terminal=os.environ.get("FORCE_COLOR") is not None,
    no_color=_NO_COLOR,
)
err_console = Console(theme=ADAPTER_THEME, stderr=True, no_color=_NO_COLOR)


def success(message: str) -> None:
    console.print(f"[success]✓ {escape(message)}[/success]")


def error(message: str) -> None:
    err_console.print(f"[error]✗ {escape(message)}[/error]")


def warning(message: str) -> None:
    err_console.print(f"[warning]⚠ {escape(message)}[/warning]")


def header(title: str) -> None:
    console.print()
    console.print(Panel(f"[heading]{escape(title)}[/heading]", border_style="cyan"))


def print_table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    """Print rows under a titled table; cell text is never parsed as markup."""
    table = Table(title=title, show_header=True)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))
    console.print(table)

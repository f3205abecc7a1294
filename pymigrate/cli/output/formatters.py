"""Output formatting utilities using Rich."""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from pymigrate.cli.output.styles import PYMIGRATE_THEME

console = Console(theme=PYMIGRATE_THEME)
err_console = Console(theme=PYMIGRATE_THEME, stderr=True)


def format_table(
    data: List[Dict[str, Any]],
    columns: List[str],
    title: Optional[str] = None,
) -> None:
    """
    Format and print data as a Rich table.

    Examples:
        data = [{"version": 1, "name": "create users", "down": "yes"}]
        format_table(data, ["version", "name", "down"], title="Migrations")
    """
    if not data:
        console.print("[dim]No data to display[/dim]")
        return

    table = Table(
        title=title,
        show_header=True,
        header_style="bold magenta",
        box=box.ROUNDED,
    )

    for col in columns:
        table.add_column(col, style="cyan")

    for row in data:
        cells = []
        for col in columns:
            value = row.get(col, "")
            if col.lower() == "status":
                value = format_status(str(value))
            elif isinstance(value, datetime):
                value = value.strftime("%Y-%m-%d %H:%M:%S")
            else:
                value = str(value)
            cells.append(value)

        table.add_row(*cells)

    console.print(table)


def format_json(data: Any, indent: int = 2) -> None:
    """Format and print data as JSON with syntax highlighting."""
    json_str = json.dumps(data, indent=indent, default=str)
    console.print(Syntax(json_str, "json", theme="monokai", line_numbers=False))


def format_plain(data: List[str]) -> None:
    """Format and print data as plain text (one item per line)."""
    for item in data:
        console.print(item)


def format_status(status: str) -> str:
    """
    Colorize a migration status.

    Examples:
        >>> format_status("migrated")
        '[status.migrated]migrated[/status.migrated]'
    """
    key = f"status.{status.lower()}"
    if key not in PYMIGRATE_THEME.styles:
        return status
    return f"[{key}]{status}[/{key}]"


def format_key_value(data: Dict[str, Any], title: Optional[str] = None) -> None:
    """
    Format and print key-value pairs.

    Examples:
        format_key_value({"version": 3, "locked": False}, title="Control")
    """
    if title:
        console.print(f"\n[bold magenta]{title}[/bold magenta]")

    for key, value in data.items():
        if isinstance(value, datetime):
            value_str = value.strftime("%Y-%m-%d %H:%M:%S")
        elif value is None:
            value_str = "[dim]None[/dim]"
        else:
            value_str = str(value)

        if key.lower() == "status":
            value_str = format_status(value_str)

        console.print(f"  [cyan]{key}:[/cyan] {value_str}")


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[success]✓[/success] {message}")


def print_error(message: str) -> None:
    """Print error message."""
    err_console.print(f"[error]✗[/error] {message}")


def print_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"[info]ℹ[/info] {message}")

"""Output formatting for stashctl.

Provides consistent output in JSON, key/value and quiet modes using Rich.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape

# =============================================================================
# Console Instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Output Format
# =============================================================================


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        """Create from string value."""
        return cls(value.lower())


# =============================================================================
# Key/Value Output
# =============================================================================


def print_key_value(
    data: dict[str, Any],
    *,
    title: str | None = None,
    key_labels: dict[str, str] | None = None,
) -> None:
    """Print key-value pairs in a formatted way.

    Args:
        data: Dictionary of key-value pairs.
        title: Optional title.
        key_labels: Optional mapping of keys to display labels.
    """
    if title:
        console.print(f"[bold]{title}[/bold]")

    labels = key_labels or {}
    display = {key: labels.get(key, key.replace("_", " ").title()) for key in data}
    max_key_len = max(len(label) for label in display.values()) if display else 0

    for key, value in data.items():
        label = display[key]
        if value is None:
            value = "[dim]-[/dim]"
        elif isinstance(value, bool):
            value = "[green]Yes[/green]" if value else "[red]No[/red]"
        elif isinstance(value, (list, dict)):
            value = escape(json.dumps(value, indent=2))
        else:
            value = escape(str(value))

        console.print(f"  {label:<{max_key_len}}  {value}", highlight=False)


# =============================================================================
# JSON Output
# =============================================================================


def print_json(data: Any, *, indent: int = 2) -> None:
    """Print data as JSON."""
    print(json.dumps(data, indent=indent, default=str))


# =============================================================================
# Unified Output
# =============================================================================


def print_output(
    data: dict[str, Any],
    *,
    format: OutputFormat = OutputFormat.TABLE,
    key_labels: dict[str, str] | None = None,
    title: str | None = None,
    quiet: bool = False,
    id_field: str = "build_id",
) -> None:
    """Print a record in the specified format.

    Args:
        data: Record to print.
        format: Output format.
        key_labels: Labels for keys in table format.
        title: Optional title.
        quiet: If True, only print the ID.
        id_field: Field to use for the ID in quiet mode.
    """
    if quiet:
        print(data.get(id_field) or "")
        return

    if format == OutputFormat.JSON:
        print_json(data)
        return

    print_key_value(data, title=title, key_labels=key_labels)


# =============================================================================
# Status Messages
# =============================================================================


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    """Print warning message to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}", highlight=False)


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓[/green] {escape(message)}", highlight=False)


def print_info(message: str) -> None:
    """Print info message to stderr so JSON output on stdout stays clean."""
    err_console.print(f"[blue]Info:[/blue] {escape(message)}", highlight=False)

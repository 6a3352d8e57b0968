"""
Console utilities for exportflow CLI.

Provides styled console output and formatting utilities.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme


EXPORTFLOW_THEME = Theme({
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "step": "bold magenta",
    "file": "bold cyan",
    "workflow": "bold blue",
})

# Global console instances
console = Console(theme=EXPORTFLOW_THEME)
err_console = Console(theme=EXPORTFLOW_THEME, stderr=True)


def print_error(message: str, prefix: str = "Error") -> None:
    """Print an error message to stderr."""
    err_console.print(f"[error]{prefix}:[/] {message}")


def print_warning(message: str, prefix: str = "Warning") -> None:
    """Print a warning message to stderr."""
    err_console.print(f"[warning]{prefix}:[/] {message}")


def print_success(message: str, prefix: str = "Success") -> None:
    """Print a success message."""
    console.print(f"[success]{prefix}:[/] {message}")

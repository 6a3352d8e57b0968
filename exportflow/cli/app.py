"""
Main CLI application.

This module defines the main Typer application and entry point.
"""

from __future__ import annotations

import os

import typer
from rich.console import Console

from exportflow import __version__
from exportflow.cli.commands import config, ppi, run, workflows
from exportflow.cli.commands.common import cli_state

# Create the main app
app = typer.Typer(
    name="exportflow",
    help="Configurable external-tool export workflows",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Add sub-commands
app.add_typer(workflows.app, name="workflows", help="Inspect and select workflows")
app.add_typer(config.app, name="config", help="Configuration management")
app.command("run")(run.run_command)
app.command("ppi")(ppi.ppi_command)

console = Console()


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]exportflow[/] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-essential output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
):
    """
    exportflow - Configurable external-tool export workflows

    Runs named sequences of command-line tools against exported images,
    computes print resolution and delivers the result.

    Global Options:
        --quiet, -q    Suppress non-essential output
        --debug        Enable debug logging
        --no-color     Disable colored output
    """
    cli_state.quiet = quiet
    cli_state.debug = debug
    cli_state.no_color = no_color

    # Set environment variable for no-color (used by Rich)
    if no_color:
        os.environ["NO_COLOR"] = "1"


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""
Configuration commands for exportflow CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from exportflow.cli.commands.common import load_settings, open_preferences
from exportflow.cli.ui.console import console
from exportflow.core.preferences import OUTPUT_FOLDER, WORKFLOWS_FILE
from exportflow.models.config import ExportFlowConfig

app = typer.Typer(help="Configuration management")


@app.command("show")
def config_show(
    settings_file: Optional[str] = typer.Option(
        None,
        "--settings",
        "-s",
        help="Settings file (default: exportflow.yaml)",
    ),
):
    """Show current configuration and remembered choices."""
    settings = load_settings(settings_file)
    preferences = open_preferences(settings)

    remembered = "[dim]unavailable[/]"
    if preferences is not None:
        selection = preferences.selection
        remembered = (
            f"  Definitions: {preferences.get_str(WORKFLOWS_FILE) or '-'}\n"
            f"  Output Folder: {preferences.get_str(OUTPUT_FOLDER) or '-'}\n"
            f"  Workflow #: {selection.workflow_choice}\n"
            f"  Paper #: {selection.paper_choice}"
        )

    console.print(
        Panel.fit(
            f"[bold]Workflow Configuration:[/]\n"
            f"  Definitions File: {settings.workflow.definitions_file or '-'}\n"
            f"  Max Workflows: {settings.workflow.max_workflows}\n"
            f"  Grain Strength: {settings.workflow.grain_strength}\n"
            f"  Temp Dir: {settings.workflow.temp_dir}\n"
            f"\n[bold]Runner Configuration:[/]\n"
            f"  Shell: {settings.runner.shell or 'system default'}\n"
            f"  Timeout: {str(settings.runner.timeout) + 's' if settings.runner.timeout else 'none'}\n"
            f"\n[bold]Output Configuration:[/]\n"
            f"  Output Folder: {settings.output.output_folder or '-'}\n"
            f"  Data Dir: {settings.output.data_dir}\n"
            f"\n[bold]Remembered:[/]\n"
            f"{remembered}",
            title="[bold blue]exportflow Configuration[/]",
        )
    )


@app.command("init")
def config_init(
    config_file: str = typer.Option(
        "exportflow.yaml",
        "--output",
        "-o",
        help="Output file path",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
):
    """Initialize a new configuration file."""
    init_config(config_file, force)


def init_config(config_file: str, force: bool = False) -> None:
    """Create a new configuration file with default values."""
    config_path = Path(config_file)

    if config_path.exists() and not force:
        overwrite = typer.confirm(f"{config_file} already exists. Overwrite?")
        if not overwrite:
            console.print("[yellow]Cancelled[/]")
            return

    ExportFlowConfig().save(config_path)

    console.print(f"[green]Configuration saved to {config_file}[/]")
    console.print("\n[bold]Next steps:[/]")
    console.print("1. Point workflow.definitions_file at your workflow definition file")
    console.print("\n2. Run a workflow:")
    console.print("   [dim]run-workflow --workflow Print --paper A4 --input photo.tif[/]")

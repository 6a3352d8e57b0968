"""
Rich panels and tables for exportflow CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from exportflow.utils.helpers import format_duration

if TYPE_CHECKING:
    from exportflow.models.catalog import WorkflowCatalog
    from exportflow.models.run import PipelineRun


def create_steps_table(catalog: "WorkflowCatalog") -> Table:
    """Create a table of the catalog's step templates."""
    table = Table(title="Steps", show_header=True)
    table.add_column("Code", style="bold")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Command")

    for step in catalog.steps.values():
        kind = "[magenta]built-in[/]" if step.is_builtin else "generic"
        table.add_row(step.code, step.name, kind, Text(step.command_template))

    return table


def create_workflows_table(catalog: "WorkflowCatalog", selected: int = 0) -> Table:
    """
    Create a table of the catalog's workflows.

    Args:
        catalog: Loaded catalog
        selected: 1-based index of the selected workflow (0 = none)
    """
    table = Table(title="Workflows", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Steps")

    for index, workflow in enumerate(catalog.workflows.values(), start=1):
        marker = f"[green]{index}*[/]" if index == selected else str(index)
        table.add_row(marker, workflow.name, workflow.describe())

    return table


def create_papers_table(catalog: "WorkflowCatalog", selected: int = 0) -> Table:
    """
    Create a table of the catalog's paper profiles.

    Args:
        catalog: Loaded catalog
        selected: 1-based index of the selected paper (0 = none)
    """
    table = Table(title="Papers", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Width (mm)", justify="right")

    for index, paper in enumerate(catalog.papers.values(), start=1):
        marker = f"[green]{index}*[/]" if index == selected else str(index)
        table.add_row(marker, paper.name, f"{paper.width_mm:g}")

    return table


def create_run_panel(run: "PipelineRun") -> Panel:
    """
    Create a panel summarizing a pipeline run.

    Args:
        run: Finished or failed run

    Returns:
        Rich Panel with one line per executed step
    """
    content = [
        Text.from_markup(f"[bold]Workflow:[/] [workflow]{run.workflow}[/]"),
        Text.from_markup(f"[bold]File:[/] [file]{run.file_path}[/]"),
    ]
    if run.paper:
        content.append(Text.from_markup(f"[bold]Paper:[/] {run.paper.name} ({run.paper.width_mm:g} mm)"))
    if run.ppi is not None:
        content.append(Text.from_markup(f"[bold]PPI:[/] {run.ppi}"))

    steps = Table(show_header=True, box=None, padding=(0, 1))
    steps.add_column("Step", style="step")
    steps.add_column("Status")
    steps.add_column("Duration", justify="right")
    for result in run.results:
        if result.skipped:
            status = "[dim]skipped[/]"
        elif result.success:
            status = "[green]ok[/]"
        else:
            status = f"[red]exit {result.exit_code}[/]"
        steps.add_row(result.step, status, format_duration(result.duration))
    content.append(steps)

    if run.success:
        title, style = "[bold green]Workflow Succeeded[/]", "green"
    else:
        title, style = "[bold red]Workflow Failed[/]", "red"
        content.append(Text.from_markup(f"[bold]Failed at:[/] {run.failed_step} ({run.failure})"))

    return Panel(Group(*content), title=title, border_style=style)

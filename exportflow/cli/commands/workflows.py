"""
Workflow definition commands for exportflow CLI.
"""

from __future__ import annotations

from typing import Optional

import typer

from exportflow.cli.commands.common import load_catalog, load_settings, open_preferences
from exportflow.cli.ui.console import console, print_error, print_success
from exportflow.cli.ui.panels import create_papers_table, create_steps_table, create_workflows_table
from exportflow.exceptions import UnknownStepError
from exportflow.models.catalog import BuiltinKind
from exportflow.tools.runner import command_binary, is_available

app = typer.Typer(help="Inspect and select workflows")

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Workflow definition file (default: last used file)",
)
SETTINGS_OPTION = typer.Option(
    None,
    "--settings",
    "-s",
    help="Settings file (default: exportflow.yaml)",
)


@app.command("show")
def workflows_show(
    config: Optional[str] = CONFIG_OPTION,
    settings_file: Optional[str] = SETTINGS_OPTION,
):
    """Show steps, workflows and papers of a definition file."""
    settings = load_settings(settings_file)
    preferences = open_preferences(settings)
    store = load_catalog(config, settings, preferences)
    catalog = store.catalog
    selection = store.selection

    console.print(create_steps_table(catalog))
    console.print(create_workflows_table(catalog, selection.workflow_choice))
    console.print(create_papers_table(catalog, selection.paper_choice))


@app.command("validate")
def workflows_validate(
    config: Optional[str] = CONFIG_OPTION,
    settings_file: Optional[str] = SETTINGS_OPTION,
    check_tools: bool = typer.Option(
        False,
        "--check-tools",
        "-t",
        help="Also check that step programs are installed",
    ),
):
    """Validate that every workflow step can be resolved."""
    settings = load_settings(settings_file)
    preferences = open_preferences(settings)
    catalog = load_catalog(config, settings, preferences).catalog

    errors: list[str] = []
    warnings: list[str] = []

    if not catalog.workflows:
        warnings.append("No workflows defined")

    for workflow in catalog.workflows.values():
        if not workflow.steps:
            warnings.append(f"Workflow '{workflow.name}' has no steps")
        for code in workflow.steps:
            try:
                catalog.resolve_step(code)
            except UnknownStepError as e:
                errors.append(f"Workflow '{workflow.name}': {e.message}")
        if workflow.uses(BuiltinKind.SIZE) and not catalog.papers:
            errors.append(f"Workflow '{workflow.name}' uses SIZE but no papers are defined")

    if check_tools:
        for step in catalog.steps.values():
            binary = command_binary(step.command_template)
            if binary and not is_available(binary):
                warnings.append(f"Step '{step.code}': program '{binary}' not found in PATH")

    if errors:
        console.print("[bold red]Errors:[/]")
        for error in errors:
            console.print(f"  [red]- {error}[/]")
        console.print()

    if warnings:
        console.print("[bold yellow]Warnings:[/]")
        for warning in warnings:
            console.print(f"  [yellow]- {warning}[/]")
        console.print()

    if errors:
        raise typer.Exit(1)
    if not warnings:
        console.print("[bold green]All workflows are valid![/]")


@app.command("select")
def workflows_select(
    workflow: Optional[str] = typer.Option(None, "--workflow", "-w", help="Workflow to select"),
    paper: Optional[str] = typer.Option(None, "--paper", "-p", help="Paper to select"),
    config: Optional[str] = CONFIG_OPTION,
    settings_file: Optional[str] = SETTINGS_OPTION,
):
    """Remember a workflow and paper as the defaults for later runs."""
    settings = load_settings(settings_file)
    preferences = open_preferences(settings)
    if preferences is None:
        print_error("Preferences are not available")
        raise typer.Exit(1)
    catalog = load_catalog(config, settings, preferences).catalog

    workflow_choice = None
    paper_choice = None
    if workflow is not None:
        if workflow not in catalog.workflows:
            print_error(f"Unknown workflow: {workflow}")
            raise typer.Exit(1)
        workflow_choice = catalog.workflow_names.index(workflow) + 1
    if paper is not None:
        if paper not in catalog.papers:
            print_error(f"Unknown paper: {paper}")
            raise typer.Exit(1)
        paper_choice = catalog.paper_names.index(paper) + 1

    preferences.select(workflow_choice, paper_choice)
    selection = preferences.selection
    selected_workflow = catalog.workflow_at(selection.workflow_choice)
    selected_paper = catalog.paper_at(selection.paper_choice)
    print_success(
        f"workflow: {selected_workflow.name if selected_workflow else '-'}, "
        f"paper: {selected_paper.name if selected_paper else '-'}",
        prefix="Selected",
    )

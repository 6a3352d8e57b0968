"""
Workflow run command for exportflow CLI.

Also available standalone as ``run-workflow``.
"""

from __future__ import annotations

from typing import Optional

import typer

from exportflow.cli.commands.common import cli_state, load_catalog, load_settings, open_preferences
from exportflow.cli.ui.console import console, err_console, print_error
from exportflow.cli.ui.panels import create_run_panel
from exportflow.core.delivery import ExportDelivery
from exportflow.core.preferences import OUTPUT_FOLDER
from exportflow.exceptions import ExportFlowError, StepExecutionError
from exportflow.models.run import PipelineRun, StepResult
from exportflow.tools.runner import ShellRunner
from exportflow.workflows.executor import WorkflowExecutor


def run_command(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Workflow definition file ([steps], [workflows], [papers])",
    ),
    workflow: Optional[str] = typer.Option(
        None,
        "--workflow",
        "-w",
        help="Workflow name (default: last selected workflow)",
    ),
    paper: Optional[str] = typer.Option(
        None,
        "--paper",
        "-p",
        help="Paper name, required by SIZE steps (default: last selected paper)",
    ),
    input_file: str = typer.Option(
        ...,
        "--input",
        "-i",
        help="Exported image to transform in place",
    ),
    source: Optional[str] = typer.Option(
        None,
        "--source",
        help="Original image, used by EXIF and collection import",
    ),
    grain: Optional[int] = typer.Option(
        None,
        "--grain",
        min=0,
        max=100,
        help="Grain strength for GR steps",
    ),
    output_folder: Optional[str] = typer.Option(
        None,
        "--output-folder",
        "-o",
        help="Copy the result into this folder",
    ),
    settings_file: Optional[str] = typer.Option(
        None,
        "--settings",
        "-s",
        help="Settings file (default: exportflow.yaml)",
    ),
):
    """
    Run a workflow against one exported image.

    Steps run in order; the first step that exits non-zero stops the run,
    removes the partial output and is reported on stderr.

    Example:
        run-workflow --config workflows.txt --workflow Print --paper A4 --input photo.tif
    """
    settings = load_settings(settings_file)
    preferences = open_preferences(settings)
    store = load_catalog(config, settings, preferences)
    catalog = store.catalog

    if workflow is None:
        selected = store.selected_workflow()
        if selected is None:
            print_error("No workflow given and none selected. Use --workflow.")
            raise typer.Exit(1)
        workflow = selected.name

    if paper is None:
        selected_paper = store.selected_paper()
        paper = selected_paper.name if selected_paper else None

    executor = WorkflowExecutor(
        ShellRunner(settings.runner.shell, settings.runner.timeout),
        temp_dir=settings.workflow.temp_dir,
        grain_strength=settings.workflow.grain_strength,
        on_step_start=_show_step_start,
        on_step_complete=_show_step_complete,
    )

    try:
        run = executor.plan(catalog, workflow, input_file, paper, source, grain)
        executor.run(catalog, run)
    except StepExecutionError as e:
        print_error(f"Step {e.step} failed with exit code {e.exit_code}")
        if e.output:
            err_console.print(e.output.strip(), markup=False, highlight=False)
        raise typer.Exit(1)
    except ExportFlowError as e:
        print_error(e.message)
        raise typer.Exit(1)

    if preferences is not None:
        preferences.select(
            workflow_choice=catalog.workflow_names.index(run.workflow) + 1,
            paper_choice=catalog.paper_names.index(run.paper.name) + 1 if run.paper else None,
        )

    destination = output_folder or settings.output.output_folder
    if destination is None and preferences is not None:
        destination = preferences.get_str(OUTPUT_FOLDER)

    if run.collection_import or destination:
        try:
            delivered = ExportDelivery(output_folder=destination).deliver(run)
        except ExportFlowError as e:
            print_error(e.message)
            raise typer.Exit(1)
        if preferences is not None and output_folder:
            preferences.set_str(OUTPUT_FOLDER, output_folder)
        if not cli_state.quiet:
            console.print(f"Result: [file]{delivered}[/]")

    if not cli_state.quiet:
        console.print(create_run_panel(run))


def _show_step_start(run: PipelineRun, step: str) -> None:
    if not cli_state.quiet:
        err_console.print(f"Proceed with [step]{step}[/] on [file]{run.file_path.name}[/]")


def _show_step_complete(run: PipelineRun, result: StepResult) -> None:
    if cli_state.debug and result.output:
        err_console.print(result.output.strip(), markup=False, highlight=False)


run_app = typer.Typer(
    name="run-workflow",
    help="Run an export workflow against one image",
    add_completion=False,
    rich_markup_mode="rich",
)
run_app.command()(run_command)


def main():
    """Entry point for the standalone run-workflow command."""
    run_app()

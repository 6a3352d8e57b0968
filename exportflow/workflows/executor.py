"""
Workflow executor for exportflow.

Runs the steps of a workflow, in order, against one exported file. Each
step renders its command template, runs it and checks the exit status;
the first failure ends the run and removes the partial output.

Placeholders receive, in order:

    generic, SIZE   file
    EXIF            source image, file
    GR              temporary output, grain strength, file
    PPI             file, ppi, ppi, file

A template may use fewer leading values than its step receives, except GR,
which must take all three so the grain tool reads the working file.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Callable

from exportflow.core.sizing import compute_ppi, parse_dimensions, read_dimensions_file, redirect_target
from exportflow.exceptions import (
    ConfigError,
    ExportFlowError,
    MissingParameterError,
    StepExecutionError,
    WorkingFileError,
)
from exportflow.models.catalog import BuiltinKind, StepTemplate, WorkflowCatalog
from exportflow.models.run import PipelineRun, StepResult
from exportflow.tools.runner import ProcessRunner, ShellRunner
from exportflow.utils.helpers import count_placeholders, format_template
from exportflow.utils.logger import get_logger, log_step_execution

logger = get_logger(__name__)

# Steps that only read the working file
READ_ONLY_STEPS = {BuiltinKind.COLLECTION_IMPORT, BuiltinKind.SIZE, BuiltinKind.PPI}

# Number of values each kind of step passes to its template
TEMPLATE_VALUES = {
    BuiltinKind.EXIF: 2,
    BuiltinKind.GRAIN: 3,
    BuiltinKind.PPI: 4,
}


class WorkflowExecutor:
    """
    Executes workflows against exported files.

    Example:
        >>> executor = WorkflowExecutor(ShellRunner())
        >>> run = executor.execute(catalog, "Print", "/tmp/export/photo.tif", paper="A4")
        >>> run.state
        <RunState.SUCCEEDED: 'succeeded'>
    """

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        temp_dir: str | Path | None = None,
        grain_strength: int = 25,
        on_step_start: Callable[[PipelineRun, str], None] | None = None,
        on_step_complete: Callable[[PipelineRun, StepResult], None] | None = None,
    ):
        """
        Initialize the executor.

        Args:
            runner: Process runner (defaults to the system shell)
            temp_dir: Directory for temporary step output (defaults to the
                working file's directory)
            grain_strength: Default strength for the GR step
            on_step_start: Callback when a step starts
            on_step_complete: Callback when a step completes
        """
        self.runner = runner or ShellRunner()
        self.temp_dir = Path(temp_dir) if temp_dir else None
        self.grain_strength = grain_strength
        self.on_step_start = on_step_start
        self.on_step_complete = on_step_complete

    def plan(
        self,
        catalog: WorkflowCatalog,
        workflow: str,
        file_path: str | Path,
        paper: str | None = None,
        source_path: str | Path | None = None,
        grain_strength: int | None = None,
    ) -> PipelineRun:
        """
        Resolve a workflow into a pending run without spawning anything.

        Args:
            catalog: Catalog to resolve steps against
            workflow: Workflow name
            file_path: Exported file to transform in place
            paper: Paper name (required for SIZE)
            source_path: Original image (required for EXIF)
            grain_strength: Strength for GR (defaults to the executor's)

        Returns:
            A pending PipelineRun

        Raises:
            UnknownWorkflowError: If the workflow is not defined
            UnknownStepError: If a step cannot be resolved
            UnknownPaperError: If the paper is not defined
            MissingParameterError: If a built-in step lacks its input
            WorkingFileError: If the working file does not exist
            ConfigError: If a template does not fit the values of its step
        """
        definition = catalog.get_workflow(workflow)
        templates = [catalog.resolve_step(code) for code in definition.steps]
        paper_profile = catalog.get_paper(paper) if paper else None

        ppi_available = False
        for template in templates:
            if template.builtin == BuiltinKind.SIZE:
                if paper_profile is None:
                    raise MissingParameterError(template.code, "a paper")
                ppi_available = True
            elif template.builtin == BuiltinKind.PPI and not ppi_available:
                raise MissingParameterError(template.code, "a PPI computed by an earlier SIZE step")
            elif template.builtin == BuiltinKind.EXIF and source_path is None:
                raise MissingParameterError(template.code, "the source image path")
            self._check_template(template)

        path = Path(file_path)
        if not path.is_file():
            raise WorkingFileError(f"Exported file not found: {path}", path=str(path))

        steps = list(definition.steps)
        if self._needs_final_ppi_pass(templates):
            steps.append(BuiltinKind.PPI.value)

        return PipelineRun(
            workflow=definition.name,
            steps=tuple(steps),
            file_path=path,
            source_path=Path(source_path) if source_path else None,
            paper=paper_profile,
            grain_strength=self.grain_strength if grain_strength is None else grain_strength,
        )

    @staticmethod
    def _check_template(template: StepTemplate) -> None:
        """
        Check that a template fits the values its step passes.

        Raises:
            ConfigError: If the template needs more values than available,
                or a grain template does not take the working file
        """
        if not template.command_template.strip():
            return
        needed = count_placeholders(template.command_template)
        available = TEMPLATE_VALUES.get(template.builtin, 1)
        if needed > available:
            raise ConfigError(
                f"Template for step '{template.code}' has {needed} placeholders "
                f"but only {available} values are available"
            )
        if template.builtin == BuiltinKind.GRAIN and needed < available:
            raise ConfigError(
                f"Template for step '{template.code}' must take the temporary output, "
                f"the grain strength and the working file ({needed} placeholders found)"
            )

    @staticmethod
    def _needs_final_ppi_pass(templates: list[StepTemplate]) -> bool:
        """Check whether a step rewrites the file after the last PPI write."""
        last_ppi = None
        for index, template in enumerate(templates):
            if template.builtin == BuiltinKind.PPI:
                last_ppi = index
        if last_ppi is None:
            return False
        return any(
            template.command_template and template.builtin not in READ_ONLY_STEPS
            for template in templates[last_ppi + 1:]
        )

    def execute(
        self,
        catalog: WorkflowCatalog,
        workflow: str,
        file_path: str | Path,
        paper: str | None = None,
        source_path: str | Path | None = None,
        grain_strength: int | None = None,
    ) -> PipelineRun:
        """
        Plan and run a workflow against one file.

        Returns:
            The succeeded PipelineRun

        Raises:
            StepExecutionError: If an external command exits non-zero
            ExportFlowError: For planning errors and unreadable files
        """
        run = self.plan(catalog, workflow, file_path, paper, source_path, grain_strength)
        return self.run(catalog, run)

    def run(self, catalog: WorkflowCatalog, run: PipelineRun) -> PipelineRun:
        """
        Run a planned workflow.

        Args:
            catalog: Catalog the run was planned against
            run: Pending run

        Returns:
            The run, in state SUCCEEDED

        Raises:
            StepExecutionError: If an external command exits non-zero; the
                run is FAILED and the working file removed
        """
        run.start()
        logger.info(f"Running workflow [bold]{run.workflow}[/] on [cyan]{run.file_path.name}[/]")

        for index, code in enumerate(run.steps):
            run.begin_step(index)

            try:
                if self.on_step_start:
                    self.on_step_start(run, code)
                result = self._execute_step(catalog.resolve_step(code), run, index)
                if self.on_step_complete:
                    self.on_step_complete(run, result)
            except StepExecutionError as e:
                self._cleanup(run)
                run.fail(e.message, e.exit_code)
                raise
            except ExportFlowError as e:
                self._cleanup(run)
                run.fail(e.message)
                raise
            except Exception as e:
                logger.error(f"Step {code} aborted: {e}")
                self._cleanup(run)
                run.fail(str(e))
                raise

        run.succeed()
        logger.info(f"Workflow [bold]{run.workflow}[/] finished on [cyan]{run.file_path.name}[/]")
        return run

    def _execute_step(self, template: StepTemplate, run: PipelineRun, index: int) -> StepResult:
        """Execute a single step."""
        logger.info(f"Proceed with {template.code} on {run.file_path.name}")

        if template.builtin == BuiltinKind.COLLECTION_IMPORT:
            run.collection_import = True
            result = StepResult(step=template.code, index=index, skipped=True)
            run.record(result)
            return result

        temp_output = self._temp_output(run) if template.builtin == BuiltinKind.GRAIN else None
        command = format_template(
            template.command_template,
            self._template_args(template, run, temp_output),
            step=template.code,
        )

        if not command.strip():
            result = StepResult(step=template.code, index=index, skipped=True)
            run.record(result)
            return result

        logger.debug(f"{template.code}: {command}")
        outcome = self.runner.run(command)
        result = StepResult(
            step=template.code,
            index=index,
            command=command,
            exit_code=outcome.exit_code,
            output=outcome.output,
            error_output=outcome.error_output,
            duration=outcome.duration,
        )
        run.record(result)
        log_step_execution(logger, template.code, run.file_path.name, result.exit_code, result.duration, run.id)

        if not result.success:
            if temp_output is not None:
                temp_output.unlink(missing_ok=True)
            raise StepExecutionError(template.code, result.exit_code, command, result.error_output)

        if template.builtin == BuiltinKind.SIZE:
            self._apply_size(template, run, result)
        elif template.builtin == BuiltinKind.GRAIN and temp_output is not None:
            self._apply_grain(run, temp_output)

        return result

    def _template_args(
        self,
        template: StepTemplate,
        run: PipelineRun,
        temp_output: Path | None,
    ) -> tuple[Any, ...]:
        """Get the positional template values for a step."""
        file_path = str(run.file_path)
        if template.builtin == BuiltinKind.PPI:
            return (file_path, run.ppi, run.ppi, file_path)
        if template.builtin == BuiltinKind.EXIF:
            return (str(run.source_path), file_path)
        if template.builtin == BuiltinKind.GRAIN:
            return (str(temp_output), run.grain_strength, file_path)
        return (file_path,)

    def _temp_output(self, run: PipelineRun) -> Path:
        directory = self.temp_dir or run.file_path.parent
        return directory / f"{run.file_path.stem}_{run.id}_grain{run.file_path.suffix}"

    def _apply_size(self, template: StepTemplate, run: PipelineRun, result: StepResult) -> None:
        """Compute the PPI from the dimensions reported by the size probe."""
        target = redirect_target(result.command)
        if target is not None:
            width, height = read_dimensions_file(target)
        else:
            try:
                width, height = parse_dimensions(result.output)
            except ValueError as e:
                raise WorkingFileError(f"Step '{template.code}' reported no dimensions") from e

        paper = run.paper
        if paper is None:
            raise MissingParameterError(template.code, "a paper")
        run.ppi = compute_ppi(width, height, paper.width_mm)
        logger.info(f"{width}x{height} on {paper.name} ({paper.width_mm:g} mm): {run.ppi} PPI")

    def _apply_grain(self, run: PipelineRun, temp_output: Path) -> None:
        """Replace the working file with the grain step's output."""
        if not temp_output.exists():
            return
        try:
            shutil.move(str(temp_output), str(run.file_path))
        except OSError as e:
            raise WorkingFileError(
                f"Cannot replace {run.file_path} with grain output: {e}",
                path=str(run.file_path),
            ) from e

    def _cleanup(self, run: PipelineRun) -> None:
        """Remove the partial output of a failed run."""
        for path in (run.file_path, self._temp_output(run)):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")

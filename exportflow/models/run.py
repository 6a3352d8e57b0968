"""
Pipeline run models.

A ``PipelineRun`` tracks one exported file through one workflow. Its state
only changes through the transition methods below:

    PENDING -> RUNNING(step) -> SUCCEEDED
                             -> FAILED(step, cause)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from uuid import uuid4

from pydantic import BaseModel, Field

from exportflow.exceptions import RunStateError
from exportflow.models.catalog import PaperProfile


class RunState(str, Enum):
    """States of a pipeline run."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_final(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED)


class StepResult(BaseModel):
    """Result of executing a single workflow step."""

    step: str = Field(description="Step code")
    index: int = Field(description="Position of the step in the workflow")
    command: str = Field(default="", description="Rendered command line")
    exit_code: int = Field(default=0, description="Process exit code")
    output: str = Field(default="", description="Captured stdout")
    error_output: str = Field(default="", description="Captured stderr")
    duration: float = Field(default=0.0, description="Duration in seconds")
    skipped: bool = Field(default=False, description="No external command was run")
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def get_summary(self) -> str:
        """Get a brief summary of the result."""
        if self.skipped:
            return f"[SKIPPED] {self.step}"
        status = "SUCCESS" if self.success else f"FAILED ({self.exit_code})"
        return f"[{status}] {self.step} ({self.duration:.1f}s)"


class PipelineRun(BaseModel):
    """One workflow execution against one exported file."""

    id: str = Field(default_factory=lambda: uuid4().hex[:8])
    workflow: str = Field(description="Workflow name")
    steps: tuple[str, ...] = Field(default=(), description="Resolved step codes")
    file_path: Path = Field(description="Working file, transformed in place")
    source_path: Path | None = Field(default=None, description="Original image, for EXIF transfer")
    paper: PaperProfile | None = Field(default=None)
    grain_strength: int | None = Field(default=None)

    state: RunState = Field(default=RunState.PENDING)
    step_index: int | None = Field(default=None, description="Index of the running or failed step")
    ppi: int | None = Field(default=None, description="Computed pixels per inch")
    collection_import: bool = Field(default=False, description="Result should be imported into the collection")
    results: list[StepResult] = Field(default_factory=list)

    failed_step: str | None = Field(default=None)
    failure: str | None = Field(default=None)
    exit_code: int | None = Field(default=None)

    started_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)

    @property
    def current_step(self) -> str | None:
        if self.step_index is None or self.step_index >= len(self.steps):
            return None
        return self.steps[self.step_index]

    @property
    def success(self) -> bool:
        return self.state == RunState.SUCCEEDED

    @property
    def duration(self) -> float:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return sum(r.duration for r in self.results)

    def start(self) -> None:
        """Move from PENDING to RUNNING."""
        self._expect(RunState.PENDING)
        self.state = RunState.RUNNING
        self.started_at = datetime.now()

    def begin_step(self, index: int) -> None:
        """Mark the step at ``index`` as the running step."""
        self._expect(RunState.RUNNING)
        if not 0 <= index < len(self.steps):
            raise RunStateError(f"Step index {index} out of range for workflow '{self.workflow}'")
        self.step_index = index

    def record(self, result: StepResult) -> None:
        """Store the result of the running step."""
        self._expect(RunState.RUNNING)
        self.results.append(result)

    def succeed(self) -> None:
        """Move from RUNNING to SUCCEEDED."""
        self._expect(RunState.RUNNING)
        self.state = RunState.SUCCEEDED
        self.completed_at = datetime.now()

    def fail(self, cause: str, exit_code: int | None = None) -> None:
        """Move to FAILED at the current step. Allowed from PENDING and RUNNING."""
        if self.state.is_final:
            raise RunStateError(f"Run {self.id} already finished as {self.state.value}")
        self.state = RunState.FAILED
        self.failed_step = self.current_step
        self.failure = cause
        self.exit_code = exit_code
        self.completed_at = datetime.now()

    def _expect(self, state: RunState) -> None:
        if self.state != state:
            raise RunStateError(
                f"Run {self.id} is {self.state.value}, expected {state.value}"
            )

    def get_summary(self) -> str:
        """Get a brief summary of the run."""
        if self.state == RunState.FAILED:
            where = f" at step {self.failed_step}" if self.failed_step else ""
            return f"[FAILED] {self.workflow} on {self.file_path.name}{where}: {self.failure}"
        return f"[{self.state.value.upper()}] {self.workflow} on {self.file_path.name}"

"""
Exception hierarchy for exportflow.

Configuration problems are recoverable (the catalog degrades to empty),
everything raised while running a workflow is fatal to that run only.
"""

from __future__ import annotations


class ExportFlowError(Exception):
    """Base class for all exportflow errors."""

    def __init__(self, message: str):
        """Initialize with a human-readable message."""
        super().__init__(message)
        self.message = message


class ConfigError(ExportFlowError):
    """Raised when a workflow definition file is missing or unusable."""

    def __init__(self, message: str, path: str | None = None, line: int | None = None):
        """Initialize with message and optional file location."""
        super().__init__(message)
        self.path = path
        self.line = line


class UnknownWorkflowError(ExportFlowError):
    """Raised when a workflow name is not present in the catalog."""

    def __init__(self, workflow: str):
        super().__init__(f"Unknown workflow: {workflow}")
        self.workflow = workflow


class UnknownStepError(ExportFlowError):
    """Raised when a step code has no command template and is not a built-in."""

    def __init__(self, step: str, reason: str | None = None):
        super().__init__(reason or f"Unknown workflow step: {step}")
        self.step = step


class UnknownPaperError(ExportFlowError):
    """Raised when a paper profile name is not present in the catalog."""

    def __init__(self, paper: str):
        super().__init__(f"Unknown paper: {paper}")
        self.paper = paper


class MissingParameterError(ExportFlowError):
    """Raised when a built-in step needs a value the run does not have."""

    def __init__(self, step: str, parameter: str):
        super().__init__(f"Step '{step}' requires {parameter}")
        self.step = step
        self.parameter = parameter


class StepExecutionError(ExportFlowError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, step: str, exit_code: int, command: str = "", output: str = ""):
        super().__init__(f"Step '{step}' failed with exit code {exit_code}")
        self.step = step
        self.exit_code = exit_code
        self.command = command
        self.output = output


class WorkingFileError(ExportFlowError):
    """Raised when the working file or a side-channel file cannot be read or written."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class RunStateError(ExportFlowError):
    """Raised on an illegal pipeline run state transition."""

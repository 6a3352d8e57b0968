"""exportflow tools package - External command execution."""

from exportflow.tools.runner import CommandResult, ProcessRunner, ShellRunner

__all__ = [
    "CommandResult",
    "ProcessRunner",
    "ShellRunner",
]

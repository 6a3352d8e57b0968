"""
External command execution.

Workflow steps are shell command lines (they may quote paths, redirect
output into side-channel files or chain commands), so they are handed to
the shell as a whole. Execution is blocking.
"""

from __future__ import annotations

import shutil
import subprocess
import time
from datetime import datetime
from typing import Protocol

from pydantic import BaseModel, Field

from exportflow.utils.logger import get_logger

logger = get_logger(__name__)

EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127


class CommandResult(BaseModel):
    """Result from an external command."""

    command: str = Field(description="Full command executed")
    exit_code: int = Field(default=0, description="Process exit code")
    output: str = Field(default="", description="Raw stdout output")
    error_output: str = Field(default="", description="Raw stderr output")
    duration: float = Field(default=0.0, description="Execution duration in seconds")
    timestamp: datetime = Field(default_factory=datetime.now)
    timed_out: bool = Field(default=False, description="Whether execution timed out")

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(Protocol):
    """Anything that can run a command line and report its exit status."""

    def run(self, command: str) -> CommandResult:
        ...


class ShellRunner:
    """
    Runs command lines through the system shell.

    Example:
        >>> runner = ShellRunner()
        >>> result = runner.run("exiftool -ver")
        >>> result.exit_code
        0
    """

    def __init__(self, shell: str | None = None, timeout: int | None = None):
        """
        Initialize the runner.

        Args:
            shell: Shell executable (None = system default)
            timeout: Timeout in seconds (None = wait until the command exits)
        """
        self.shell = shell
        self.timeout = timeout

    def run(self, command: str) -> CommandResult:
        """
        Run a command and wait for it to finish.

        Args:
            command: Shell command line

        Returns:
            CommandResult with exit code and captured output
        """
        logger.debug(f"Running: {command}")
        start_time = time.time()

        try:
            proc = subprocess.run(
                command,
                shell=True,
                executable=self.shell,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                command=command,
                exit_code=EXIT_TIMEOUT,
                output=_decode(e.stdout),
                error_output=f"Execution timed out after {self.timeout} seconds",
                duration=time.time() - start_time,
                timed_out=True,
            )
        except FileNotFoundError:
            return CommandResult(
                command=command,
                exit_code=EXIT_NOT_FOUND,
                error_output=f"Shell '{self.shell}' not found",
                duration=time.time() - start_time,
            )

        return CommandResult(
            command=command,
            exit_code=proc.returncode,
            output=proc.stdout or "",
            error_output=proc.stderr or "",
            duration=time.time() - start_time,
        )


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def is_available(binary: str) -> bool:
    """Check if a binary is available in PATH."""
    return shutil.which(binary) is not None


def command_binary(command: str) -> str:
    """Get the program name of a command line (first token, quotes removed)."""
    command = command.strip()
    if not command:
        return ""
    if command[0] in "'\"":
        end = command.find(command[0], 1)
        if end > 0:
            return command[1:end]
    return command.split()[0]

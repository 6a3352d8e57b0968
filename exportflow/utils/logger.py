"""
Structured logging for exportflow.

Provides a consistent logging interface with support for:
- Multiple log levels
- Structured JSON logging
- Console and file output
- Rich formatting for console
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(str, Enum):
    """Log levels for exportflow."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        """Get numeric log level."""
        levels = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        return levels.get(self.value, logging.INFO)


# Global logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str = "exportflow") -> logging.Logger:
    """
    Get a logger instance.

    Loggers below ``exportflow`` propagate to the root ``exportflow``
    logger configured by ``setup_logging``.

    Args:
        name: Logger name (usually module name)

    Returns:
        Logger instance
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    _loggers[name] = logger
    return logger


def _rich_handler(level: int) -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_file: str | Path | None = None,
    json_format: bool = False,
    console: bool = True,
) -> None:
    """
    Set up logging configuration for exportflow.

    Args:
        level: Minimum log level
        log_file: Optional file path for log output
        json_format: Use JSON format for file logs
        console: Enable console output
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    root = logging.getLogger("exportflow")
    root.setLevel(level.numeric)

    # Clear existing handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if console:
        root.addHandler(_rich_handler(level.numeric))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        if json_format:
            file_handler.setFormatter(JsonFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
            ))

        file_handler.setLevel(level.numeric)
        root.addHandler(file_handler)


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("run_id", "step", "exit_code"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def log_step_execution(
    logger: logging.Logger,
    step: str,
    filename: str,
    exit_code: int,
    duration: float,
    run_id: str | None = None,
) -> None:
    """
    Log a workflow step execution with structured data.

    Args:
        logger: Logger to use
        step: Step code
        filename: Name of the working file
        exit_code: Exit status of the external command
        duration: Duration in seconds
        run_id: Pipeline run ID
    """
    extra = {"run_id": run_id, "step": step, "exit_code": exit_code}
    if exit_code == 0:
        logger.info(
            f"[magenta]{step}[/] on [cyan]{filename}[/] completed in {duration:.1f}s",
            extra=extra,
        )
    else:
        logger.error(
            f"[magenta]{step}[/] on [cyan]{filename}[/] failed with exit code {exit_code}",
            extra=extra,
        )

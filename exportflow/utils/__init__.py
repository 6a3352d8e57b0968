"""
Utility modules for exportflow.

This package provides common utilities:
- logger: Structured logging
- helpers: Helper functions
"""

from exportflow.utils.logger import (
    get_logger,
    setup_logging,
    LogLevel,
)
from exportflow.utils.helpers import (
    count_placeholders,
    create_unique_filename,
    format_duration,
    format_template,
    round_half_up,
    sanitize_filename,
    split_codes,
)

__all__ = [
    # Logger
    "get_logger",
    "setup_logging",
    "LogLevel",
    # Helpers
    "count_placeholders",
    "create_unique_filename",
    "format_duration",
    "format_template",
    "round_half_up",
    "sanitize_filename",
    "split_codes",
]

"""
CLI UI components for exportflow.

This module provides rich terminal UI components:
- Styled console output
- Catalog tables and run panels
"""

from exportflow.cli.ui.console import (
    console,
    err_console,
    print_error,
    print_warning,
    print_success,
)
from exportflow.cli.ui.panels import (
    create_papers_table,
    create_run_panel,
    create_steps_table,
    create_workflows_table,
)

__all__ = [
    # Console
    "console",
    "err_console",
    "print_error",
    "print_warning",
    "print_success",
    # Panels
    "create_papers_table",
    "create_run_panel",
    "create_steps_table",
    "create_workflows_table",
]

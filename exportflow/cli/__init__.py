"""
CLI package for exportflow.

Provides a rich command-line interface using Typer.
"""

from exportflow.cli.app import app, main

__all__ = ["app", "main"]

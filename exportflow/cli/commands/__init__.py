"""CLI commands package."""

from exportflow.cli.commands import config, ppi, run, workflows

__all__ = ["config", "ppi", "run", "workflows"]

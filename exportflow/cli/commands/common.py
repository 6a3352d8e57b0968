"""
Shared helpers for exportflow CLI commands.
"""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from exportflow.cli.ui.console import print_error, print_warning
from exportflow.core.preferences import WORKFLOWS_FILE, PreferenceStore
from exportflow.exceptions import ConfigError
from exportflow.models.config import ExportFlowConfig
from exportflow.utils.logger import setup_logging
from exportflow.workflows.loader import CatalogStore, DefinitionLoader


# Global state for CLI options
class CLIState:
    """Global CLI state for options like quiet, debug, color."""

    quiet: bool = False
    debug: bool = False
    no_color: bool = False


cli_state = CLIState()


def load_settings(settings_file: str | None) -> ExportFlowConfig:
    """Load settings and configure logging from them."""
    try:
        settings = ExportFlowConfig.load(settings_file)
    except (ValidationError, yaml.YAMLError, OSError) as e:
        print_error(f"Error loading settings: {e}")
        raise typer.Exit(1)

    setup_logging(
        level="DEBUG" if cli_state.debug else settings.logging.level,
        log_file=settings.logging.file,
        json_format=settings.logging.json_format,
    )
    return settings


def open_preferences(settings: ExportFlowConfig) -> PreferenceStore | None:
    """Open the preference database; a broken data directory only disables persistence."""
    try:
        return PreferenceStore(settings.output.get_data_dir())
    except OSError as e:
        print_warning(f"Preferences unavailable: {e}")
        return None


def resolve_definitions(
    definitions: str | None,
    settings: ExportFlowConfig,
    preferences: PreferenceStore | None,
) -> str:
    """
    Pick the definition file: explicit option, settings, then the last one used.
    """
    path = definitions or settings.workflow.definitions_file
    if not path and preferences is not None:
        path = preferences.get_str(WORKFLOWS_FILE)
    if not path:
        print_error("No workflow definition file given. Use --config.")
        raise typer.Exit(1)
    return path


def load_catalog(
    definitions: str | None,
    settings: ExportFlowConfig,
    preferences: PreferenceStore | None,
) -> CatalogStore:
    """
    Load the definition file into a catalog store and remember it.

    Raises:
        typer.Exit: If the definition file cannot be loaded
    """
    path = resolve_definitions(definitions, settings, preferences)
    store = CatalogStore(DefinitionLoader(settings.workflow.max_workflows), preferences)
    try:
        store.reload(path)
    except ConfigError as e:
        print_error(e.message)
        raise typer.Exit(1)

    if preferences is not None:
        preferences.set_str(WORKFLOWS_FILE, str(Path(path).expanduser().resolve()))
    return store

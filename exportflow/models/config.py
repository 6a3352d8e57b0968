"""
Configuration models for exportflow.

Supports configuration via YAML file, environment variables, or programmatic setup.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowConfig(BaseModel):
    """Workflow definition and step parameter configuration."""

    definitions_file: str | None = Field(
        default=None,
        description="Workflow definition file ([steps], [workflows], [papers])"
    )
    max_workflows: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum number of workflows read from a definition file"
    )
    grain_strength: int = Field(
        default=25,
        ge=0,
        le=100,
        description="Grain strength passed to the GR step"
    )
    temp_dir: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory for temporary step output"
    )


class RunnerConfig(BaseModel):
    """External process configuration."""

    shell: str | None = Field(
        default=None,
        description="Shell executable used to run step commands (None = system default)"
    )
    timeout: int | None = Field(
        default=None,
        ge=1,
        description="Step timeout in seconds (None = wait forever)"
    )


class OutputConfig(BaseModel):
    """Output and persistence configuration."""

    output_folder: str | None = Field(
        default=None,
        description="Folder receiving results of workflows without collection import"
    )
    data_dir: str = Field(
        default="~/.exportflow",
        description="Directory for the preference database"
    )

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if necessary."""
        path = Path(self.data_dir).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    file: str | None = Field(
        default=None,
        description="Log file path (None = console only)"
    )
    json_format: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )


class ExportFlowConfig(BaseSettings):
    """
    Main exportflow configuration.

    Configuration can be loaded from:
    1. YAML file (exportflow.yaml)
    2. Environment variables (EXPORTFLOW_* prefix)
    3. Programmatic setup
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPORTFLOW_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "ExportFlowConfig":
        """
        Load configuration from file and environment.

        Priority (highest to lowest):
        1. Specified config file, or the first default config file found
           (exportflow.yaml, exportflow.yml)
        2. Environment variables
        3. Default values
        """
        config_data: dict = {}

        if config_path:
            config_file = Path(config_path)
            if config_file.exists():
                config_data = cls._load_yaml(config_file)
        else:
            for filename in ["exportflow.yaml", "exportflow.yml"]:
                config_file = Path(filename)
                if config_file.exists():
                    config_data = cls._load_yaml(config_file)
                    break

        return cls(**config_data)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        """Load YAML configuration file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if data else {}

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

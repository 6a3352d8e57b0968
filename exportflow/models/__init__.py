"""exportflow models package."""

from exportflow.models.catalog import (
    BuiltinKind,
    PaperProfile,
    StepKind,
    StepTemplate,
    WorkflowCatalog,
    WorkflowDefinition,
)
from exportflow.models.config import (
    ExportFlowConfig,
    LoggingConfig,
    OutputConfig,
    RunnerConfig,
    WorkflowConfig,
)
from exportflow.models.run import PipelineRun, RunState, StepResult

__all__ = [
    # Catalog
    "BuiltinKind",
    "PaperProfile",
    "StepKind",
    "StepTemplate",
    "WorkflowCatalog",
    "WorkflowDefinition",
    # Config
    "ExportFlowConfig",
    "LoggingConfig",
    "OutputConfig",
    "RunnerConfig",
    "WorkflowConfig",
    # Run
    "PipelineRun",
    "RunState",
    "StepResult",
]

"""
Workflow system for exportflow.

Provides:
- Definition file loading ([steps], [workflows], [papers])
- Catalog ownership and reload
- Workflow execution engine
"""

from exportflow.workflows.loader import CatalogStore, DefinitionLoader
from exportflow.workflows.executor import WorkflowExecutor

__all__ = [
    "CatalogStore",
    "DefinitionLoader",
    "WorkflowExecutor",
]

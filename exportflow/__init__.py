"""
exportflow - Configurable external-tool export workflows

Runs named sequences of command-line tools (image converters, editors,
EXIF copiers) against exported photos, computes print resolution for a
paper size, and hands the result back to the photo library.
"""

__version__ = "0.1.0"
__author__ = "exportflow Team"
__license__ = "MIT"

from exportflow.models.config import ExportFlowConfig

__all__ = [
    "__version__",
    "ExportFlowConfig",
]

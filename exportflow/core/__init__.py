"""
Core package.

This package contains the components around a workflow run: persisted
preferences, print sizing and delivery of the finished file.
"""

from exportflow.core.delivery import ExportDelivery, HostLibrary, ImageHandle
from exportflow.core.preferences import PreferenceStore, SelectionState, clamp_choice
from exportflow.core.sizing import compute_ppi, parse_dimensions, print_size_mm

__all__ = [
    "ExportDelivery",
    "HostLibrary",
    "ImageHandle",
    "PreferenceStore",
    "SelectionState",
    "clamp_choice",
    "compute_ppi",
    "parse_dimensions",
    "print_size_mm",
]

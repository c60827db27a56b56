"""Collatz predecessor tree: construction, metrics, angular layout and rendering."""

from .config import AngularConfig, SelectionPolicy
from .errors import (CollatzTreeError, ConfigurationError, RenderError,
                     StructuralInvariantViolation, TreeFormatError)
from .layout import AngularLayoutEngine, LayoutNode
from .metrics import TreeMetrics, calculate_metrics
from .render import PngRenderer
from .selection import PathSelector, select_paths
from .styling import VisualProperties, VisualPropertyMapper
from .tree import CollatzNode, CollatzTreeBuilder, collatz_next, predecessors, trajectory

__version__ = "0.1.0"

__all__ = [
    "AngularConfig", "SelectionPolicy",
    "CollatzTreeError", "ConfigurationError", "RenderError",
    "StructuralInvariantViolation", "TreeFormatError",
    "AngularLayoutEngine", "LayoutNode",
    "TreeMetrics", "calculate_metrics",
    "PngRenderer",
    "PathSelector", "select_paths",
    "VisualProperties", "VisualPropertyMapper",
    "CollatzNode", "CollatzTreeBuilder", "collatz_next", "predecessors", "trajectory",
]

"""Brewco runtime package."""
from .interpreter import ExecutionError, ExecutionResult, Runtime
from .spills import CircularImportError, Spill, SpillKind

__all__ = ["Runtime", "ExecutionResult", "ExecutionError",
           "Spill", "SpillKind", "CircularImportError"]

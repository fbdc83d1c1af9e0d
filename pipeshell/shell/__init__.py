"""Pipeline execution engine."""

from .common import ExitRequest, PipelineResult, ShellState
from .core import Shell
from .pipeline import PipelineOrchestrator
from .runner import StageRunner

__all__ = [
    "ExitRequest",
    "PipelineOrchestrator",
    "PipelineResult",
    "Shell",
    "ShellState",
    "StageRunner",
]

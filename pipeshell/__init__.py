"""pipeshell package: an interactive shell with pipelines and redirection."""

from .exceptions import InvalidCommand, RedirectError, ShellError
from .history import History
from .path_lookup import ExecutableIndex
from .shell import ExitRequest, PipelineResult, Shell
from .shell_parser import Command, Pipeline, Redirect, parse_pipeline, tokenize

__version__ = "0.1.0"

__all__ = [
    "Command",
    "ExecutableIndex",
    "ExitRequest",
    "History",
    "InvalidCommand",
    "Pipeline",
    "PipelineResult",
    "Redirect",
    "RedirectError",
    "Shell",
    "ShellError",
    "parse_pipeline",
    "tokenize",
]

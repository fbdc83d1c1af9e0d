"""Core Shell implementation."""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

from .. import config
from ..exceptions import InvalidCommand
from ..history import History
from ..path_lookup import ExecutableIndex
from ..shell_parser import parse_pipeline
from .common import PipelineResult, ShellState
from .pipeline import PipelineOrchestrator
from .registry import COMMAND_REGISTRY, CommandRegistry
from .streams import TerminalStreams

logger = logging.getLogger(__name__)

SYNTAX_ERROR = 2


class Shell:
    """Parses input lines and runs them as pipelines of builtins and programs."""

    def __init__(
        self,
        *,
        cwd: str | None = None,
        home: str | None = None,
        executables: ExecutableIndex | None = None,
        history: History | None = None,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
        registry: CommandRegistry | None = None,
    ) -> None:
        self.state = ShellState(
            cwd=os.path.abspath(cwd or os.getcwd()),
            home=home or config.HOME,
            history=history if history is not None else History(),
            executables=executables if executables is not None else ExecutableIndex.scan(config.SEARCH_PATH),
        )
        terminal = TerminalStreams()
        if stdout is not None:
            terminal.stdout = stdout
        if stderr is not None:
            terminal.stderr = stderr
        self.terminal = terminal
        self.registry = registry if registry is not None else self._builtin_registry()

    @staticmethod
    def _builtin_registry() -> CommandRegistry:
        # Import builtin modules for their side effects (registration)
        from . import commands  # noqa: F401

        return COMMAND_REGISTRY

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def cwd(self) -> str:
        return self.state.cwd

    @property
    def history(self) -> History:
        return self.state.history

    def available_commands(self) -> list[str]:
        return self.registry.names()

    def completion_names(self) -> set[str]:
        return set(self.available_commands()) | self.state.executables.names()

    # ------------------------------------------------------------------
    # History persistence
    # ------------------------------------------------------------------
    def load_history(self, path: str) -> None:
        with self.state.lock:
            try:
                self.state.history.load(path)
            except OSError as exc:
                logger.warning("could not load history from %s: %s", path, exc)

    def flush_history(self, path: str) -> None:
        with self.state.lock:
            try:
                written = self.state.history.append_new(path)
            except OSError as exc:
                logger.warning("could not write history to %s: %s", path, exc)
            else:
                logger.debug("appended %d history entries to %s", written, path)

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------
    def execute(self, line: str) -> PipelineResult:
        if not line.strip():
            return PipelineResult()
        with self.state.lock:
            self.state.history.append(line)
        try:
            pipeline = parse_pipeline(line)
        except InvalidCommand as exc:
            self._report(f"pipeshell: {exc}")
            return PipelineResult([SYNTAX_ERROR])
        if not pipeline.commands:
            return PipelineResult()
        orchestrator = PipelineOrchestrator(self.state, self.terminal, self.registry)
        return orchestrator.run(pipeline.commands)

    def _report(self, message: str) -> None:
        self.terminal.stderr.write(f"{message}\n".encode())
        self.terminal.stderr.flush()


__all__ = ["SYNTAX_ERROR", "Shell"]

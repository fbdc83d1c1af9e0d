"""Wire stage runners together and reap them."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..shell_parser import Command
from .common import ExitRequest, PipelineResult, ShellState, StageStatus
from .registry import COMMAND_REGISTRY, CommandRegistry
from .runner import StageRunner
from .streams import PipeEnd, TerminalStreams, make_pipe

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs an ordered list of commands as one pipeline."""

    def __init__(
        self,
        state: ShellState,
        terminal: TerminalStreams,
        registry: CommandRegistry = COMMAND_REGISTRY,
    ) -> None:
        self.state = state
        self.terminal = terminal
        self.registry = registry

    def build(self, commands: Sequence[Command]) -> list[StageRunner]:
        """Create one runner per command, piping neighbors without explicit redirects."""
        runners: list[StageRunner] = []
        upstream: PipeEnd | None = None
        for index, command in enumerate(commands):
            downstream: PipeEnd | None = None
            next_upstream: PipeEnd | None = None
            if index + 1 < len(commands):
                following = commands[index + 1]
                if command.output_redirect is None and following.input_redirect is None:
                    reader, writer = make_pipe()
                    downstream, next_upstream = PipeEnd(writer), PipeEnd(reader)
                    logger.debug("piping %s -> %s", command.name, following.name)
            runners.append(
                StageRunner(
                    command,
                    self.state,
                    self.terminal,
                    self.registry,
                    upstream=upstream,
                    downstream=downstream,
                )
            )
            upstream = next_upstream
        return runners

    def run(self, commands: Sequence[Command]) -> PipelineResult:
        """Start stages left to right, then reap them right to left.

        A terminating builtin (``exit``) stops later stages from starting and
        terminates the children upstream of it. On ``KeyboardInterrupt`` every
        started child is terminated and reaped before the interrupt propagates.
        """
        runners = self.build(commands)
        started: list[StageRunner] = []
        try:
            for runner in runners:
                started.append(runner)
                runner.start()
                if runner.terminates:
                    break
            return PipelineResult(self._reap(started))
        except KeyboardInterrupt:
            logger.debug("interrupted, stopping %d stages", len(started))
            for runner in started:
                runner.terminate()
            self._reap(started)
            raise
        finally:
            for runner in runners[len(started) :]:
                runner.close()

    @staticmethod
    def _reap(started: Sequence[StageRunner]) -> list[StageStatus]:
        """Wait on every started stage, last stage first."""
        statuses: list[StageStatus] = [0] * len(started)
        for index in reversed(range(len(started))):
            statuses[index] = started[index].wait()
            if isinstance(statuses[index], ExitRequest):
                for upstream in started[:index]:
                    upstream.terminate()
        return statuses


def run_pipeline(
    commands: Sequence[Command],
    state: ShellState,
    terminal: TerminalStreams,
    registry: CommandRegistry = COMMAND_REGISTRY,
) -> PipelineResult:
    return PipelineOrchestrator(state, terminal, registry).run(commands)


__all__ = ["PipelineOrchestrator", "run_pipeline"]

"""Run one pipeline stage: a builtin on a thread or an external child process."""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import BinaryIO

from ..exceptions import RedirectError
from ..shell_parser import Command
from .common import BuiltinContext, ExitRequest, ShellState, StageStatus
from .registry import BuiltinSpec, CommandRegistry
from .streams import (
    Endpoint,
    FileTarget,
    Inherit,
    PipeEnd,
    StreamSpec,
    TerminalStreams,
    forward,
    open_input,
    open_output,
)

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127
CANNOT_EXECUTE = 126


class StageRunner:
    """Owns one stage's three stream endpoints and supervises its execution.

    Stream specs are fixed at construction: an explicit redirect on the
    command always beats the pipe handed in by the orchestrator.
    """

    def __init__(
        self,
        command: Command,
        state: ShellState,
        terminal: TerminalStreams,
        registry: CommandRegistry,
        *,
        upstream: PipeEnd | None = None,
        downstream: PipeEnd | None = None,
    ) -> None:
        self.command = command
        self.state = state
        self.terminal = terminal
        self.registry = registry
        self.is_builtin = registry.is_builtin(command.name)
        self.builtin: BuiltinSpec | None = registry.lookup(command.name) if self.is_builtin else None

        self.stdin_spec: StreamSpec = (
            FileTarget(command.input_redirect)
            if command.input_redirect is not None
            else upstream or Inherit()
        )
        self.stdout_spec: StreamSpec = (
            FileTarget(command.output_redirect.path, command.output_redirect.append)
            if command.output_redirect is not None
            else downstream or Inherit()
        )
        self.stderr_spec: StreamSpec = (
            FileTarget(command.error_redirect.path, command.error_redirect.append)
            if command.error_redirect is not None
            else Inherit()
        )

        self._stdin = Endpoint(None)
        self._stdout = Endpoint(terminal.stdout)
        self._stderr = Endpoint(terminal.stderr)
        self._process: subprocess.Popen[bytes] | None = None
        self._threads: list[threading.Thread] = []
        self._status: StageStatus | None = None
        self._started = False

    def __repr__(self) -> str:
        return f"StageRunner({list(self.command.arguments)!r})"

    @property
    def terminates(self) -> bool:
        return self.builtin is not None and self.builtin.terminates

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._started:
            raise RuntimeError(f"{self!r} already started")
        self._started = True
        try:
            self._open_endpoints()
        except RedirectError as exc:
            self._fail(f"pipeshell: {exc}", 1)
            return
        if self.is_builtin:
            self._start_builtin()
        else:
            self._start_external()

    def wait(self) -> StageStatus:
        """Block until the stage finishes, then release every stream it owns."""
        if self._process is not None:
            returncode = self._process.wait()
            # killed by signal N -> 128 + N
            self._status = returncode if returncode >= 0 else 128 - returncode
        for thread in self._threads:
            thread.join()
        self.close()
        if self._status is None:
            return 0
        return self._status

    def terminate(self) -> None:
        """Ask a still-running child to stop; builtins finish on their own."""
        if self._process is None or self._process.poll() is not None:
            return
        logger.debug("terminating %r", self)
        try:
            self._process.terminate()
        except ProcessLookupError:
            pass

    def close(self) -> None:
        for endpoint in (self._stdin, self._stdout, self._stderr):
            endpoint.close()
        # pipe ends handed to a stage that never opened them
        for spec in (self.stdin_spec, self.stdout_spec):
            if isinstance(spec, PipeEnd) and not spec.handle.closed:
                spec.handle.close()

    # ------------------------------------------------------------------
    # Stream setup
    # ------------------------------------------------------------------
    def _open_endpoints(self) -> None:
        cwd = self._cwd()
        self._stderr = open_output(self.stderr_spec, self.terminal.stderr, cwd)
        self._stdout = open_output(self.stdout_spec, self.terminal.stdout, cwd)
        self._stdin = open_input(self.stdin_spec, cwd)

    def _cwd(self) -> str:
        with self.state.lock:
            return self.state.cwd

    def _fail(self, message: str, status: int) -> None:
        """Report a stage that cannot run and release its streams immediately."""
        self._write_error(message)
        self._status = status
        self.close()

    def _write_error(self, message: str) -> None:
        stream: BinaryIO | None = self._stderr.handle
        if stream is None or stream.closed:
            stream = self.terminal.stderr
        try:
            stream.write(f"{message}\n".encode())
            stream.flush()
        except (OSError, ValueError) as exc:
            logger.warning("could not report %r: %s", message, exc)

    # ------------------------------------------------------------------
    # Builtins
    # ------------------------------------------------------------------
    def _start_builtin(self) -> None:
        # builtins never read their input; closing it lets upstream see EPIPE
        self._stdin.close()
        thread = threading.Thread(
            target=self._run_builtin,
            name=f"builtin-{self.command.name}",
            daemon=True,
        )
        self._threads.append(thread)
        thread.start()

    def _run_builtin(self) -> None:
        name = self.command.name
        try:
            if self.builtin is None:
                self._write_error(f"{name}: no handler for builtin")
                self._status = 1
                return
            context = BuiltinContext(
                state=self.state,
                stdout=self._stdout.handle,
                stderr=self._stderr.handle,
                registry=self.registry,
            )
            result = self.builtin.handler(context, list(self.command.args))
            if isinstance(result, ExitRequest):
                self._status = result
            else:
                self._status = 0 if result is None else result
        except BrokenPipeError:
            logger.debug("%s: output closed by reader", name)
            self._status = 1
        except Exception as exc:  # unexpected failure path
            logger.debug("builtin %s failed", name, exc_info=True)
            self._write_error(f"{name}: {exc}")
            self._status = 1
        finally:
            # downstream sees EOF as soon as the builtin is done writing
            self._stdout.close()

    # ------------------------------------------------------------------
    # External programs
    # ------------------------------------------------------------------
    def _start_external(self) -> None:
        name = self.command.name
        executable = self.state.executables.resolve(name)
        if executable is None:
            self._fail(f"{name}: command not found", COMMAND_NOT_FOUND)
            return
        cwd = self._cwd()
        logger.debug("spawning %s (%s) in %s", list(self.command.arguments), executable, cwd)
        try:
            process = subprocess.Popen(
                list(self.command.arguments),
                executable=executable,
                cwd=cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
            )
        except (OSError, ValueError) as exc:
            self._fail(f"{name}: {getattr(exc, 'strerror', None) or exc}", CANNOT_EXECUTE)
            return
        self._process = process

        if self._stdin.handle is not None:
            self._spawn_forwarder(
                self._stdin.handle,
                process.stdin,
                close_source=self._stdin.owned,
                close_sink=True,
                label=f"{name}:stdin",
            )
        else:
            # no input source: the child sees EOF right away
            process.stdin.close()
        self._spawn_forwarder(
            process.stdout,
            self._stdout.handle,
            close_source=True,
            close_sink=self._stdout.owned,
            label=f"{name}:stdout",
        )
        self._spawn_forwarder(
            process.stderr,
            self._stderr.handle,
            close_source=True,
            close_sink=self._stderr.owned,
            label=f"{name}:stderr",
        )

    def _spawn_forwarder(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        *,
        close_source: bool,
        close_sink: bool,
        label: str,
    ) -> None:
        thread = threading.Thread(
            target=forward,
            args=(source, sink),
            kwargs={"close_source": close_source, "close_sink": close_sink, "label": label},
            name=f"forward-{label}",
            daemon=True,
        )
        self._threads.append(thread)
        thread.start()


__all__ = ["CANNOT_EXECUTE", "COMMAND_NOT_FOUND", "StageRunner"]

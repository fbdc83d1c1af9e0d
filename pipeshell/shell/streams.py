"""Stream endpoints for pipeline stages and the tasks that shuttle bytes between them."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Union

from .. import config
from ..exceptions import RedirectError
from ..path_utils import absolute_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Inherit:
    """Use the shell's own terminal stream."""


@dataclass(frozen=True, slots=True)
class FileTarget:
    path: str
    append: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class PipeEnd:
    """One end of an OS pipe shared with the neighboring stage."""

    handle: BinaryIO


StreamSpec = Union[Inherit, FileTarget, PipeEnd]


@dataclass(slots=True)
class TerminalStreams:
    """Binary streams standing in for the controlling terminal."""

    stdout: BinaryIO = field(default_factory=lambda: sys.stdout.buffer)
    stderr: BinaryIO = field(default_factory=lambda: sys.stderr.buffer)


@dataclass(slots=True)
class Endpoint:
    """An opened stream plus whether the stage is responsible for closing it."""

    handle: BinaryIO | None
    owned: bool = False

    def close(self) -> None:
        if self.owned and self.handle is not None and not self.handle.closed:
            try:
                self.handle.close()
            except OSError as exc:
                logger.debug("error closing stream: %s", exc)


def make_pipe() -> tuple[BinaryIO, BinaryIO]:
    """Return unbuffered ``(reader, writer)`` file objects for a new OS pipe."""
    read_fd, write_fd = os.pipe()
    return os.fdopen(read_fd, "rb", buffering=0), os.fdopen(write_fd, "wb", buffering=0)


def open_input(spec: StreamSpec, cwd: str) -> Endpoint:
    """Inherited input yields no handle: stages never read the shell's stdin."""
    if isinstance(spec, PipeEnd):
        return Endpoint(spec.handle, owned=True)
    if isinstance(spec, FileTarget):
        return Endpoint(_open_file(spec.path, "rb", cwd), owned=True)
    return Endpoint(None)


def open_output(spec: StreamSpec, terminal: BinaryIO, cwd: str) -> Endpoint:
    if isinstance(spec, PipeEnd):
        return Endpoint(spec.handle, owned=True)
    if isinstance(spec, FileTarget):
        return Endpoint(_open_file(spec.path, "ab" if spec.append else "wb", cwd), owned=True)
    return Endpoint(terminal)


def _open_file(path: str, mode: str, cwd: str) -> BinaryIO:
    try:
        return open(absolute_path(path, cwd), mode)
    except (OSError, ValueError) as exc:  # ValueError: NUL byte in the path
        logger.warning("cannot open redirect target %s: %s", path, exc)
        raise RedirectError(path, exc) from exc


def _write_all(sink: BinaryIO, chunk: bytes) -> None:
    view = memoryview(chunk)
    # raw pipe writes may be partial
    while view:
        view = view[sink.write(view) :]


def forward(
    source: BinaryIO,
    sink: BinaryIO,
    *,
    close_source: bool,
    close_sink: bool,
    label: str = "stream",
) -> None:
    """Copy ``source`` into ``sink`` until end-of-stream.

    A closed peer ends the copy quietly; anything else is logged.
    """
    read = getattr(source, "read1", source.read)
    try:
        while True:
            chunk = read(config.CHUNK_SIZE)
            if not chunk:
                break
            _write_all(sink, chunk)
            sink.flush()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("%s: peer closed", label)
    except ValueError:
        # one side was closed underneath us
        logger.debug("%s: stream closed", label)
    except OSError as exc:
        logger.warning("%s: transfer failed: %s", label, exc)
    finally:
        if close_source:
            _close_quietly(source, label)
        if close_sink:
            _close_quietly(sink, label)


def _close_quietly(stream: BinaryIO, label: str) -> None:
    try:
        stream.close()
    except OSError as exc:
        logger.debug("%s: error on close: %s", label, exc)


__all__ = [
    "Endpoint",
    "FileTarget",
    "Inherit",
    "PipeEnd",
    "StreamSpec",
    "TerminalStreams",
    "forward",
    "make_pipe",
    "open_input",
    "open_output",
]

"""Command-line interface for pipeshell."""

from __future__ import annotations

import argparse
import sys

from . import config
from .completion import CommandCompleter, install
from .logger import configure_logging
from .shell import Shell

# 128 + SIGINT
INTERRUPTED = 130

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        type=str.upper,
        choices=_LOG_LEVELS,
        help="Minimum level for diagnostic logging on stderr.",
    )
    parser.add_argument(
        "--log-file",
        default=config.LOG_FILE,
        help="Also write debug logs to this rotated file.",
    )


def _run_exec(args: argparse.Namespace) -> int:
    shell = Shell()
    result = shell.execute(args.command)
    if result.exit_request is not None:
        return result.exit_request.status
    return result.exit_code


def _run_shell(args: argparse.Namespace) -> int:
    shell = Shell()
    histfile = args.histfile
    if histfile:
        shell.load_history(histfile)
    if sys.stdin.isatty():
        install(CommandCompleter(shell.completion_names()))
    status = 0
    try:
        while True:
            try:
                line = input(config.PROMPT)
                if not line.strip():
                    continue
                result = shell.execute(line)
            except KeyboardInterrupt:
                # Ctrl-C abandons the current line; the pipeline has been reaped
                sys.stdout.write("\n")
                sys.stdout.flush()
                status = INTERRUPTED
                continue
            sys.stdout.flush()
            if result.exit_request is not None:
                status = result.exit_request.status
                break
            status = result.exit_code
    except EOFError:
        sys.stdout.write("\n")
    finally:
        if histfile:
            shell.flush_history(histfile)
    return status


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="pipeshell")
    subparsers = parser.add_subparsers(dest="command_name", required=True)

    exec_parser = subparsers.add_parser("exec", help="Run a single command line")
    _add_common_flags(exec_parser)
    exec_parser.add_argument("command", help="Command line to execute")
    exec_parser.set_defaults(func=_run_exec)

    shell_parser = subparsers.add_parser("shell", help="Start an interactive shell")
    _add_common_flags(shell_parser)
    shell_parser.add_argument(
        "--histfile",
        default=config.HISTFILE,
        help="History file loaded at startup and appended to on exit (default: $HISTFILE).",
    )
    shell_parser.set_defaults(func=_run_shell)

    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    exit_code = args.func(args)
    raise SystemExit(exit_code)


__all__ = ["main"]

"""Minimal shell parser for pipelines and redirections."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .exceptions import InvalidCommand

PIPE = "|"

_WHITESPACE = frozenset(" \t\n")
_DOUBLE_QUOTE_ESCAPES = frozenset('\\$"\n')

# token -> (stream, append)
REDIRECT_OPERATORS: dict[str, tuple[str, bool]] = {
    ">": ("stdout", False),
    "1>": ("stdout", False),
    ">>": ("stdout", True),
    "1>>": ("stdout", True),
    "2>": ("stderr", False),
    "2>>": ("stderr", True),
}


@dataclass(frozen=True, slots=True)
class Redirect:
    path: str
    append: bool = False


@dataclass(frozen=True, slots=True)
class Command:
    arguments: tuple[str, ...]
    output_redirect: Redirect | None = None
    error_redirect: Redirect | None = None
    input_redirect: str | None = None

    def __post_init__(self) -> None:
        if not self.arguments:
            raise InvalidCommand("Command requires at least one argument")

    @property
    def name(self) -> str:
        return self.arguments[0]

    @property
    def args(self) -> tuple[str, ...]:
        return self.arguments[1:]


@dataclass
class Pipeline:
    commands: list[Command] = field(default_factory=list)


def tokenize(command_line: str) -> list[str]:
    """Split a raw line into tokens honoring quotes and backslash escapes.

    Unterminated quotes are closed implicitly at end of input.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_single = False
    in_double = False
    idx = 0
    length = len(command_line)
    while idx < length:
        char = command_line[idx]
        has_next = idx + 1 < length
        if char == "\\":
            if in_double and has_next:
                nxt = command_line[idx + 1]
                if nxt in _DOUBLE_QUOTE_ESCAPES:
                    current.append(nxt)
                    idx += 1
                else:
                    current.append(char)
            elif not in_single and not in_double and has_next:
                current.append(command_line[idx + 1])
                idx += 1
            else:
                current.append(char)
        elif char == "'":
            if in_double:
                current.append(char)
            else:
                in_single = not in_single
        elif char == '"':
            if in_single:
                current.append(char)
            else:
                in_double = not in_double
        elif char in _WHITESPACE and not (in_single or in_double):
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)
        idx += 1
    if current:
        tokens.append("".join(current))
    return tokens


def group_pipeline(tokens: Sequence[str]) -> list[list[str]]:
    """Split tokens on standalone ``|`` into one group per stage."""
    if not tokens:
        return []
    groups: list[list[str]] = [[]]
    for token in tokens:
        if token == PIPE:
            groups.append([])
        else:
            groups[-1].append(token)
    return groups


def build_command(tokens: Sequence[str]) -> Command:
    """Build a Command from one stage's tokens, pulling out redirect operators.

    The final token is always an argument, so an operator needs a target after
    it to count. When a redirect kind repeats, the last one wins.
    """
    arguments: list[str] = []
    redirects: dict[str, Redirect] = {}
    last = len(tokens) - 1
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        operator = REDIRECT_OPERATORS.get(token) if idx < last else None
        if operator is None:
            arguments.append(token)
            idx += 1
            continue
        stream, append = operator
        redirects[stream] = Redirect(tokens[idx + 1], append=append)
        idx += 2
    if not arguments:
        raise InvalidCommand("Missing command before redirection")
    return Command(
        arguments=tuple(arguments),
        output_redirect=redirects.get("stdout"),
        error_redirect=redirects.get("stderr"),
    )


def parse_pipeline(command_line: str) -> Pipeline:
    groups = group_pipeline(tokenize(command_line))
    if any(not group for group in groups):
        raise InvalidCommand(f"syntax error near unexpected token '{PIPE}'")
    return Pipeline(commands=[build_command(group) for group in groups])


__all__ = [
    "Command",
    "Pipeline",
    "Redirect",
    "REDIRECT_OPERATORS",
    "build_command",
    "group_pipeline",
    "parse_pipeline",
    "tokenize",
]

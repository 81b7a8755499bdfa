from __future__ import annotations

import re
import shlex

ASSIGNMENT_RE = re.compile(r"^[A-Z_]+=")
_WORD_RE = re.compile(r"\S+")


def is_assignment(token: str) -> bool:
    return ASSIGNMENT_RE.match(token) is not None


def _shell_split(command: str) -> list[str]:
    lexer = shlex.shlex(command, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    return list(lexer)


def split_command(command: str) -> list[str]:
    """Shell-style split that never fails.

    An unterminated quote runs to the end of the line and a trailing lone
    backslash is kept literally.
    """

    try:
        return _shell_split(command)
    except ValueError:
        pass
    for closer in ("\\", '"', "'", '\\"'):
        try:
            return _shell_split(command + closer)
        except ValueError:
            continue
    return command.split()


def parse_command(command: str) -> tuple[list[str], list[str]]:
    """Split an invocation command line into leading `KEY=VALUE` env and args.

    Quoting follows POSIX shell rules. Assignments are only recognised as a
    leading run: `run FOO=1` has no env.
    """

    tokens = split_command(command)
    env: list[str] = []
    for index, token in enumerate(tokens):
        if is_assignment(token):
            env.append(token)
            continue
        return env, tokens[index:]
    return env, []


def parse_input(line: str) -> tuple[list[str], str]:
    """Split a dialog input line into leading env assignments and literal input.

    Not quote aware. The input is the original text from the first
    non-assignment word on, so spacing inside the expression is preserved.
    """

    env: list[str] = []
    for match in _WORD_RE.finditer(line):
        word = match.group(0)
        if not is_assignment(word):
            return env, line[match.start() :]
        env.append(word)
    return env, ""


def env_to_mapping(*layers: list[str]) -> dict[str, str]:
    """Resolve ordered `KEY=VALUE` layers into a mapping, last write wins."""

    resolved: dict[str, str] = {}
    for layer in layers:
        for assignment in layer:
            key, sep, value = assignment.partition("=")
            if not sep or not key:
                continue
            resolved[key] = value
    return resolved


__all__ = [
    "ASSIGNMENT_RE",
    "env_to_mapping",
    "is_assignment",
    "parse_command",
    "parse_input",
    "split_command",
]

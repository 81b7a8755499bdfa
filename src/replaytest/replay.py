from __future__ import annotations

from typing import Callable, Protocol, TypeAlias, runtime_checkable

from .host import InvocationHost
from .transcript import Invocation, Transcript

EntryPoint: TypeAlias = Callable[[InvocationHost], "int | None"]


@runtime_checkable
class Exiter(Protocol):
    """Exception protocol for tools that report a process exit code."""

    exit_code: int


def _system_exit_code(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return int(code)
    return 1


def _exiter_code(exc: BaseException) -> int | None:
    if not isinstance(exc, Exiter):
        return None
    code = exc.exit_code
    if isinstance(code, int) and not isinstance(code, bool):
        return int(code)
    return None


def replay_invocation(transcript: Transcript, invocation: Invocation, entry_point: EntryPoint) -> int:
    """Run the tool once for `invocation` and record its exit code.

    An exception without an exit code leaves the exit code at zero. It is kept
    on `invocation.tool_error` and its message goes to the captured stderr, so
    the failure shows up as a stderr mismatch. Errors building the host are
    not caught.
    """

    host = InvocationHost(transcript, invocation)
    try:
        result = entry_point(host)
    except SystemExit as exc:
        exit_code = _system_exit_code(exc)
    except Exception as exc:
        code = _exiter_code(exc)
        if code is None:
            invocation.tool_error = exc
            host.stderr().write(f"{type(exc).__name__}: {exc}\n")
            code = 0
        exit_code = code
    else:
        exit_code = int(result) if isinstance(result, int) else 0

    invocation.actual_exit_code = exit_code
    invocation.replayed = True
    transcript.was_replayed = True
    return exit_code


def replay_transcript(transcript: Transcript, entry_point: EntryPoint) -> list[Invocation]:
    replayed: list[Invocation] = []
    for invocation in transcript.invocations():
        replay_invocation(transcript, invocation, entry_point)
        replayed.append(invocation)
    return replayed


__all__ = [
    "EntryPoint",
    "Exiter",
    "replay_invocation",
    "replay_transcript",
]

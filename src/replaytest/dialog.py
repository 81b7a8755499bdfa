from __future__ import annotations

import enum
from collections.abc import Sequence
from typing import Callable, Protocol, TypeAlias

from .transcript import DialogTurn

# complete(line, pos) -> (candidate lines, shared prefix length)
CompleteFn: TypeAlias = Callable[[str, int], tuple[list[str], int]]


class TextSink(Protocol):
    def write(self, data: str, /) -> int: ...


class DialogState(enum.Enum):
    AWAITING_TURN = "awaiting_turn"
    COMPLETION_REQUESTED = "completion_requested"
    EXHAUSTED = "exhausted"


class DialogSimulator:
    """Plays back recorded dialog turns through a readline-style contract.

    Every call echoes what a terminal would have shown into `stdout`, so the
    captured output can be compared with (or rewritten as) the transcript.
    """

    def __init__(self, turns: Sequence[DialogTurn], stdout: TextSink) -> None:
        self.turns = tuple(turns)
        self.stdout = stdout
        self.position = 0
        self.state = DialogState.AWAITING_TURN
        self._env: list[str] = []

    @property
    def env(self) -> list[str]:
        """Env assignments from every turn consumed so far, in order."""
        return list(self._env)

    @property
    def remaining(self) -> int:
        return len(self.turns) - self.position

    def readline(self, prompt: str, complete: CompleteFn | None = None) -> str:
        """Return the next recorded line, or raise `EOFError` at end of input.

        A turn whose input ends in a tab is a completion request: `complete` is
        called with the text before the tab and the candidates are echoed. The
        read itself then returns an empty line.
        """

        self.stdout.write(prompt)
        if self.position >= len(self.turns):
            self.state = DialogState.EXHAUSTED
            raise EOFError

        turn = self.turns[self.position]
        self.position += 1
        self._env.extend(turn.env)
        line = turn.input

        if turn.is_completion:
            self.state = DialogState.COMPLETION_REQUESTED
            # Echo the display form so env assignments on the turn survive a rewrite.
            self.stdout.write(turn.expression + "\n")
            partial = line[:-1]
            if complete is not None:
                candidates, _shared = complete(partial, len(partial))
                for candidate in candidates:
                    self.stdout.write(candidate + "\n")
            return ""

        self.state = DialogState.AWAITING_TURN
        self.stdout.write(turn.expression + "\n")
        if turn.is_end_of_input:
            raise EOFError
        return line


__all__ = [
    "CompleteFn",
    "DialogSimulator",
    "DialogState",
]

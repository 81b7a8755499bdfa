from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable

from .commandline import env_to_mapping
from .dialog import CompleteFn, DialogSimulator
from .transcript import TEXT_ENCODING, TEXT_ERRORS, Invocation, Transcript

DEFAULT_ENV: tuple[str, ...] = (
    "_STDIN_WIDTH=135",
    "_STDIN_HEIGHT=25",
    "_STDOUT_WIDTH=135",
    "_STDOUT_HEIGHT=25",
    "_STDOUT_ISTERMINAL=1",
    "NO_COLOR=1",
    "NO_DECODE_PROGRESS=1",
)
CONFIG_DIR = "/config"


def _parse_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


@dataclass(frozen=True, slots=True)
class TerminalMetrics:
    is_terminal: bool = False
    width: int = 0
    height: int = 0


class ReplayInput:
    """Stdin view backed by the invocation's `stdin:` block."""

    def __init__(self, data: bytes, metrics: Callable[[], TerminalMetrics]) -> None:
        self._reader = io.BytesIO(data)
        self._metrics = metrics

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def readline(self, size: int = -1) -> bytes:
        return self._reader.readline(size)

    def __iter__(self):
        return iter(self._reader)

    def is_terminal(self) -> bool:
        return self._metrics().is_terminal

    def size(self) -> tuple[int, int]:
        metrics = self._metrics()
        return metrics.width, metrics.height


class ReplayOutput:
    """Output view recording everything written as raw bytes.

    Text is encoded on the way in; nothing is decoded until the invocation
    is compared or rewritten.
    """

    def __init__(self, buffer: io.BytesIO, metrics: Callable[[], TerminalMetrics] | None = None) -> None:
        self._buffer = buffer
        self._metrics = metrics or TerminalMetrics

    def write(self, data: str | bytes) -> int:
        if isinstance(data, str):
            self._buffer.write(data.encode(TEXT_ENCODING, TEXT_ERRORS))
            return len(data)
        return self._buffer.write(bytes(data))

    def flush(self) -> None:
        return None

    def is_terminal(self) -> bool:
        return self._metrics().is_terminal

    def size(self) -> tuple[int, int]:
        metrics = self._metrics()
        return metrics.width, metrics.height


class FixtureFile(io.BytesIO):
    """Read-only in-memory file for an inline fixture."""

    def __init__(self, name: str, data: bytes) -> None:
        super().__init__(data)
        self.name = name
        self.size = len(data)

    def writable(self) -> bool:
        return False

    def write(self, data) -> int:  # noqa: ANN001
        raise io.UnsupportedOperation(f"{self.name}: fixture is read-only")


class TranscriptFS:
    """Resolves fixture names to file objects for the tool under test."""

    def __init__(self, transcript: Transcript) -> None:
        self.transcript = transcript

    def open(self, name: str) -> BinaryIO:
        fixture = self.transcript.fixture(name)
        if fixture is None:
            raise FileNotFoundError(f"{name}: file not found")
        if fixture.is_external:
            # Empty body means the fixture is a real file next to the transcript.
            return (self.transcript.base_dir / name.lstrip("/")).open("rb")
        return FixtureFile(Path(name).name, fixture.data)


class InvocationHost:
    """Everything the tool under test sees of the outside world for one invocation."""

    def __init__(self, transcript: Transcript, invocation: Invocation) -> None:
        self.transcript = transcript
        self.invocation = invocation
        self.fs = TranscriptFS(transcript)
        self._stdin = ReplayInput(
            invocation.stdin.encode(TEXT_ENCODING, TEXT_ERRORS),
            self._stdin_metrics,
        )
        self._stdout = ReplayOutput(invocation.actual_stdout, self._stdout_metrics)
        self._stderr = ReplayOutput(invocation.actual_stderr)
        # Dialog echo shares the stdout view so it interleaves with tool writes.
        self.dialog = DialogSimulator(invocation.turns, self._stdout)

    @property
    def args(self) -> list[str]:
        return list(self.invocation.args)

    def env(self) -> dict[str, str]:
        return env_to_mapping(list(DEFAULT_ENV), self.invocation.env, self.dialog.env)

    def environ(self) -> list[str]:
        return [f"{key}={value}" for key, value in sorted(self.env().items())]

    def getenv(self, name: str, default: str = "") -> str:
        return self.env().get(name, default)

    def getenv_int(self, name: str) -> int:
        return _parse_int(self.getenv(name))

    def _stdin_metrics(self) -> TerminalMetrics:
        return TerminalMetrics(
            is_terminal=self.invocation.stdin == "",
            width=self.getenv_int("_STDIN_WIDTH"),
            height=self.getenv_int("_STDIN_HEIGHT"),
        )

    def _stdout_metrics(self) -> TerminalMetrics:
        return TerminalMetrics(
            is_terminal=self.getenv_int("_STDOUT_ISTERMINAL") != 0,
            width=self.getenv_int("_STDOUT_WIDTH"),
            height=self.getenv_int("_STDOUT_HEIGHT"),
        )

    def stdin(self) -> ReplayInput:
        return self._stdin

    def stdout(self) -> ReplayOutput:
        return self._stdout

    def stderr(self) -> ReplayOutput:
        return self._stderr

    def interrupt(self) -> None:
        # No cancellation channel; the tool is expected to run to completion.
        return None

    def config_dir(self) -> str:
        return CONFIG_DIR

    def readline(self, prompt: str, complete: CompleteFn | None = None) -> str:
        return self.dialog.readline(prompt, complete)

    def history(self) -> list[str]:
        return []


__all__ = [
    "CONFIG_DIR",
    "DEFAULT_ENV",
    "FixtureFile",
    "InvocationHost",
    "ReplayInput",
    "ReplayOutput",
    "TerminalMetrics",
    "TranscriptFS",
]

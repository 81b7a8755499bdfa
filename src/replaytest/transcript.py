from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, TypeAlias

from .commandline import parse_command, parse_input
from .escape import unescape
from .sections import BOUNDARY_RE, Section, split_sections

TRANSCRIPT_SUFFIX = ".fqtest"
PROMPT_END = ">"
END_OF_INPUT = "^D"
CONTINUATION = "\\\n"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


class TranscriptParseError(ValueError):
    def __init__(self, line_number: int, message: str) -> None:
        super().__init__(f"{line_number}: {message}")
        self.line_number = int(line_number)


@dataclass(slots=True)
class Comment:
    line_number: int
    text: str
    body: str = ""


@dataclass(slots=True)
class FileFixture:
    line_number: int
    name: str
    data: bytes = b""

    @property
    def is_external(self) -> bool:
        return not self.data


@dataclass(frozen=True, slots=True)
class DialogTurn:
    """One prompt/input/output round of a simulated interactive session."""

    expression: str
    env: tuple[str, ...]
    raw_input: str
    expected_prompt: str
    expected_output: str = ""

    @property
    def input(self) -> str:
        return unescape(self.raw_input)

    @property
    def is_completion(self) -> bool:
        return self.input.endswith("\t")

    @property
    def is_end_of_input(self) -> bool:
        return self.input == END_OF_INPUT

    def expected_text(self) -> str:
        return f"{self.expected_prompt}{self.expression}\n{self.expected_output}"


@dataclass(slots=True)
class Invocation:
    line_number: int
    command: str
    env: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    stdin: str = ""
    expected_stdout: str = ""
    expected_stderr: str = ""
    expected_exit_code: int = 0
    turns: list[DialogTurn] = field(default_factory=list)
    actual_stdout: io.BytesIO = field(default_factory=io.BytesIO, repr=False)
    actual_stderr: io.BytesIO = field(default_factory=io.BytesIO, repr=False)
    actual_exit_code: int = 0
    replayed: bool = False
    # Set when the tool raised something that carries no exit code.
    tool_error: BaseException | None = field(default=None, repr=False)

    @classmethod
    def from_command(cls, line_number: int, command: str, expected_stdout: str = "") -> "Invocation":
        env, args = parse_command(command)
        return cls(
            line_number=line_number,
            command=command,
            env=env,
            args=args,
            expected_stdout=expected_stdout,
        )

    def expected_stdout_text(self) -> str:
        # Dialog expectations are stored per turn; the flat body is unused then.
        if not self.turns:
            return self.expected_stdout
        return "".join(turn.expected_text() for turn in self.turns)

    # Captured output is kept as bytes and decoded once, so a character split
    # across writes is reassembled.
    def actual_stdout_text(self) -> str:
        return self.actual_stdout.getvalue().decode(TEXT_ENCODING, TEXT_ERRORS)

    def actual_stderr_text(self) -> str:
        return self.actual_stderr.getvalue().decode(TEXT_ENCODING, TEXT_ERRORS)


Part: TypeAlias = Comment | FileFixture | Invocation


@dataclass(slots=True)
class Transcript:
    path: Path | None = None
    parts: list[Part] = field(default_factory=list)
    was_replayed: bool = False

    @property
    def base_dir(self) -> Path:
        if self.path is None:
            return Path(".")
        return self.path.parent

    def invocations(self) -> Iterator[Invocation]:
        for part in self.parts:
            if isinstance(part, Invocation):
                yield part

    def fixtures(self) -> Iterator[FileFixture]:
        for part in self.parts:
            if isinstance(part, FileFixture):
                yield part

    def fixture(self, name: str) -> FileFixture | None:
        for fixture in self.fixtures():
            if fixture.name == name:
                return fixture
        return None


def _parse_exit_code(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _parse_prompt(header: str) -> tuple[str, str]:
    index = header.rfind(PROMPT_END)
    prompt = header[:index] + PROMPT_END + " "
    expression = header[index + 1 :].strip()
    return prompt, expression


@dataclass(slots=True)
class _TranscriptBuilder:
    parts: list[Part] = field(default_factory=list)
    current: Invocation | None = None

    def flush(self) -> None:
        if self.current is not None:
            self.parts.append(self.current)
            self.current = None

    def require_current(self, section: Section) -> Invocation:
        if self.current is None:
            raise TranscriptParseError(section.line_number, f"{section.header!r} outside of an invocation")
        return self.current

    def add(self, section: Section) -> None:
        header, body = section.header, section.body

        if not header:
            if body.strip():
                raise TranscriptParseError(section.line_number, f"unexpected text {body.splitlines()[0]!r}")
            return

        if header.startswith("#"):
            self.parts.append(Comment(line_number=section.line_number, text=header[1:], body=body))
        elif header.startswith("/"):
            self.parts.append(
                FileFixture(
                    line_number=section.line_number,
                    name=header[:-1],
                    data=body.encode(TEXT_ENCODING, TEXT_ERRORS),
                )
            )
        elif header.startswith("$"):
            self.flush()
            self.current = Invocation.from_command(
                section.line_number,
                header[1:],
                expected_stdout=body.removesuffix(CONTINUATION),
            )
        elif header.startswith("exitcode:"):
            value = header[len("exitcode:") :]
            self.require_current(section).expected_exit_code = _parse_exit_code(value if value.strip() else body)
        elif header == "stdin:":
            self.require_current(section).stdin = body
        elif header == "stderr:":
            self.require_current(section).expected_stderr = body
        elif PROMPT_END in header:
            invocation = self.require_current(section)
            prompt, expression = _parse_prompt(header)
            env, raw_input = parse_input(expression)
            invocation.turns.append(
                DialogTurn(
                    expression=expression,
                    env=tuple(env),
                    raw_input=raw_input,
                    expected_prompt=prompt,
                    expected_output=body,
                )
            )
        else:
            raise TranscriptParseError(section.line_number, f"unexpected section {header!r}")

    def finish(self, path: Path | None) -> Transcript:
        self.flush()
        parts = sorted(self.parts, key=lambda part: part.line_number)
        return Transcript(path=path, parts=parts)


def parse_sections(sections: list[Section], *, path: Path | None = None) -> Transcript:
    builder = _TranscriptBuilder()
    for section in sections:
        builder.add(section)
    return builder.finish(path)


def parse_transcript(text: str, *, path: Path | None = None) -> Transcript:
    """Build a transcript model from transcript text.

    Raises `TranscriptParseError` on a section the grammar does not know.
    """

    return parse_sections(split_sections(text, BOUNDARY_RE), path=path)


def read_transcript_text(path: Path) -> str:
    return Path(path).read_bytes().decode(TEXT_ENCODING, TEXT_ERRORS)


def load_transcript(path: Path) -> Transcript:
    path = Path(path)
    return parse_transcript(read_transcript_text(path), path=path)


__all__ = [
    "CONTINUATION",
    "END_OF_INPUT",
    "PROMPT_END",
    "TEXT_ENCODING",
    "TEXT_ERRORS",
    "TRANSCRIPT_SUFFIX",
    "Comment",
    "DialogTurn",
    "FileFixture",
    "Invocation",
    "Part",
    "Transcript",
    "TranscriptParseError",
    "load_transcript",
    "parse_sections",
    "parse_transcript",
    "read_transcript_text",
]

from __future__ import annotations

import json

import msgspec

from .sections import Section
from .transcript import Comment, FileFixture, Invocation, Part, Transcript


class SectionDump(msgspec.Struct, forbid_unknown_fields=True):
    line_number: int
    header: str
    body: str


class DialogTurnDump(msgspec.Struct, forbid_unknown_fields=True):
    prompt: str
    expression: str
    env: list[str]
    input: str
    expected_output: str


class CommentDump(msgspec.Struct, tag_field="kind", tag="comment", forbid_unknown_fields=True):
    line_number: int
    text: str


class FileFixtureDump(msgspec.Struct, tag_field="kind", tag="file", forbid_unknown_fields=True):
    line_number: int
    name: str
    size: int
    external: bool


class InvocationDump(msgspec.Struct, tag_field="kind", tag="invocation", forbid_unknown_fields=True):
    line_number: int
    command: str
    env: list[str]
    args: list[str]
    stdin: str
    expected_stdout: str
    expected_stderr: str
    expected_exit_code: int
    turns: list[DialogTurnDump] = msgspec.field(default_factory=list)


PartDump = CommentDump | FileFixtureDump | InvocationDump


class TranscriptDump(msgspec.Struct, forbid_unknown_fields=True):
    path: str | None
    parts: list[PartDump] = msgspec.field(default_factory=list)


def _dump_part(part: Part) -> PartDump:
    if isinstance(part, Comment):
        return CommentDump(line_number=part.line_number, text=part.text)
    if isinstance(part, FileFixture):
        return FileFixtureDump(
            line_number=part.line_number,
            name=part.name,
            size=len(part.data),
            external=part.is_external,
        )
    if isinstance(part, Invocation):
        return InvocationDump(
            line_number=part.line_number,
            command=part.command,
            env=list(part.env),
            args=list(part.args),
            stdin=part.stdin,
            expected_stdout=part.expected_stdout,
            expected_stderr=part.expected_stderr,
            expected_exit_code=part.expected_exit_code,
            turns=[
                DialogTurnDump(
                    prompt=turn.expected_prompt,
                    expression=turn.expression,
                    env=list(turn.env),
                    input=turn.raw_input,
                    expected_output=turn.expected_output,
                )
                for turn in part.turns
            ],
        )
    raise TypeError(f"unreachable: unknown transcript part {part!r}")


def dump_transcript(transcript: Transcript) -> TranscriptDump:
    return TranscriptDump(
        path=str(transcript.path) if transcript.path is not None else None,
        parts=[_dump_part(part) for part in transcript.parts],
    )


def dump_sections(sections: list[Section]) -> list[SectionDump]:
    return [SectionDump(line_number=s.line_number, header=s.header, body=s.body) for s in sections]


def to_json(value: object) -> str:
    return json.dumps(msgspec.to_builtins(value), indent=2, sort_keys=True)


__all__ = [
    "CommentDump",
    "DialogTurnDump",
    "FileFixtureDump",
    "InvocationDump",
    "SectionDump",
    "TranscriptDump",
    "dump_sections",
    "dump_transcript",
    "to_json",
]

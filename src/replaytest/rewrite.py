from __future__ import annotations

from pathlib import Path

from .transcript import CONTINUATION, TEXT_ENCODING, TEXT_ERRORS, Comment, FileFixture, Invocation, Part, Transcript


def _render_invocation(invocation: Invocation) -> str:
    out = [f"${invocation.command}\n"]
    stdout = invocation.actual_stdout_text()
    if stdout:
        out.append(stdout)
        if not stdout.endswith("\n"):
            out.append(CONTINUATION)
    if invocation.actual_exit_code != 0:
        out.append(f"exitcode: {invocation.actual_exit_code}\n")
    if invocation.stdin:
        out.append("stdin:\n")
        out.append(invocation.stdin)
    stderr = invocation.actual_stderr_text()
    if stderr:
        out.append("stderr:\n")
        out.append(stderr)
    return "".join(out)


def render_part(part: Part) -> str:
    if isinstance(part, Comment):
        return f"#{part.text}\n{part.body}"
    if isinstance(part, FileFixture):
        return f"{part.name}:\n" + part.data.decode(TEXT_ENCODING, TEXT_ERRORS)
    if isinstance(part, Invocation):
        return _render_invocation(part)
    raise TypeError(f"unreachable: unknown transcript part {part!r}")


def render_transcript(transcript: Transcript) -> str:
    """Render a transcript with captured output in place of expectations."""

    parts = sorted(transcript.parts, key=lambda part: part.line_number)
    return "".join(render_part(part) for part in parts)


def write_transcript(transcript: Transcript, path: Path | None = None) -> bool:
    """Write the rendered transcript back to disk.

    Returns False without touching the file when nothing was replayed.
    """

    if not transcript.was_replayed:
        return False
    target = Path(path) if path is not None else transcript.path
    if target is None:
        raise ValueError("transcript has no path to write to")
    target.write_bytes(render_transcript(transcript).encode(TEXT_ENCODING, TEXT_ERRORS))
    return True


__all__ = [
    "render_part",
    "render_transcript",
    "write_transcript",
]

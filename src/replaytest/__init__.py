from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("replaytest")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .compare import FieldMismatch, InvocationResult, compare_invocation, verify_invocation
from .config import ReplayConfig
from .dialog import DialogSimulator, DialogState
from .escape import escape_bytes, unescape, unescape_bytes
from .host import InvocationHost
from .replay import EntryPoint, replay_invocation, replay_transcript
from .rewrite import render_transcript, write_transcript
from .runner import TranscriptRewriteWarning, TranscriptRunResult, run_transcript
from .sections import Section, split_sections
from .transcript import (
    Comment,
    DialogTurn,
    FileFixture,
    Invocation,
    Transcript,
    TranscriptParseError,
    load_transcript,
    parse_transcript,
)

__all__ = [
    "Comment",
    "DialogSimulator",
    "DialogState",
    "DialogTurn",
    "EntryPoint",
    "FieldMismatch",
    "FileFixture",
    "Invocation",
    "InvocationHost",
    "InvocationResult",
    "ReplayConfig",
    "Section",
    "Transcript",
    "TranscriptParseError",
    "TranscriptRewriteWarning",
    "TranscriptRunResult",
    "compare_invocation",
    "escape_bytes",
    "load_transcript",
    "parse_transcript",
    "render_transcript",
    "replay_invocation",
    "replay_transcript",
    "run_transcript",
    "split_sections",
    "unescape",
    "unescape_bytes",
    "verify_invocation",
    "write_transcript",
]

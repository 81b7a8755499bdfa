from __future__ import annotations

import warnings
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .compare import InvocationResult, verify_invocation
from .config import ReplayConfig
from .replay import EntryPoint, replay_invocation
from .rewrite import write_transcript
from .trace_log import trace_invocation, trace_log
from .transcript import Transcript, load_transcript


class TranscriptRewriteWarning(UserWarning):
    """Rewrite mode skipped a transcript."""


@dataclass(frozen=True, slots=True)
class TranscriptRunResult:
    path: Path
    results: tuple[InvocationResult, ...] = ()
    replayed_count: int = 0
    rewritten: bool = False

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failures(self) -> tuple[InvocationResult, ...]:
        return tuple(result for result in self.results if not result.ok)


def run_loaded_transcript(
    transcript: Transcript,
    entry_point: EntryPoint,
    *,
    config: ReplayConfig,
) -> TranscriptRunResult:
    """Replay every invocation in file order, then verify or rewrite.

    In rewrite mode nothing is compared; the file is regenerated from the
    captured output if at least one invocation ran.
    """

    path = transcript.path if transcript.path is not None else Path("<memory>")
    results: list[InvocationResult] = []
    replayed_count = 0

    for invocation in transcript.invocations():
        exit_code = replay_invocation(transcript, invocation, entry_point)
        replayed_count += 1
        trace_invocation("invocation_replayed", path, invocation, exit_code=exit_code)
        if invocation.tool_error is not None:
            trace_invocation("invocation_error", path, invocation, error=repr(invocation.tool_error))
        if config.write_actual:
            continue
        result = verify_invocation(invocation)
        for mismatch in result.mismatches:
            trace_invocation("invocation_mismatch", path, invocation, field=mismatch.field)
        results.append(result)

    rewritten = False
    if config.write_actual:
        if transcript.was_replayed and transcript.path is not None:
            rewritten = write_transcript(transcript)
            trace_log("transcript_rewritten", path=path)
        else:
            warnings.warn(
                f"{path}: nothing was replayed; transcript left unchanged.",
                category=TranscriptRewriteWarning,
                stacklevel=2,
            )

    return TranscriptRunResult(
        path=path,
        results=tuple(results),
        replayed_count=replayed_count,
        rewritten=rewritten,
    )


def run_transcript(path: Path, entry_point: EntryPoint, *, config: ReplayConfig) -> TranscriptRunResult:
    transcript = load_transcript(Path(path))
    trace_log(
        "transcript_parsed",
        path=path,
        parts=len(transcript.parts),
        invocations=sum(1 for _ in transcript.invocations()),
    )
    return run_loaded_transcript(transcript, entry_point, config=config)


def run_transcripts(
    paths: Iterable[Path],
    entry_point: EntryPoint,
    *,
    config: ReplayConfig,
) -> list[TranscriptRunResult]:
    return [run_transcript(Path(path), entry_point, config=config) for path in paths]


__all__ = [
    "TranscriptRewriteWarning",
    "TranscriptRunResult",
    "run_loaded_transcript",
    "run_transcript",
    "run_transcripts",
]

from __future__ import annotations

import importlib
from pathlib import Path

import typer

from .compare import FieldMismatch
from .config import ReplayConfig
from .replay import EntryPoint
from .runner import TranscriptRunResult, run_transcript
from .trace_log import close_trace_log, init_trace_log
from .transcript import TranscriptParseError

app = typer.Typer(add_completion=False)


class EntryPointError(ValueError):
    pass


def load_entry_point(spec: str) -> EntryPoint:
    """Resolve `package.module:attr` to the tool's entry point callable."""
    module_name, sep, attr_path = str(spec).partition(":")
    if not sep or not module_name or not attr_path:
        raise EntryPointError(f"entry point must look like module:attr, got {spec!r}")
    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise EntryPointError(f"cannot import {module_name!r}: {exc}") from exc
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            raise EntryPointError(f"{module_name!r} has no attribute {attr_path!r}") from exc
    if not callable(obj):
        raise EntryPointError(f"{spec!r} is not callable")
    return obj  # type: ignore[return-value]


def _format_mismatch(mismatch: FieldMismatch) -> list[str]:
    if mismatch.field == "exitcode":
        return [f"  exitcode expected={mismatch.expected} actual={mismatch.actual}"]
    return [
        f"  {mismatch.field}:",
        f"    expected={mismatch.expected!r}",
        f"    actual=  {mismatch.actual!r}",
    ]


def _report(run: TranscriptRunResult) -> None:
    if run.rewritten:
        typer.echo(f"rewrote {run.path} ({run.replayed_count} invocations)")
        return
    if run.ok:
        typer.echo(f"ok {run.path} ({run.replayed_count} invocations)")
        return
    for result in run.failures:
        typer.echo(f"FAIL {run.path}:{result.line_number}: ${result.command}", err=True)
        for mismatch in result.mismatches:
            for line in _format_mismatch(mismatch):
                typer.echo(line, err=True)


def _run(files: list[Path], tool: str, config: ReplayConfig) -> None:
    try:
        entry_point = load_entry_point(tool)
    except EntryPointError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    if config.trace_log is not None:
        init_trace_log(config.trace_log, mode="rewrite" if config.write_actual else "verify")

    failed = 0
    try:
        for path in files:
            try:
                run = run_transcript(path, entry_point, config=config)
            except TranscriptParseError as exc:
                typer.echo(f"FAIL {path}:{exc}", err=True)
                failed += 1
                continue
            _report(run)
            if not run.ok:
                failed += 1
    finally:
        close_trace_log()

    if failed:
        typer.echo(f"{failed} of {len(files)} transcripts failed", err=True)
        raise typer.Exit(code=1)


@app.command("verify")
def cmd_verify(
    files: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="transcript files (.fqtest)"),
    tool: str = typer.Option(..., "--tool", help="tool entry point as module:attr"),
    write_actual: bool = typer.Option(
        False,
        "--write-actual",
        help="rewrite transcripts from captured output instead of comparing (default: WRITE_ACTUAL env)",
    ),
    trace_log: Path | None = typer.Option(
        None,
        "--trace-log",
        help="append replay events to this file (default: REPLAYTEST_TRACE_LOG env)",
    ),
) -> None:
    """Replay transcripts and compare captured output with the expectations."""
    config = ReplayConfig.from_env().with_overrides(
        write_actual=True if write_actual else None,
        trace_log=trace_log,
    )
    _run(files, tool, config)


@app.command("rewrite")
def cmd_rewrite(
    files: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="transcript files (.fqtest)"),
    tool: str = typer.Option(..., "--tool", help="tool entry point as module:attr"),
    trace_log: Path | None = typer.Option(None, "--trace-log", help="append replay events to this file"),
) -> None:
    """Replay transcripts and write the captured output back as the new expectations."""
    config = ReplayConfig.from_env().with_overrides(write_actual=True, trace_log=trace_log)
    _run(files, tool, config)


@app.command("parse")
def cmd_parse(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="transcript file (.fqtest)"),
) -> None:
    """Print the parsed transcript model as JSON."""
    from .dump import dump_transcript, to_json
    from .transcript import load_transcript

    try:
        transcript = load_transcript(file)
    except TranscriptParseError as exc:
        typer.echo(f"{file}:{exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(to_json(dump_transcript(transcript)))


@app.command("sections")
def cmd_sections(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="transcript file (.fqtest)"),
) -> None:
    """Print the raw section split of a transcript as JSON."""
    from .dump import dump_sections, to_json
    from .sections import split_sections
    from .transcript import read_transcript_text

    typer.echo(to_json(dump_sections(split_sections(read_transcript_text(file)))))


def main(argv: list[str] | None = None) -> None:
    app(prog_name="replaytest", args=argv)


if __name__ == "__main__":
    main()

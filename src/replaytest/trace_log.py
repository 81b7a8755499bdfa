from __future__ import annotations

import datetime as dt
import os
import time
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import TextIO

from .transcript import Invocation


@dataclass(slots=True)
class _TraceSink:
    path: Path
    handle: TextIO
    started: float


_TRACE_LOCK = Lock()
_TRACE_SINK: _TraceSink | None = None


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    text = str(value)
    # Commands carry spaces and captured text carries newlines.
    if not text or any(ch.isspace() for ch in text) or "'" in text:
        return repr(text)
    return text


def _format_line(event: str, fields: dict[str, object], elapsed_ms: float) -> str:
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    words = [timestamp, f"+{elapsed_ms:.1f}ms", f"event={str(event).strip()}"]
    words.extend(f"{key}={_format_value(value)}" for key, value in fields.items())
    return " ".join(words) + "\n"


def trace_log_path() -> Path | None:
    with _TRACE_LOCK:
        return _TRACE_SINK.path if _TRACE_SINK is not None else None


def init_trace_log(path: Path, *, mode: str) -> Path:
    """Start appending replay events to `path`, replacing any open trace log."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = path.open("a", encoding="utf-8")

    global _TRACE_SINK
    with _TRACE_LOCK:
        previous = _TRACE_SINK
        _TRACE_SINK = _TraceSink(path=path, handle=handle, started=time.monotonic())
    if previous is not None:
        previous.handle.close()

    trace_log("init", mode=str(mode), pid=int(os.getpid()))
    return path


def trace_log(event: str, **fields: object) -> None:
    """Append one event line; fields keep their keyword order. No-op when closed."""

    with _TRACE_LOCK:
        sink = _TRACE_SINK
        if sink is None:
            return
        elapsed_ms = (time.monotonic() - sink.started) * 1000.0
        sink.handle.write(_format_line(event, fields, elapsed_ms))
        sink.handle.flush()


def trace_invocation(event: str, path: Path | str, invocation: Invocation, **fields: object) -> None:
    trace_log(
        event,
        path=path,
        line=invocation.line_number,
        command=invocation.command.strip(),
        **fields,
    )


def close_trace_log() -> None:
    global _TRACE_SINK
    with _TRACE_LOCK:
        sink = _TRACE_SINK
        _TRACE_SINK = None
    if sink is not None:
        sink.handle.close()


__all__ = [
    "close_trace_log",
    "init_trace_log",
    "trace_invocation",
    "trace_log",
    "trace_log_path",
]

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

WRITE_ACTUAL_ENV = "WRITE_ACTUAL"
TRACE_LOG_ENV = "REPLAYTEST_TRACE_LOG"


@dataclass(frozen=True, slots=True)
class ReplayConfig:
    write_actual: bool = False
    trace_log: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReplayConfig":
        if environ is None:
            environ = os.environ
        trace_log = str(environ.get(TRACE_LOG_ENV, "")).strip()
        return cls(
            write_actual=bool(environ.get(WRITE_ACTUAL_ENV, "")),
            trace_log=Path(trace_log) if trace_log else None,
        )

    def with_overrides(self, *, write_actual: bool | None = None, trace_log: Path | None = None) -> "ReplayConfig":
        return ReplayConfig(
            write_actual=self.write_actual if write_actual is None else bool(write_actual),
            trace_log=self.trace_log if trace_log is None else Path(trace_log),
        )


__all__ = [
    "TRACE_LOG_ENV",
    "WRITE_ACTUAL_ENV",
    "ReplayConfig",
]

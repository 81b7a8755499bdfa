from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest


def pytest_configure(config: pytest.Config) -> None:
    # Ensure the local `src/` tree wins over any other editable install that may exist
    # (e.g. a different git worktree pointing at the same project).
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


@pytest.fixture(autouse=True)
def _no_write_actual(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WRITE_ACTUAL", raising=False)
    monkeypatch.delenv("REPLAYTEST_TRACE_LOG", raising=False)


@pytest.fixture
def transcript_file(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write(text: str, name: str = "case.fqtest") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write

from __future__ import annotations

import io
from pathlib import Path

import pytest

from replaytest.host import CONFIG_DIR, FixtureFile, InvocationHost
from replaytest.transcript import parse_transcript


def _host(text: str, path: Path | None = None) -> InvocationHost:
    transcript = parse_transcript(text, path=path)
    return InvocationHost(transcript, next(transcript.invocations()))


def test_host_default_environment() -> None:
    host = _host("$ tool\n")

    assert host.environ() == [
        "NO_COLOR=1",
        "NO_DECODE_PROGRESS=1",
        "_STDIN_HEIGHT=25",
        "_STDIN_WIDTH=135",
        "_STDOUT_HEIGHT=25",
        "_STDOUT_ISTERMINAL=1",
        "_STDOUT_WIDTH=135",
    ]
    assert host.args == ["tool"]
    assert host.config_dir() == CONFIG_DIR
    assert host.interrupt() is None
    assert host.history() == []


def test_host_invocation_env_overrides_defaults() -> None:
    host = _host("$ _STDOUT_WIDTH=80 NO_COLOR= tool\n")

    assert host.getenv("_STDOUT_WIDTH") == "80"
    assert host.getenv("NO_COLOR") == ""
    assert host.stdout().size() == (80, 25)


def test_host_empty_stdin_is_terminal() -> None:
    host = _host("$ tool\n")

    assert host.stdin().is_terminal() is True
    assert host.stdin().size() == (135, 25)
    assert host.stdin().read() == b""


def test_host_stdin_block_is_piped() -> None:
    host = _host("$ tool\nstdin:\nline1\nline2\n")

    stdin = host.stdin()
    assert stdin.is_terminal() is False
    assert stdin.readline() == b"line1\n"
    assert stdin.read() == b"line2\n"


def test_host_stdout_terminal_flag_from_env() -> None:
    assert _host("$ tool\n").stdout().is_terminal() is True
    assert _host("$ _STDOUT_ISTERMINAL=0 tool\n").stdout().is_terminal() is False


def test_host_outputs_capture_text_and_bytes() -> None:
    host = _host("$ tool\n")

    host.stdout().write("a")
    host.stdout().write(b"b\xff")
    host.stderr().write("err")

    assert host.invocation.actual_stdout_text().encode("utf-8", "surrogateescape") == b"ab\xff"
    assert host.invocation.actual_stderr_text() == "err"
    assert host.stderr().is_terminal() is False
    assert host.stderr().size() == (0, 0)


def test_host_stdout_size_follows_dialog_env() -> None:
    host = _host("$ tool repl\n> _STDOUT_WIDTH=40 x\n")
    stdout = host.stdout()

    assert stdout.size() == (135, 25)
    assert host.readline("> ") == "x"
    assert stdout.size() == (40, 25)


def test_fs_opens_inline_fixture() -> None:
    host = _host("/dir/a.txt:\nhello\n$ tool\n")

    with host.fs.open("/dir/a.txt") as handle:
        assert isinstance(handle, FixtureFile)
        assert handle.name == "a.txt"
        assert handle.size == 6
        assert handle.read() == b"hello\n"
        with pytest.raises(io.UnsupportedOperation):
            handle.write(b"x")


def test_fs_opens_real_file_next_to_transcript(tmp_path: Path) -> None:
    (tmp_path / "data.bin").write_bytes(b"\x00\x01")
    host = _host("/data.bin:\n$ tool\n", path=tmp_path / "case.fqtest")

    with host.fs.open("/data.bin") as handle:
        assert handle.read() == b"\x00\x01"


def test_fs_missing_fixture_raises_file_not_found() -> None:
    host = _host("$ tool\n")

    with pytest.raises(FileNotFoundError, match="nope"):
        host.fs.open("nope")


def test_host_stdout_reassembles_characters_split_across_writes() -> None:
    host = _host("$ tool\n")

    for byte in "å\n".encode():
        host.stdout().write(bytes([byte]))

    assert host.invocation.actual_stdout_text() == "å\n"

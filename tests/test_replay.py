from __future__ import annotations

import fake_tool
from replaytest.replay import replay_invocation, replay_transcript
from replaytest.transcript import parse_transcript


def _replay(text: str):
    transcript = parse_transcript(text)
    invocation = next(transcript.invocations())
    code = replay_invocation(transcript, invocation, fake_tool.main)
    return transcript, invocation, code


def test_replay_captures_stdout_and_zero_exit() -> None:
    transcript, invocation, code = _replay("$ tool echo hi\nhi\n")

    assert code == 0
    assert invocation.actual_stdout_text() == "hi\n"
    assert invocation.actual_exit_code == 0
    assert invocation.replayed is True
    assert transcript.was_replayed is True


def test_replay_int_return_is_exit_code() -> None:
    _, invocation, code = _replay("$ tool bogus\n")

    assert code == 127
    assert invocation.actual_stderr_text() == "unknown command bogus\n"


def test_replay_system_exit_code() -> None:
    _, invocation, code = _replay("$ tool fail 3\n")

    assert code == 3
    assert invocation.actual_stderr_text() == "boom\n"


def test_replay_exiter_exception_code() -> None:
    _, _, code = _replay("$ tool exit 5\n")

    assert code == 5


def test_replay_tool_exception_is_recorded_as_outcome() -> None:
    transcript, invocation, code = _replay("$ tool crash\n")

    assert code == 0
    assert invocation.replayed is True
    assert transcript.was_replayed is True
    assert isinstance(invocation.tool_error, RuntimeError)
    assert invocation.actual_stderr_text() == "RuntimeError: tool misconfigured\n"


def test_replay_keeps_going_after_tool_exception() -> None:
    transcript = parse_transcript("$ tool crash\n$ tool echo hi\nhi\n")

    replayed = replay_transcript(transcript, fake_tool.main)

    assert [inv.replayed for inv in replayed] == [True, True]
    assert replayed[1].actual_stdout_text() == "hi\n"


def test_replay_system_exit_without_int_code() -> None:
    transcript = parse_transcript("$ x\n")
    invocation = next(transcript.invocations())

    def _none(_host) -> None:  # noqa: ANN001
        raise SystemExit(None)

    def _message(_host) -> None:  # noqa: ANN001
        raise SystemExit("fatal")

    assert replay_invocation(transcript, invocation, _none) == 0
    assert replay_invocation(transcript, invocation, _message) == 1


def test_replay_dialog_with_completion_and_end_of_input() -> None:
    text = "$ tool repl\n> 1+1\n2\n> fo\\t\nfoo\nformat\n> ^D\n"
    _, invocation, code = _replay(text)

    assert code == 0
    assert invocation.actual_stdout_text() == "> 1+1\n2\n> fo\\t\nfoo\nformat\n> ^D\n"
    assert invocation.actual_stdout_text() == invocation.expected_stdout_text()


def test_replay_dialog_env_override_changes_terminal_width() -> None:
    text = "$ tool repl\n> width\n135\n> _STDOUT_WIDTH=40 width\n40\n> width\n40\n> ^D\n"
    _, invocation, _ = _replay(text)

    assert invocation.actual_stdout_text() == invocation.expected_stdout_text()


def test_replay_fixture_and_stdin() -> None:
    text = "/hello.txt:\nhello\n$ tool cat /hello.txt\nhello\n$ tool cat\nin\nstdin:\nin\n"
    transcript = parse_transcript(text)

    replayed = replay_transcript(transcript, fake_tool.main)

    assert [inv.actual_stdout_text() for inv in replayed] == ["hello\n", "in\n"]


def test_replay_missing_fixture_is_reported_to_tool() -> None:
    _, invocation, code = _replay("$ tool cat /nope\n")

    assert code == 1
    assert invocation.actual_stderr_text() == "/nope: file not found\n"

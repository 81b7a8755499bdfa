from __future__ import annotations

from dataclasses import dataclass

from .transcript import Invocation


@dataclass(frozen=True, slots=True)
class FieldMismatch:
    field: str
    expected: object
    actual: object


@dataclass(frozen=True, slots=True)
class InvocationResult:
    line_number: int
    command: str
    mismatches: tuple[FieldMismatch, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.mismatches


def compare_invocation(invocation: Invocation) -> list[FieldMismatch]:
    """Compare expected and captured exit code, stdout and stderr.

    Every divergent field is reported, in that order.
    """

    pairs: tuple[tuple[str, object, object], ...] = (
        ("exitcode", invocation.expected_exit_code, invocation.actual_exit_code),
        ("stdout", invocation.expected_stdout_text(), invocation.actual_stdout_text()),
        ("stderr", invocation.expected_stderr, invocation.actual_stderr_text()),
    )
    return [
        FieldMismatch(field=name, expected=expected, actual=actual)
        for name, expected, actual in pairs
        if expected != actual
    ]


def verify_invocation(invocation: Invocation) -> InvocationResult:
    return InvocationResult(
        line_number=invocation.line_number,
        command=invocation.command,
        mismatches=tuple(compare_invocation(invocation)),
    )


__all__ = [
    "FieldMismatch",
    "InvocationResult",
    "compare_invocation",
    "verify_invocation",
]

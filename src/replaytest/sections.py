from __future__ import annotations

import re
from dataclasses import dataclass

LINE_DELIM = "\n"

# First matching alternative wins. Prompt lines are any line with a `>` that
# has no `<`, `:` or `|` in front of it; the prompt itself may be empty.
BOUNDARY_RE = re.compile(
    r"^\$ .*$"
    r"|^stdin:$"
    r"|^stderr:$"
    r"|^exitcode:.*$"
    r"|^#.*$"
    r"|^/.*:$"
    r"|^[^<:|]*>.*$"
)


@dataclass(frozen=True, slots=True)
class Section:
    line_number: int
    header: str
    body: str = ""
    # Empty when the header is the last line and the text had no final newline.
    header_end: str = LINE_DELIM

    def to_text(self) -> str:
        if not self.header:
            return self.body
        return self.header + self.header_end + self.body


def _split_lines(text: str) -> list[tuple[str, str]]:
    """Split into `(line, delimiter)` pairs; only the last delimiter can be empty."""

    lines = text.split(LINE_DELIM)
    # "a\n" splits into ["a", ""]
    last = lines.pop()
    pairs = [(line, LINE_DELIM) for line in lines]
    if last:
        pairs.append((last, ""))
    return pairs


def _boundary_header(pattern: re.Pattern[str], line: str) -> str | None:
    match = pattern.match(line)
    if match is None:
        return None
    for group in (match.group(0), *match.groups()):
        if group:
            return group
    return None


def split_sections(text: str, pattern: re.Pattern[str] = BOUNDARY_RE) -> list[Section]:
    """Split transcript text into sections at boundary lines.

    The first line always opens a section. When it is not a boundary it becomes
    body text of a section with an empty header. Line numbers are 1-based.
    """

    sections: list[Section] = []
    line_number = 0
    current_line = 0
    current_header: str | None = None
    header_end = LINE_DELIM
    body: list[str] = []

    def flush() -> None:
        if current_header is None:
            return
        sections.append(
            Section(
                line_number=current_line,
                header=current_header,
                body="".join(body),
                header_end=header_end,
            )
        )

    for line, delim in _split_lines(text):
        line_number += 1
        header = _boundary_header(pattern, line)
        if current_header is None or header is not None:
            flush()
            body = []
            current_line = line_number
            current_header = header or ""
            header_end = delim if header is not None else LINE_DELIM
            if header is None:
                body.append(line + delim)
            continue
        body.append(line + delim)

    flush()
    return sections


def join_sections(sections: list[Section]) -> str:
    return "".join(section.to_text() for section in sections)


__all__ = [
    "BOUNDARY_RE",
    "LINE_DELIM",
    "Section",
    "join_sections",
    "split_sections",
]

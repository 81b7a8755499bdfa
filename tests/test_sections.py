from __future__ import annotations

from replaytest.sections import Section, join_sections, split_sections


def test_split_sections_headers_bodies_and_line_numbers() -> None:
    text = "$ echo hi\nhi\n\n#note\nstderr:\nerr\n"
    sections = split_sections(text)

    assert sections == [
        Section(line_number=1, header="$ echo hi", body="hi\n\n"),
        Section(line_number=4, header="#note", body=""),
        Section(line_number=5, header="stderr:", body="err\n"),
    ]


def test_split_sections_first_line_opens_section_without_header() -> None:
    sections = split_sections("leading\ntext\n$ run\n")

    assert sections[0] == Section(line_number=1, header="", body="leading\ntext\n")
    assert sections[1] == Section(line_number=3, header="$ run", body="")


def test_split_sections_recognises_every_boundary_kind() -> None:
    text = "\n".join(
        [
            "$ tool repl",
            "null> .a",
            "> 1+1",
            "stdin:",
            "stderr:",
            "exitcode: 2",
            "# comment",
            "/fixture.bin:",
            "",
        ]
    )
    headers = [section.header for section in split_sections(text)]

    assert headers == [
        "$ tool repl",
        "null> .a",
        "> 1+1",
        "stdin:",
        "stderr:",
        "exitcode: 2",
        "# comment",
        "/fixture.bin:",
    ]


def test_split_sections_ignores_prompt_like_text_after_delimiters() -> None:
    sections = split_sections("$ run\n<a>\nkey: a>b\nx | y > z\n")

    assert len(sections) == 1
    assert sections[0].body == "<a>\nkey: a>b\nx | y > z\n"


def test_split_sections_is_lossless() -> None:
    text = "intro\n\n$ a\nout\\\n#c\n\n/f:\ndata\n> x\ny\nexitcode: 1\n"
    assert join_sections(split_sections(text)) == text


def test_split_sections_empty_text() -> None:
    assert split_sections("") == []


def test_split_sections_is_lossless_without_final_newline() -> None:
    for text in ("$ a\nb", "$ a", "intro", "$ a\n#c"):
        assert join_sections(split_sections(text)) == text


def test_split_sections_unterminated_last_line_body() -> None:
    assert split_sections("$ a\nb") == [Section(line_number=1, header="$ a", body="b")]
    assert split_sections("$ a") == [Section(line_number=1, header="$ a", header_end="")]

from __future__ import annotations

import pytest

from src2md.errors import MalformedDocumentError
from src2md.formats import MAGIC_HEADER
from src2md.mdparse import parse_document, split_lines
from src2md.model import ContentKind, Section
from src2md.writer import render_section


def _doc(*sections: Section) -> str:
    return f"{MAGIC_HEADER}\n\n" + "".join(render_section(s) for s in sections)


def _text(path: str, body: bytes, language: str = "") -> Section:
    return Section(
        relative_path=path, kind=ContentKind.TEXT, body=body, language=language
    )


def test_split_lines_only_breaks_on_newline() -> None:
    assert split_lines("a\r\nb\x0cc\rd\n") == ["a\r\n", "b\x0cc\rd\n"]
    assert split_lines("x\ny") == ["x\n", "y"]
    assert split_lines("") == []


def test_parse_recovers_sections_in_order() -> None:
    doc = _doc(
        _text("a.txt", b"hello\n", "text"),
        Section(relative_path="img.png", kind=ContentKind.BINARY, size=12),
        _text("src/b.py", b"x = 1\n", "python"),
    )
    sections = parse_document(doc)
    assert [s.relative_path for s in sections] == ["a.txt", "img.png", "src/b.py"]
    assert sections[0].body == b"hello\n"
    assert sections[0].language == "text"
    assert sections[1].kind is ContentKind.BINARY
    assert sections[1].size == 12
    assert sections[2].body == b"x = 1\n"
    assert sections[0].line == 3


def test_embedded_heading_and_short_fence_are_body_text() -> None:
    body = (
        b"intro\n"
        b"## fake heading\n"
        b"\n"
        b"```\n"
        b"inner\n"
        b"```\n"
        b"## another.txt\n"
    )
    sections = parse_document(_doc(_text("notes.md", body, "markdown")))
    assert len(sections) == 1
    assert sections[0].relative_path == "notes.md"
    assert sections[0].body == body


def test_shorter_backtick_line_does_not_close_fence() -> None:
    doc = f"{MAGIC_HEADER}\n\n## a.md\n\n````\nx\n```\ny\n````\n\n"
    (section,) = parse_document(doc)
    assert section.body == b"x\n```\ny"


def test_longer_closing_fence_is_accepted() -> None:
    doc = f"{MAGIC_HEADER}\n\n## a.txt\n\n````\nabc\n``````\n"
    (section,) = parse_document(doc)
    assert section.body == b"abc"


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"no trailing newline",
        b"\n",
        b"\n\n\n",
        b"crlf\r\nlines\r\n",
        b"lone\rcarriage",
        b"tab\tand\x0cformfeed\n",
        "unicode é中\U0001f600\n".encode(),
        b"`````````` ten\n",
    ],
)
def test_body_roundtrips_exactly(body: bytes) -> None:
    (section,) = parse_document(_doc(_text("f.txt", body)))
    assert section.body == body


def test_heading_path_whitespace_is_preserved() -> None:
    path = "  lead/ inner space /trail.txt "
    (section,) = parse_document(_doc(_text(path, b"x\n")))
    assert section.relative_path == path


def test_empty_document_has_no_sections() -> None:
    assert parse_document(f"{MAGIC_HEADER}\n") == []


def test_missing_magic_header_is_rejected() -> None:
    with pytest.raises(MalformedDocumentError) as excinfo:
        parse_document("## a.txt\n\n```\nx\n```\n")
    assert excinfo.value.line == 1


def test_heading_without_fence() -> None:
    doc = f"{MAGIC_HEADER}\n\n## a.txt\n\nnot a fence\n"
    with pytest.raises(MalformedDocumentError) as excinfo:
        parse_document(doc)
    assert excinfo.value.path == "a.txt"
    assert excinfo.value.line == 5
    assert "heading without matching fence" in str(excinfo.value)


def test_heading_at_end_of_document() -> None:
    with pytest.raises(MalformedDocumentError) as excinfo:
        parse_document(f"{MAGIC_HEADER}\n\n## a.txt\n\n")
    assert excinfo.value.path == "a.txt"


def test_unterminated_section() -> None:
    doc = f"{MAGIC_HEADER}\n\n## a.txt\n\n````\nbody\n```\n"
    with pytest.raises(MalformedDocumentError) as excinfo:
        parse_document(doc)
    assert "unterminated section" in str(excinfo.value)
    assert excinfo.value.path == "a.txt"
    assert excinfo.value.line == 3


def test_stray_content_between_sections() -> None:
    doc = _doc(_text("a.txt", b"x\n")) + "some prose\n"
    with pytest.raises(MalformedDocumentError) as excinfo:
        parse_document(doc)
    assert "outside of a section" in str(excinfo.value)


def test_empty_heading_path() -> None:
    with pytest.raises(MalformedDocumentError):
        parse_document(f"{MAGIC_HEADER}\n\n## \n\n```\nx\n```\n")


def test_crlf_converted_document_is_rejected() -> None:
    doc = _doc(_text("a.txt", b"hello\n")).replace("\n", "\r\n")
    with pytest.raises(MalformedDocumentError) as excinfo:
        parse_document(doc)
    assert excinfo.value.line == 3
    assert "CRLF" in str(excinfo.value)

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import MalformedDocumentError
from .fences import is_fence_close, parse_fence_open
from .formats import (
    BINARY_PLACEHOLDER_RE,
    HEADING_PREFIX,
    MAGIC_HEADER,
    MISSING_HEADER_ERROR,
)
from .model import ContentKind, Section


@dataclass(frozen=True)
class SeekingHeading:
    pass


@dataclass(frozen=True)
class SeekingFenceOpen:
    path: str
    heading_line: int


@dataclass
class InBody:
    path: str
    heading_line: int
    open_line: int
    fence_len: int
    language: str
    buf: list[str] = field(default_factory=list)


ParserState = SeekingHeading | SeekingFenceOpen | InBody


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping terminators.

    ``str.splitlines`` also breaks on ``\\r``, form feeds and friends, which
    would corrupt file bodies that contain them.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _strip_terminator(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def _is_blank(line: str) -> bool:
    return not line.strip()


def _heading_path(line: str) -> str | None:
    if not line.startswith(HEADING_PREFIX):
        return None
    return _strip_terminator(line)[len(HEADING_PREFIX) :]


def _finish_body(state: InBody) -> Section:
    text = "".join(state.buf)
    if text.endswith("\n"):
        text = text[:-1]
    body = text.encode("utf-8")
    return Section(
        relative_path=state.path,
        kind=ContentKind.TEXT,
        body=body,
        size=len(body),
        language=state.language,
        line=state.heading_line,
    )


def _check_header(lines: list[str]) -> None:
    first = _strip_terminator(lines[0]).lstrip("\ufeff").rstrip() if lines else ""
    if first != MAGIC_HEADER:
        raise MalformedDocumentError(MISSING_HEADER_ERROR, line=1)


def parse_document(text: str) -> list[Section]:
    """Parse a src2md document into its sections, in document order.

    One forward pass over the lines. Inside a fenced body nothing is
    interpreted except a closing fence at least as long as the opening one,
    so file contents that look like headings or shorter fences are safe.
    Any structural problem raises ``MalformedDocumentError``; there is no
    partial result.
    """
    lines = split_lines(text)
    _check_header(lines)

    sections: list[Section] = []
    state: ParserState = SeekingHeading()

    for idx in range(1, len(lines)):
        line = lines[idx]
        lineno = idx + 1

        if isinstance(state, InBody):
            if is_fence_close(line, state.fence_len):
                sections.append(_finish_body(state))
                state = SeekingHeading()
            else:
                state.buf.append(line)
            continue

        if isinstance(state, SeekingFenceOpen):
            if _is_blank(line):
                continue
            opened = parse_fence_open(line)
            if opened is not None:
                fence, info = opened
                state = InBody(
                    path=state.path,
                    heading_line=state.heading_line,
                    open_line=lineno,
                    fence_len=len(fence),
                    language=info,
                )
                continue
            m = BINARY_PLACEHOLDER_RE.match(_strip_terminator(line).rstrip())
            if m is not None:
                sections.append(
                    Section(
                        relative_path=state.path,
                        kind=ContentKind.BINARY,
                        size=int(m.group("size")),
                        line=state.heading_line,
                    )
                )
                state = SeekingHeading()
                continue
            raise MalformedDocumentError(
                "heading without matching fence: expected an opening fence "
                "or binary placeholder",
                line=lineno,
                path=state.path,
            )

        # SeekingHeading
        if _is_blank(line):
            continue
        path = _heading_path(line)
        if path is None:
            raise MalformedDocumentError(
                "unexpected content outside of a section", line=lineno
            )
        if not path:
            raise MalformedDocumentError(
                "section heading has an empty path", line=lineno
            )
        if "\r" in path:
            raise MalformedDocumentError(
                "section heading contains a carriage return; the document's "
                "line endings were probably converted to CRLF",
                line=lineno,
            )
        state = SeekingFenceOpen(path=path, heading_line=lineno)

    if isinstance(state, InBody):
        raise MalformedDocumentError(
            f"unterminated section: fence of {state.fence_len} backticks opened "
            f"at line {state.open_line} is never closed",
            line=state.heading_line,
            path=state.path,
        )
    if isinstance(state, SeekingFenceOpen):
        raise MalformedDocumentError(
            "heading without matching fence at end of document",
            line=state.heading_line,
            path=state.path,
        )
    return sections

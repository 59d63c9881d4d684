from __future__ import annotations

import codecs
from typing import TextIO

from .errors import EncodingError, FileIOError, PathTraversalError
from .fences import choose_backtick_fence
from .formats import HEADING_PREFIX, MAGIC_HEADER, binary_placeholder
from .languages import language_for
from .model import ContentKind, FileSource, Section
from .security import normalize_relative_path

DEFAULT_SAMPLE_BYTES = 8192


def classify(data: bytes, *, sample_bytes: int = DEFAULT_SAMPLE_BYTES) -> ContentKind:
    """Inspect a prefix of ``data`` and decide whether it is text.

    NUL bytes or bytes that are not valid UTF-8 inside the sample make the file
    binary. A multi-byte sequence cut off by the end of the sample is fine.
    """
    sample = data[: max(1, sample_bytes)]
    if b"\x00" in sample:
        return ContentKind.BINARY
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        decoder.decode(sample, final=len(sample) == len(data))
    except UnicodeDecodeError:
        return ContentKind.BINARY
    return ContentKind.TEXT


def _check_frameable_path(rel: str) -> None:
    if not rel:
        raise EncodingError("empty relative path cannot be framed")
    if "\n" in rel or "\r" in rel:
        raise EncodingError(f"path contains a line break and cannot be framed: {rel!r}")
    try:
        normalize_relative_path(rel)
    except PathTraversalError as e:
        raise EncodingError(f"path would be refused on restore: {e}") from e


def read_section(
    source: FileSource, *, sample_bytes: int = DEFAULT_SAMPLE_BYTES
) -> Section:
    _check_frameable_path(source.rel)
    try:
        data = source.path.read_bytes()
    except OSError as e:
        raise FileIOError(source.rel, e) from e

    kind = classify(data, sample_bytes=sample_bytes)
    if kind is ContentKind.BINARY:
        return Section(relative_path=source.rel, kind=kind, size=len(data))

    try:
        data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(
            f"{source.rel}: invalid UTF-8 at byte {e.start} "
            f"(past the {sample_bytes}-byte sample used for classification)"
        ) from e
    return Section(
        relative_path=source.rel,
        kind=kind,
        body=data,
        size=len(data),
        language=language_for(source.rel),
    )


def render_section(section: Section) -> str:
    _check_frameable_path(section.relative_path)
    lines = [f"{HEADING_PREFIX}{section.relative_path}\n", "\n"]
    if section.is_binary:
        lines.append(binary_placeholder(section.size) + "\n")
        lines.append("\n")
        return "".join(lines)

    body = section.text
    fence = choose_backtick_fence(body)
    lines.append(f"{fence}{section.language}\n")
    # The newline before the closing fence is framing, not content; the parser
    # drops exactly one.
    lines.append(body + "\n")
    lines.append(f"{fence}\n")
    lines.append("\n")
    return "".join(lines)


class DocumentWriter:
    """Streams a document to a text sink opened with ``newline=""``."""

    def __init__(self, sink: TextIO, *, name: str = "<output>") -> None:
        self._sink = sink
        self._name = name
        self._header_written = False
        self.sections_written = 0

    def _write(self, text: str) -> None:
        try:
            self._sink.write(text)
        except OSError as e:
            raise FileIOError(self._name, e) from e

    def write_header(self) -> None:
        if self._header_written:
            return
        self._write(f"{MAGIC_HEADER}\n\n")
        self._header_written = True

    def write_section(self, section: Section) -> None:
        self.write_header()
        self._write(render_section(section))
        self.sections_written += 1

    def flush(self) -> None:
        try:
            self._sink.flush()
        except OSError as e:
            raise FileIOError(self._name, e) from e

from __future__ import annotations

import re

DOCUMENT_FORMAT_VERSION = "src2md.v1"

# First line of every generated document. Used both to recognise prior
# outputs during discovery and to anchor the parser.
MAGIC_HEADER = f"<!-- {DOCUMENT_FORMAT_VERSION} -->"

HEADING_PREFIX = "## "

BINARY_PLACEHOLDER = "(binary file omitted, {size} bytes)"
BINARY_PLACEHOLDER_RE = re.compile(r"^\(binary file omitted, (?P<size>\d+) bytes\)$")

MISSING_HEADER_ERROR = (
    "Not a src2md document: the first line must be "
    f"{MAGIC_HEADER!r}. Re-create it with `src2md -o <file>`."
)


def binary_placeholder(size: int) -> str:
    return BINARY_PLACEHOLDER.format(size=size)

from __future__ import annotations

import re

MIN_FENCE_LEN = 3

_BACKTICK_RUN_RE = re.compile(r"`+")
_FENCE_OPEN_RE = re.compile(
    r"^(?P<fence>`{3,})[ \t]*(?P<info>[^`\s]*)(?:[ \t]+[^`]*)?$"
)


def longest_backtick_run(text: str) -> int:
    max_len = 0
    for m in _BACKTICK_RUN_RE.finditer(text):
        max_len = max(max_len, len(m.group(0)))
    return max_len


def fence_length(text: str, *, min_len: int = MIN_FENCE_LEN) -> int:
    """Shortest fence that no backtick run inside ``text`` can close."""
    return max(min_len, longest_backtick_run(text) + 1)


def choose_backtick_fence(text: str, *, min_len: int = MIN_FENCE_LEN) -> str:
    return "`" * fence_length(text, min_len=min_len)


def parse_fence_open(line: str) -> tuple[str, str] | None:
    m = _FENCE_OPEN_RE.match(line.rstrip("\r\n"))
    if not m:
        return None
    return m.group("fence"), m.group("info")


def is_fence_close(line: str, fence_len: int) -> bool:
    s = line.rstrip()
    return len(s) >= fence_len and s.strip("`") == ""

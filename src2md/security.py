from __future__ import annotations

import re
from pathlib import Path, PurePosixPath, PureWindowsPath

from .errors import PathTraversalError

_ANY_SEP_RE = re.compile(r"[/\\]")


def _is_absolute(rel: str) -> bool:
    if rel.startswith(("/", "\\")):
        return True
    win = PureWindowsPath(rel)
    return bool(win.drive or win.root)


def _check_escape(rel: str) -> None:
    # Backslashes count as separators here so ``..\..\x`` cannot slip through
    # on platforms that honour them.
    depth = 0
    for seg in _ANY_SEP_RE.split(rel):
        if seg in ("", "."):
            continue
        if seg == "..":
            depth -= 1
            if depth < 0:
                raise PathTraversalError(rel, "escapes the destination root")
        else:
            depth += 1


def normalize_relative_path(rel: str) -> PurePosixPath:
    """Resolve ``.``/``..`` segments of a document path symbolically.

    Pure string analysis; the filesystem is never consulted. Segment text is
    otherwise kept verbatim, including surrounding whitespace.
    """
    if not rel:
        raise PathTraversalError(rel, "empty path")
    if "\x00" in rel:
        raise PathTraversalError(rel, "contains a NUL byte")
    if _is_absolute(rel):
        raise PathTraversalError(rel, "absolute paths are not allowed")
    _check_escape(rel)

    parts: list[str] = []
    for seg in rel.split("/"):
        if seg in ("", "."):
            continue
        if seg == "..":
            if not parts:
                raise PathTraversalError(rel, "escapes the destination root")
            parts.pop()
            continue
        parts.append(seg)
    if not parts:
        raise PathTraversalError(rel, "does not name a file below the root")
    return PurePosixPath(*parts)


def resolve_target(root: Path, rel: str) -> Path:
    """Destination path for ``rel`` under ``root``; always a descendant of it."""
    return Path(root).joinpath(*normalize_relative_path(rel).parts)


def is_confined_to_root(path: Path, root: Path) -> bool:
    """Filesystem-aware check used right before writing (follows symlinks)."""
    try:
        resolved = path.resolve()
        resolved_root = root.resolve()
    except OSError:
        return False
    return resolved == resolved_root or resolved_root in resolved.parents

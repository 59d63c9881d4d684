from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

from .config import IGNORE_FILENAME
from .formats import MAGIC_HEADER
from .model import FileSource

DEFAULT_EXCLUDES = [
    ".git/",
    "**/__pycache__/**",
    "**/*.pyc",
    "**/node_modules/**",
]

LOCK_FILE_NAMES = frozenset(
    {
        "package-lock.json",
        "npm-shrinkwrap.json",
        "pnpm-lock.yaml",
        "bun.lockb",
    }
)

_MAGIC_BYTES = MAGIC_HEADER.encode("utf-8")
_UTF8_BOM = b"\xef\xbb\xbf"


@dataclass(frozen=True)
class Discovery:
    files: list[FileSource]
    root: Path
    skipped: list[tuple[str, str]] = field(default_factory=list)  # (rel, reason)


def _load_ignore_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def _load_ignore(
    root: Path, *, ignore_file: Path | None, respect_gitignore: bool
) -> pathspec.PathSpec:
    # Order matters: patterns later in the list take precedence (e.g. negations).
    lines: list[str] = []
    if ignore_file is not None:
        lines.extend(_load_ignore_lines(ignore_file))
    else:
        if respect_gitignore:
            lines.extend(_load_ignore_lines(root / ".gitignore"))
        lines.extend(_load_ignore_lines(root / IGNORE_FILENAME))
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def _is_confined_to_root(path: Path, root: Path) -> bool:
    try:
        resolved = path.resolve()
    except OSError:
        return False
    try:
        resolved.relative_to(root)
    except ValueError:
        return False
    return True


def _rel_posix(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.resolve().relative_to(root).as_posix()


def is_hidden(rel_parts: Iterable[str]) -> bool:
    return any(part.startswith(".") for part in rel_parts)


def is_lock_file(name: str) -> bool:
    lowered = name.lower()
    return lowered in LOCK_FILE_NAMES or lowered.endswith(".lock")


def is_src2md_output(path: Path) -> bool:
    """True when ``path`` starts with the magic header of a generated document."""
    try:
        with path.open("rb") as f:
            head = f.read(len(_UTF8_BOM) + len(_MAGIC_BYTES))
    except OSError:
        return False
    if head.startswith(_UTF8_BOM):
        head = head[len(_UTF8_BOM) :]
    return head.startswith(_MAGIC_BYTES)


def _extension_allowed(name: str, extensions: set[str]) -> bool:
    if not extensions:
        return True
    suffix = Path(name).suffix.lower().lstrip(".")
    return suffix in extensions


def _candidates(
    root: Path, explicit_paths: Sequence[Path] | None
) -> tuple[list[tuple[Path, bool]], list[tuple[str, str]]]:
    """(path, named_explicitly) pairs plus skips for unusable explicit paths.

    ``named_explicitly`` lets an explicitly listed file bypass the hidden-file
    rule; files found by walking an explicit directory do not.
    """
    if not explicit_paths:
        return [(p, False) for p in root.rglob("*") if p.is_file()], []

    out: list[tuple[Path, bool]] = []
    skipped: list[tuple[str, str]] = []
    for raw in explicit_paths:
        p = Path(raw)
        if not p.is_absolute():
            p = root / p
        if not p.exists():
            skipped.append((str(raw), "missing"))
            continue
        if not _is_confined_to_root(p, root):
            skipped.append((str(raw), "outside root"))
            continue
        p = p.resolve()
        if p.is_file():
            out.append((p, True))
        else:
            out.extend((c, False) for c in p.rglob("*") if c.is_file())
    return out, skipped


def discover_files(
    root: Path,
    *,
    ignore_file: Path | None = None,
    extensions: set[str] | None = None,
    exclude: list[str] | None = None,
    respect_gitignore: bool = True,
    include_hidden: bool = False,
    explicit_paths: Sequence[Path] | None = None,
    output_path: Path | None = None,
) -> Discovery:
    """Select the files to bundle, in deterministic (sorted) order.

    Notes:
    - ``ignore_file`` replaces the default ``.gitignore`` + ``.src2md.ignore``
      pair; patterns are gitignore-style.
    - Hidden files are skipped unless ``include_hidden`` is set or the file is
      named in ``explicit_paths``.
    - The output document itself and any earlier src2md output (detected by its
      magic header) are never bundled.
    """
    root = root.resolve()
    exts = extensions or set()
    ignore = _load_ignore(
        root, ignore_file=ignore_file, respect_gitignore=respect_gitignore
    )
    exc = pathspec.PathSpec.from_lines(
        "gitwildmatch", DEFAULT_EXCLUDES + (exclude or [])
    )
    output_resolved = output_path.resolve() if output_path is not None else None

    candidates, skipped = _candidates(root, explicit_paths)

    seen: set[str] = set()
    out: list[FileSource] = []
    for p, named in candidates:
        if not _is_confined_to_root(p, root):
            continue
        rel = _rel_posix(p, root)
        if rel in seen:
            continue
        seen.add(rel)

        reason: str | None = None
        if output_resolved is not None and p.resolve() == output_resolved:
            reason = "output file"
        elif not include_hidden and not named and is_hidden(rel.split("/")):
            reason = "hidden"
        elif ignore.match_file(rel):
            reason = "ignored"
        elif exc.match_file(rel):
            reason = "excluded"
        elif is_lock_file(p.name):
            reason = "lock file"
        elif not _extension_allowed(p.name, exts):
            reason = "extension"
        elif is_src2md_output(p):
            reason = "src2md output"

        if reason is not None:
            skipped.append((rel, reason))
            continue
        out.append(FileSource(path=p, rel=rel))

    out.sort(key=lambda f: f.rel)
    skipped.sort()
    return Discovery(files=out, root=root, skipped=skipped)

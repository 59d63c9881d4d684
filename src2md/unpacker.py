from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .errors import EncodingError, FileIOError, PathTraversalError, Src2mdError
from .mdparse import parse_document
from .model import FileError, RestoreResult, Section
from .packer import resolve_worker_count
from .security import is_confined_to_root, resolve_target


def write_section_file(root: Path, target: Path, body: bytes) -> Path:
    """Write ``body`` to ``target`` verbatim, creating parent directories.

    ``target`` comes from ``resolve_target`` and is lexically inside ``root``;
    this re-checks against the real filesystem so a symlinked directory inside
    the destination cannot redirect the write.
    """
    if not is_confined_to_root(target, root):
        raise PathTraversalError(
            target.relative_to(root).as_posix(),
            "resolves outside the destination root",
        )
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(body)
    except OSError as e:
        raise FileIOError(target, e) from e
    return target


def _plan_writes(
    sections: list[Section], root: Path, result: RestoreResult, *, fail_fast: bool
) -> dict[Path, Section]:
    # Every path is validated before anything touches the disk.
    planned: dict[Path, Section] = {}
    for section in sections:
        if section.is_binary:
            result.binary.append(section.relative_path)
            continue
        try:
            target = resolve_target(root, section.relative_path)
        except PathTraversalError as e:
            if fail_fast:
                raise
            result.errors.append(FileError(path=section.relative_path, error=e))
            continue
        if target in planned:
            # Last write wins.
            result.duplicates.append(section.relative_path)
            del planned[target]
        planned[target] = section
    return planned


def restore_text(
    text: str,
    dest: Path,
    *,
    fail_fast: bool = False,
    max_workers: int = 0,
) -> RestoreResult:
    """Recreate the text files of a document under ``dest``.

    The document is parsed completely first; a malformed document raises
    before any file is written. Binary sections are reported, not restored.
    """
    sections = parse_document(text)
    root = Path(dest).resolve()
    result = RestoreResult(root=root)
    planned = _plan_writes(sections, root, result, fail_fast=fail_fast)

    items = list(planned.items())
    worker_count = resolve_worker_count(max_workers, len(items))
    with ThreadPoolExecutor(max_workers=worker_count) as pool:
        futures = [
            pool.submit(write_section_file, root, target, section.body)
            for target, section in items
        ]
        for (target, section), fut in zip(items, futures):
            try:
                fut.result()
            except Src2mdError as e:
                if fail_fast:
                    for f in futures:
                        f.cancel()
                    raise
                result.errors.append(FileError(path=section.relative_path, error=e))
                continue
            result.written.append(target)
    return result


def read_document(markdown_path: Path) -> str:
    try:
        data = Path(markdown_path).read_bytes()
    except OSError as e:
        raise FileIOError(markdown_path, e) from e
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(
            f"{markdown_path}: document is not valid UTF-8 (byte {e.start})"
        ) from e


def restore(
    markdown_path: Path,
    dest: Path,
    *,
    fail_fast: bool = False,
    max_workers: int = 0,
) -> RestoreResult:
    return restore_text(
        read_document(markdown_path),
        dest,
        fail_fast=fail_fast,
        max_workers=max_workers,
    )

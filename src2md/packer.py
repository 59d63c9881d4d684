from __future__ import annotations

import os
import time
from collections import deque
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import TextIO

from .config import Config
from .discover import discover_files
from .errors import FileIOError, Src2mdError
from .model import BundleResult, FileError, FileSource, Section
from .writer import DEFAULT_SAMPLE_BYTES, DocumentWriter, read_section


def resolve_worker_count(max_workers: int, item_count: int) -> int:
    if item_count <= 1:
        return 1
    if max_workers > 0:
        return max_workers
    cpu = os.cpu_count() or 1
    return max(2, min(32, cpu * 4, item_count))


def default_output_path(root: Path) -> Path:
    name = root.name or "project"
    return root / f"{name}_content_{int(time.time())}.md"


def _cancel_pending(futures: Iterable[Future]) -> None:
    for f in futures:
        f.cancel()


def bundle_files(
    sources: Sequence[FileSource],
    sink: TextIO,
    *,
    fail_fast: bool = False,
    max_workers: int = 0,
    sample_bytes: int = DEFAULT_SAMPLE_BYTES,
    name: str = "<output>",
) -> BundleResult:
    """Write ``sources`` to ``sink`` as one document, in the given order.

    Files are read concurrently, with at most a small window of reads in
    flight; sections are written strictly in order as their reads complete.
    A failing file is either fatal (``fail_fast``) or recorded in the result
    with its section left out. A failing sink is always fatal.
    """
    result = BundleResult()
    writer = DocumentWriter(sink, name=name)
    writer.write_header()

    worker_count = resolve_worker_count(max_workers, len(sources))
    window = worker_count * 2
    remaining = iter(sources)
    pending: deque[tuple[FileSource, Future]] = deque()

    with ThreadPoolExecutor(max_workers=worker_count) as pool:

        def refill() -> None:
            while len(pending) < window:
                src = next(remaining, None)
                if src is None:
                    return
                pending.append(
                    (src, pool.submit(read_section, src, sample_bytes=sample_bytes))
                )

        refill()
        while pending:
            src, fut = pending.popleft()
            try:
                section: Section = fut.result()
            except Src2mdError as e:
                if fail_fast:
                    _cancel_pending(f for _, f in pending)
                    raise
                result.errors.append(FileError(path=src.rel, error=e))
                refill()
                continue
            try:
                writer.write_section(section)
            except Src2mdError:
                _cancel_pending(f for _, f in pending)
                raise
            if section.is_binary:
                result.binary.append(src.rel)
            else:
                result.written.append(src.rel)
            refill()

    writer.flush()
    return result


def bundle(config: Config) -> BundleResult:
    """Discover files under ``config.root`` and write the bundle document.

    Returns the result with per-file errors when not in fail-fast mode; in
    fail-fast mode the first error is raised and the partial document removed.
    """
    root = config.root.resolve()
    output = Path(config.output) if config.output else default_output_path(root)
    if not output.is_absolute():
        output = root / output

    disc = discover_files(
        root,
        ignore_file=Path(config.ignore_file) if config.ignore_file else None,
        extensions=config.extensions,
        exclude=config.exclude,
        respect_gitignore=config.respect_gitignore,
        include_hidden=config.include_hidden,
        explicit_paths=config.paths or None,
        output_path=output,
    )

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        sink = output.open("w", encoding="utf-8", newline="")
    except OSError as e:
        raise FileIOError(output, e) from e

    try:
        with sink:
            result = bundle_files(
                disc.files,
                sink,
                fail_fast=config.fail_fast,
                max_workers=config.max_workers,
                sample_bytes=config.sample_bytes,
                name=str(output),
            )
    except Src2mdError:
        output.unlink(missing_ok=True)
        raise

    result.output = output
    result.filtered = list(disc.skipped)
    return result

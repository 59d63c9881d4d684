from __future__ import annotations

import argparse
import importlib.metadata as importlib_metadata
import sys
from pathlib import Path

from .config import Config, load_config, normalize_extensions
from .errors import Src2mdError
from .model import BundleResult, FileError, RestoreResult
from .packer import bundle
from .unpacker import restore


def _src2md_version() -> str:
    try:
        return importlib_metadata.version("src2md")
    except importlib_metadata.PackageNotFoundError:
        return "0+unknown"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="src2md",
        description=(
            "Collect code and text files into a single Markdown file, "
            "or restore them back."
        ),
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"src2md {_src2md_version()}",
    )
    p.add_argument(
        "paths",
        type=Path,
        nargs="*",
        help="Specific files or directories to include (relative to --root)",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help=(
            "Output .md file (default: config 'output' or "
            "<root-name>_content_<timestamp>.md in the root)"
        ),
    )
    p.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Project root to scan (default: current directory)",
    )
    p.add_argument(
        "--ignore-file",
        type=Path,
        default=None,
        help="Gitignore-style ignore file (default: .gitignore + .src2md.ignore)",
    )
    p.add_argument(
        "-e",
        "--ext",
        default=None,
        help=(
            "Only include files with these extensions "
            "(comma-separated, e.g. rs,ts,js)"
        ),
    )
    p.add_argument(
        "--include-hidden",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include hidden files and directories (default: off via config)",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose output (repeatable: -v, -vv, -vvv)",
    )
    p.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Stop on the first error instead of continuing",
    )
    p.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Max worker threads for file IO (<=0 uses auto)",
    )
    p.add_argument(
        "--restore",
        type=Path,
        default=None,
        metavar="MARKDOWN",
        help="Restore files from a src2md Markdown file back to the filesystem",
    )
    p.add_argument(
        "--restore-path",
        type=Path,
        default=None,
        metavar="DIR",
        help="Directory to restore files into (default: current directory)",
    )
    return p


def _resolve_config(args: argparse.Namespace) -> Config:
    root = (args.root or Path.cwd()).resolve()
    cfg = load_config(root)
    cfg.root = root
    cfg.paths = list(args.paths or [])
    cfg.verbosity = int(args.verbose or 0)
    if args.output is not None:
        cfg.output = str(args.output.resolve())
    if args.ignore_file is not None:
        cfg.ignore_file = str(args.ignore_file.resolve())
    elif cfg.ignore_file and not Path(cfg.ignore_file).is_absolute():
        cfg.ignore_file = str(root / cfg.ignore_file)
    if args.ext is not None:
        cfg.extensions = normalize_extensions(args.ext)
    if args.include_hidden is not None:
        cfg.include_hidden = bool(args.include_hidden)
    if args.fail_fast is not None:
        cfg.fail_fast = bool(args.fail_fast)
    if args.max_workers is not None:
        cfg.max_workers = int(args.max_workers)
    cfg.restore_input = args.restore
    cfg.restore_path = args.restore_path
    return cfg


def _print_errors(errors: list[FileError]) -> None:
    for err in errors:
        print(f"Error: {err.path}: {err.message}", file=sys.stderr)


def _print_bundle_report(result: BundleResult, *, verbosity: int) -> None:
    if verbosity >= 2:
        for rel in result.written:
            print(f"bundled: {rel}", file=sys.stderr)
        for rel in result.binary:
            print(f"binary (content omitted): {rel}", file=sys.stderr)
    if verbosity >= 3:
        for rel, reason in result.filtered:
            print(f"skipped: {rel} ({reason})", file=sys.stderr)
    _print_errors(result.errors)

    out = result.output.as_posix() if result.output is not None else "-"
    print("", file=sys.stderr)
    print("Bundle Summary:", file=sys.stderr)
    print("───────────────", file=sys.stderr)
    print(f"{'Text Files':>12}: {len(result.written):,}", file=sys.stderr)
    print(
        f"{'Binary':>12}: {len(result.binary):,} (listed, content omitted)",
        file=sys.stderr,
    )
    print(f"{'Filtered':>12}: {len(result.filtered):,}", file=sys.stderr)
    print(f"{'Failed':>12}: {len(result.errors):,}", file=sys.stderr)
    print(f"{'Output':>12}: {out}", file=sys.stderr)


def _print_restore_report(result: RestoreResult, *, verbosity: int) -> None:
    if verbosity >= 1:
        for rel in result.duplicates:
            print(
                f"Warning: duplicate section path {rel!r}; the last one wins",
                file=sys.stderr,
            )
    if verbosity >= 2:
        for target in result.written:
            rel = target.relative_to(result.root).as_posix()
            print(f"restored: {rel}", file=sys.stderr)
        for rel in result.binary:
            print(f"binary (not restorable): {rel}", file=sys.stderr)
    _print_errors(result.errors)

    print("", file=sys.stderr)
    print("Restore Summary:", file=sys.stderr)
    print("────────────────", file=sys.stderr)
    print(f"{'Restored':>12}: {len(result.written):,}", file=sys.stderr)
    print(f"{'Binary':>12}: {len(result.binary):,} (skipped)", file=sys.stderr)
    print(f"{'Duplicates':>12}: {len(result.duplicates):,}", file=sys.stderr)
    print(f"{'Failed':>12}: {len(result.errors):,}", file=sys.stderr)
    print(f"{'Destination':>12}: {result.root.as_posix()}", file=sys.stderr)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(sys.argv[1:] if argv is None else argv))

    if args.restore is not None:
        conflicting = [
            flag
            for flag, value in (
                ("--output", args.output),
                ("--ignore-file", args.ignore_file),
                ("--ext", args.ext),
                ("PATHS", args.paths or None),
            )
            if value is not None
        ]
        if conflicting:
            parser.error(
                f"--restore cannot be combined with {', '.join(conflicting)}"
            )
    elif args.restore_path is not None:
        parser.error("--restore-path requires --restore")

    cfg = _resolve_config(args)

    if cfg.restore_input is not None:
        dest = cfg.restore_path or Path.cwd()
        try:
            rres = restore(
                cfg.restore_input,
                dest,
                fail_fast=cfg.fail_fast,
                max_workers=cfg.max_workers,
            )
        except Src2mdError as e:
            raise SystemExit(f"src2md: restore failed: {e}") from e
        _print_restore_report(rres, verbosity=cfg.verbosity)
        if not rres.ok:
            raise SystemExit(1)
        return

    try:
        bres = bundle(cfg)
    except Src2mdError as e:
        raise SystemExit(f"src2md: bundle failed: {e}") from e
    _print_bundle_report(bres, verbosity=cfg.verbosity)
    if not bres.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()

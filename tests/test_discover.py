from __future__ import annotations

from pathlib import Path

from src2md.discover import discover_files, is_lock_file
from src2md.formats import MAGIC_HEADER


def _write(root: Path, rel: str, text: str = "x\n") -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def _rels(disc) -> list[str]:
    return [f.rel for f in disc.files]


def _reasons(disc) -> dict[str, str]:
    return dict(disc.skipped)


def test_walk_is_sorted_and_relative(tmp_path: Path) -> None:
    _write(tmp_path, "b.txt")
    _write(tmp_path, "a/z.py")
    _write(tmp_path, "a/b/c.md")
    disc = discover_files(tmp_path)
    assert _rels(disc) == ["a/b/c.md", "a/z.py", "b.txt"]
    assert all(f.path.is_absolute() for f in disc.files)


def test_hidden_files_are_skipped_unless_named(tmp_path: Path) -> None:
    _write(tmp_path, "visible.rs")
    _write(tmp_path, ".hidden.rs")
    _write(tmp_path, ".config/settings.toml")

    disc = discover_files(tmp_path)
    assert _rels(disc) == ["visible.rs"]
    assert _reasons(disc)[".hidden.rs"] == "hidden"

    explicit = discover_files(tmp_path, explicit_paths=[Path(".hidden.rs")])
    assert _rels(explicit) == [".hidden.rs"]

    everything = discover_files(tmp_path, include_hidden=True)
    assert ".config/settings.toml" in _rels(everything)


def test_lock_files_are_skipped(tmp_path: Path) -> None:
    _write(tmp_path, "main.rs")
    for name in ["package-lock.json", "yarn.lock", "Cargo.lock", "pnpm-lock.yaml"]:
        _write(tmp_path, name, "{}\n")
    disc = discover_files(tmp_path)
    assert _rels(disc) == ["main.rs"]
    assert _reasons(disc)["Cargo.lock"] == "lock file"
    assert is_lock_file("custom.LOCK")
    assert not is_lock_file("locker.py")


def test_extension_filter_is_case_insensitive(tmp_path: Path) -> None:
    _write(tmp_path, "Main.RS")
    _write(tmp_path, "app.ts")
    _write(tmp_path, "notes.md")
    _write(tmp_path, "Makefile")
    disc = discover_files(tmp_path, extensions={"rs", "ts"})
    assert _rels(disc) == ["Main.RS", "app.ts"]
    assert _reasons(disc)["notes.md"] == "extension"


def test_gitignore_and_tool_ignore_are_combined(tmp_path: Path) -> None:
    _write(tmp_path, ".gitignore", "build/\n*.log\n")
    _write(tmp_path, ".src2md.ignore", "secret.txt\n")
    _write(tmp_path, "build/out.js")
    _write(tmp_path, "run.log")
    _write(tmp_path, "secret.txt")
    _write(tmp_path, "keep.txt")
    disc = discover_files(tmp_path)
    assert _rels(disc) == ["keep.txt"]

    no_git = discover_files(tmp_path, respect_gitignore=False)
    assert "run.log" in _rels(no_git)
    assert "secret.txt" not in _rels(no_git)


def test_custom_ignore_file_replaces_defaults(tmp_path: Path) -> None:
    _write(tmp_path, ".gitignore", "*.log\n")
    _write(tmp_path, "run.log")
    _write(tmp_path, "drop.txt")
    custom = _write(
        tmp_path.parent / f"{tmp_path.name}-ignore", "custom.ignore", "drop.txt\n"
    )
    disc = discover_files(tmp_path, ignore_file=custom)
    assert _rels(disc) == ["run.log"]


def test_output_and_previous_documents_are_excluded(tmp_path: Path) -> None:
    _write(tmp_path, "code.py")
    out = _write(tmp_path, "current.md", "")
    _write(tmp_path, "old_bundle.md", f"{MAGIC_HEADER}\n\n")
    _write(tmp_path, "plain.md", "# not generated\n")
    disc = discover_files(tmp_path, output_path=out)
    assert _rels(disc) == ["code.py", "plain.md"]
    reasons = _reasons(disc)
    assert reasons["current.md"] == "output file"
    assert reasons["old_bundle.md"] == "src2md output"


def test_explicit_paths_restrict_the_walk(tmp_path: Path) -> None:
    _write(tmp_path, "src/a.py")
    _write(tmp_path, "src/sub/b.py")
    _write(tmp_path, "other/c.py")
    _write(tmp_path, "top.py")
    outside = _write(tmp_path.parent / f"{tmp_path.name}-outside", "x.py")

    disc = discover_files(
        tmp_path,
        explicit_paths=[Path("src"), Path("top.py"), Path("missing.py"), outside],
    )
    assert _rels(disc) == ["src/a.py", "src/sub/b.py", "top.py"]
    reasons = _reasons(disc)
    assert reasons["missing.py"] == "missing"
    assert reasons[str(outside)] == "outside root"


def test_exclude_patterns(tmp_path: Path) -> None:
    _write(tmp_path, "docs/index.md")
    _write(tmp_path, "src/main.py")
    _write(tmp_path, "src/__pycache__/main.cpython-311.pyc")
    disc = discover_files(tmp_path, exclude=["docs/**"])
    assert _rels(disc) == ["src/main.py"]

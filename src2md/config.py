from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # pyright: ignore[reportMissingImports]

CONFIG_FILENAMES: tuple[str, ...] = (".src2md.toml", "src2md.toml")
PYPROJECT_FILENAME = "pyproject.toml"
IGNORE_FILENAME = ".src2md.ignore"


def normalize_extensions(raw: list[str] | str | None) -> set[str]:
    """``"RS, .ts"`` / ``["rs", ".TS"]`` -> ``{"rs", "ts"}``."""
    if raw is None:
        return set()
    items = raw.split(",") if isinstance(raw, str) else [str(x) for x in raw]
    out: set[str] = set()
    for item in items:
        ext = item.strip().lower().lstrip(".")
        if ext:
            out.add(ext)
    return out


@dataclass
class Config:
    # Bundle output; empty means "<root-name>_content_<timestamp>.md" in root.
    output: str = ""
    ignore_file: str | None = None
    # Lowercase extensions without the leading dot; empty allows everything.
    extensions: set[str] = field(default_factory=set)
    exclude: list[str] = field(default_factory=list)
    respect_gitignore: bool = True
    include_hidden: bool = False
    fail_fast: bool = False
    # Worker pool size for per-file IO. <=0 means auto.
    max_workers: int = 0
    # Prefix size inspected for binary classification.
    sample_bytes: int = 8192

    # Runtime-only (CLI), never read from config files.
    root: Path = field(default_factory=Path.cwd)
    paths: list[Path] = field(default_factory=list)
    verbosity: int = 0
    restore_input: Path | None = None
    restore_path: Path | None = None


def _find_config_path(root: Path) -> Path | None:
    root = root.resolve()
    for name in CONFIG_FILENAMES:
        p = root / name
        if p.exists():
            return p
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.exists():
        return pyproject
    return None


def _extract_section(data: Any, *, from_pyproject: bool) -> dict[str, Any]:
    section: dict[str, Any] = {}
    if not isinstance(data, dict):
        return section

    if not from_pyproject:
        own = data.get("src2md")
        if isinstance(own, dict):
            return own

    tool = data.get("tool")
    if isinstance(tool, dict):
        own2 = tool.get("src2md")
        if isinstance(own2, dict):
            return own2

    return section


def load_config(root: Path) -> Config:
    cfg = Config(root=root)
    cfg_path = _find_config_path(root)
    if cfg_path is None:
        return cfg

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    section = _extract_section(data, from_pyproject=cfg_path.name == PYPROJECT_FILENAME)

    out = section.get("output", cfg.output)
    if isinstance(out, str) and out.strip():
        cfg.output = out.strip()

    ign = section.get("ignore_file")
    if isinstance(ign, str) and ign.strip():
        cfg.ignore_file = ign.strip()

    exts = section.get("extensions")
    if isinstance(exts, (list, str)):
        cfg.extensions = normalize_extensions(exts)

    exc = section.get("exclude", cfg.exclude)
    if isinstance(exc, list):
        cfg.exclude = [str(x) for x in exc]

    cfg.respect_gitignore = bool(
        section.get("respect_gitignore", cfg.respect_gitignore)
    )
    cfg.include_hidden = bool(section.get("include_hidden", cfg.include_hidden))
    cfg.fail_fast = bool(section.get("fail_fast", cfg.fail_fast))

    max_workers = section.get("max_workers", cfg.max_workers)
    try:
        cfg.max_workers = int(max_workers)
    except Exception:
        pass

    sample = section.get("sample_bytes", cfg.sample_bytes)
    try:
        cfg.sample_bytes = max(1, int(sample))
    except Exception:
        pass

    return cfg

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ContentKind(str, Enum):
    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True)
class FileSource:
    """A file selected for bundling."""

    path: Path  # absolute path on disk
    rel: str  # posix path relative to the project root


@dataclass(frozen=True)
class Section:
    """One embedded file of a document."""

    relative_path: str
    kind: ContentKind
    body: bytes = b""  # always empty for binary sections
    size: int = 0  # byte size of the source file
    language: str = ""  # fence info string
    line: int = 0  # 1-based heading line when parsed; 0 when built from disk

    @property
    def is_binary(self) -> bool:
        return self.kind is ContentKind.BINARY

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


@dataclass(frozen=True)
class FileError:
    path: str
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class BundleResult:
    output: Path | None = None
    written: list[str] = field(default_factory=list)
    binary: list[str] = field(default_factory=list)
    filtered: list[tuple[str, str]] = field(default_factory=list)  # (rel, reason)
    errors: list[FileError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class RestoreResult:
    root: Path
    written: list[Path] = field(default_factory=list)
    binary: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

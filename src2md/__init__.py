"""Bundle a source tree into one Markdown document and restore it back."""

from __future__ import annotations

from .config import Config, load_config
from .errors import (
    EncodingError,
    FileIOError,
    MalformedDocumentError,
    PathTraversalError,
    Src2mdError,
)
from .fences import fence_length
from .mdparse import parse_document
from .model import BundleResult, ContentKind, FileSource, RestoreResult, Section
from .packer import bundle, bundle_files
from .security import resolve_target
from .unpacker import restore, restore_text
from .writer import render_section

__all__ = [
    "BundleResult",
    "Config",
    "ContentKind",
    "EncodingError",
    "FileIOError",
    "FileSource",
    "MalformedDocumentError",
    "PathTraversalError",
    "RestoreResult",
    "Section",
    "Src2mdError",
    "bundle",
    "bundle_files",
    "fence_length",
    "load_config",
    "parse_document",
    "render_section",
    "resolve_target",
    "restore",
    "restore_text",
]

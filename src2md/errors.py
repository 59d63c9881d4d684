from __future__ import annotations


class Src2mdError(Exception):
    """Base class for all src2md failures."""


class FileIOError(Src2mdError):
    """Reading a source file or writing a document/restored file failed."""

    def __init__(self, path: object, cause: BaseException | str) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"{self.path}: {cause}")


class EncodingError(Src2mdError, ValueError):
    """Content (or a path) cannot be represented as declared."""


class MalformedDocumentError(Src2mdError, ValueError):
    def __init__(
        self, message: str, *, line: int | None = None, path: str | None = None
    ) -> None:
        self.line = line
        self.path = path
        where = []
        if line is not None:
            where.append(f"line {line}")
        if path is not None:
            where.append(f"section {path!r}")
        suffix = f" ({', '.join(where)})" if where else ""
        super().__init__(f"{message}{suffix}")


class PathTraversalError(Src2mdError, ValueError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Refusing unsafe path {path!r}: {reason}")

"""Error taxonomy for context embedding.

Validation problems are recorded as ContextError values rather than raised,
so one build can report every problem at once. The ContextFailure exceptions
are raised only when the error policy decides to abort.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ContextErrorKind(str, Enum):
    """Kind of problem found for one path."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    TOO_LARGE = "too_large"
    TOO_MANY_FILES = "too_many_files"
    BINARY_FILE = "binary_file"
    ENCODING_ERROR = "encoding_error"
    IO_ERROR = "io_error"


# Soft conditions: expected filtering, never aborts a build
WARNING_KINDS = frozenset({ContextErrorKind.TOO_MANY_FILES})


@dataclass(frozen=True)
class ContextError:
    """A problem with one file or directory.

    Attributes:
        kind: What went wrong
        path: Offending file (or directory, for TOO_MANY_FILES)
        limit: Configured threshold (KB for TOO_LARGE, file count for TOO_MANY_FILES)
        size: Actual size in bytes (TOO_LARGE)
        count: Number of files skipped (TOO_MANY_FILES)
        detail: OS error text (IO_ERROR)
    """

    kind: ContextErrorKind
    path: Path
    limit: int | None = None
    size: int | None = None
    count: int | None = None
    detail: str | None = None

    @property
    def is_warning(self) -> bool:
        return self.kind in WARNING_KINDS

    @classmethod
    def not_found(cls, path: Path) -> ContextError:
        return cls(ContextErrorKind.NOT_FOUND, path)

    @classmethod
    def permission_denied(cls, path: Path) -> ContextError:
        return cls(ContextErrorKind.PERMISSION_DENIED, path)

    @classmethod
    def too_large(cls, path: Path, size: int, limit_kb: int) -> ContextError:
        return cls(ContextErrorKind.TOO_LARGE, path, limit=limit_kb, size=size)

    @classmethod
    def too_many_files(cls, directory: Path, skipped: int, limit: int) -> ContextError:
        return cls(ContextErrorKind.TOO_MANY_FILES, directory, limit=limit, count=skipped)

    @classmethod
    def binary_file(cls, path: Path) -> ContextError:
        return cls(ContextErrorKind.BINARY_FILE, path)

    @classmethod
    def encoding_error(cls, path: Path) -> ContextError:
        return cls(ContextErrorKind.ENCODING_ERROR, path)

    @classmethod
    def io_error(cls, path: Path, detail: str) -> ContextError:
        return cls(ContextErrorKind.IO_ERROR, path, detail=detail)

    @classmethod
    def from_os_error(cls, path: Path, error: OSError) -> ContextError:
        """Map a filesystem exception onto the taxonomy."""
        if isinstance(error, FileNotFoundError):
            return cls.not_found(path)
        if isinstance(error, PermissionError):
            return cls.permission_denied(path)
        return cls.io_error(path, error.strerror or str(error) or type(error).__name__)

    def __str__(self) -> str:
        if self.kind == ContextErrorKind.NOT_FOUND:
            return f"File not found: {self.path}"
        if self.kind == ContextErrorKind.PERMISSION_DENIED:
            return f"Permission denied: {self.path}"
        if self.kind == ContextErrorKind.TOO_LARGE:
            size_kb = (self.size or 0) / 1024
            return f"File too large: {self.path} ({size_kb:.1f} KB exceeds limit of {self.limit} KB)"
        if self.kind == ContextErrorKind.TOO_MANY_FILES:
            return (
                f"Too many files in directory: {self.path} "
                f"({self.count} file(s) skipped, limit is {self.limit} per directory)"
            )
        if self.kind == ContextErrorKind.BINARY_FILE:
            return f"Binary file skipped: {self.path}"
        if self.kind == ContextErrorKind.ENCODING_ERROR:
            return f"UTF-8 decoding error: {self.path}"
        return f"I/O error reading {self.path}: {self.detail}"


class ContextFailure(Exception):
    """Raised when the error policy aborts a context build."""

    def __init__(self, message: str, errors: list[ContextError], warnings: list[ContextError] | None = None):
        super().__init__(message)
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class ContextStrictError(ContextFailure):
    """Strict mode found hard errors. Carries every one of them."""

    def __init__(self, errors: list[ContextError], warnings: list[ContextError] | None = None):
        lines = "\n  ".join(str(e) for e in errors)
        super().__init__(
            f"Context processing failed with {len(errors)} error(s):\n  {lines}",
            errors,
            warnings,
        )


class ContextAbortedError(ContextFailure):
    """The approver declined to continue with the accepted files."""

    def __init__(
        self,
        errors: list[ContextError],
        warnings: list[ContextError] | None = None,
        reason: str = "Context processing aborted by user.",
    ):
        super().__init__(reason, errors, warnings)


class SettingsError(Exception):
    """A claw.yaml file could not be read or failed validation."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"Failed to parse {path}: {message}")
        self.path = path

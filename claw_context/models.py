"""Data models for context embedding.

Defines the values that flow through one context build:
- ErrorHandlingMode: Policy applied to validation failures
- ContextLimits: Safety limits and exclusion rules (immutable)
- ContextRequest: Root paths, recursion depth and limits for one build
- CandidateFile: A discovered file that has not been read yet
- FileContent: A validated file and its text
- ValidationOutcome: Accepted files plus hard errors and soft warnings
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from .errors import ContextError

DEFAULT_EXCLUDED_DIRECTORIES = (".git", "node_modules", "target")
DEFAULT_EXCLUDED_EXTENSIONS = ("exe", "bin", "so")


class ErrorHandlingMode(str, Enum):
    """How validation failures affect a context build.

    Modes:
    - STRICT: Any hard error aborts the build
    - FLEXIBLE: Hard errors are shown to an approver who decides
    - IGNORE: Errors are logged and the build proceeds
    """

    STRICT = "strict"
    FLEXIBLE = "flexible"
    IGNORE = "ignore"


class ContextLimits(BaseModel):
    """Safety limits and exclusion rules for context discovery."""

    model_config = ConfigDict(frozen=True)

    max_file_size_kb: int = Field(default=1024, ge=0, description="Largest file accepted, in KB")
    max_files_per_directory: int = Field(default=50, ge=1, description="Files kept directly inside one directory")
    error_handling_mode: ErrorHandlingMode = Field(default=ErrorHandlingMode.FLEXIBLE)
    excluded_directories: tuple[str, ...] = Field(default=DEFAULT_EXCLUDED_DIRECTORIES)
    excluded_extensions: tuple[str, ...] = Field(default=DEFAULT_EXCLUDED_EXTENSIONS)
    respect_gitignore: bool = Field(default=True, description="Prune entries matched by .gitignore/.ignore files")
    include_hidden: bool = Field(default=False, description="Walk dot-files and dot-directories")

    @field_validator("excluded_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = [value]
        return tuple(ext.strip().lstrip(".").lower() for ext in value if ext and ext.strip(". "))

    @field_validator("excluded_directories", mode="before")
    @classmethod
    def _normalize_directories(cls, value):
        if isinstance(value, str):
            value = [value]
        return tuple(name.strip().strip("/") for name in value if name and name.strip("/ "))

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_kb * 1024

    def is_excluded_extension(self, path: Path) -> bool:
        """Check a file's last suffix against the excluded extensions."""
        suffix = path.suffix
        if not suffix:
            return False
        return suffix[1:].lower() in self.excluded_extensions


@dataclass(frozen=True)
class ContextRequest:
    """One context build: which roots to scan, how deep, and under what limits.

    Attributes:
        paths: Root files or directories, in the order given (duplicates dropped)
        recurse_depth: Deepest subdirectory level to descend into.
            None means unbounded, 0 means only files directly inside each root.
        limits: Limits applied to every root
    """

    paths: tuple[Path, ...]
    recurse_depth: int | None = None
    limits: ContextLimits = field(default_factory=ContextLimits)

    def __post_init__(self) -> None:
        if self.recurse_depth is not None and self.recurse_depth < 0:
            raise ValueError(f"recurse_depth must be non-negative, got {self.recurse_depth}")
        unique: list[Path] = []
        for path in self.paths:
            path = Path(path)
            if path not in unique:
                unique.append(path)
        object.__setattr__(self, "paths", tuple(unique))

    @classmethod
    def from_strings(
        cls,
        paths: list[str],
        recurse_depth: int | None = None,
        limits: ContextLimits | None = None,
    ) -> ContextRequest:
        return cls(
            paths=tuple(Path(p) for p in paths),
            recurse_depth=recurse_depth,
            limits=limits or ContextLimits(),
        )


@dataclass(frozen=True)
class CandidateFile:
    """A discovered file, not yet validated.

    Attributes:
        path: Absolute path used for I/O
        relative_path: POSIX path relative to the originating root; display and sort key
        depth: Path segments below the root (root contents are 1, file roots are 0)
        size: Size in bytes at discovery time
        directory: Absolute parent directory the per-directory quota was applied to
    """

    path: Path
    relative_path: str
    depth: int
    size: int
    directory: Path


class FileContent(BaseModel):
    """A validated file with its content exactly as read."""

    path: Path
    relative_path: str
    content: str


@dataclass
class ValidationOutcome:
    """Accepted files plus everything that was rejected or truncated.

    Files are sorted by relative path. Errors and warnings are sorted by
    path so the report is stable across runs.
    """

    files: list[FileContent] = field(default_factory=list)
    errors: list[ContextError] = field(default_factory=list)
    warnings: list[ContextError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def sort(self) -> None:
        self.files.sort(key=lambda f: f.relative_path)
        self.errors.sort(key=lambda e: (str(e.path), e.kind.value))
        self.warnings.sort(key=lambda e: (str(e.path), e.kind.value))

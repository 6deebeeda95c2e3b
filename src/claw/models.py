# src/claw/models.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from claw.config import ClawConfig, ErrorHandlingMode


@dataclass(frozen=True)
class ContextConfig:
    """Immutable policy snapshot for one invocation."""
    paths: Tuple[Path, ...]
    recurse_depth: Optional[int]
    max_file_size_kb: int
    max_files_per_directory: int
    error_handling_mode: ErrorHandlingMode
    excluded_directories: Tuple[str, ...]
    excluded_extensions: Tuple[str, ...]

    @classmethod
    def from_claw_config(
        cls,
        claw_config: ClawConfig,
        paths: Sequence,
        recurse_depth: Optional[int] = None,
    ) -> "ContextConfig":
        return cls(
            paths=tuple(Path(p) for p in paths),
            recurse_depth=recurse_depth,
            max_file_size_kb=claw_config.max_file_size_kb,
            max_files_per_directory=claw_config.max_files_per_directory,
            error_handling_mode=claw_config.error_handling_mode,
            excluded_directories=tuple(claw_config.excluded_directories),
            excluded_extensions=tuple(claw_config.excluded_extensions),
        )


@dataclass(frozen=True)
class DiscoveredFile:
    path: Path
    size: int
    rel_path: str


@dataclass(frozen=True)
class FileContent:
    rel_path: str
    content: str


# --- Per-file problems found while validating context files ---
# These are values, not exceptions. The error handling mode decides what they mean.

@dataclass(frozen=True)
class ContextError:
    path: Path


@dataclass(frozen=True)
class PermissionDenied(ContextError):
    def __str__(self):
        return f"Permission denied: {self.path}"


@dataclass(frozen=True)
class FileTooLarge(ContextError):
    size: int
    limit: int

    def __str__(self):
        return f"File too large: {self.path} ({self.size} KB exceeds limit of {self.limit} KB)"


@dataclass(frozen=True)
class TooManyFiles(ContextError):
    count: int
    limit: int

    @property
    def directory(self) -> Path:
        return self.path

    def __str__(self):
        return f"Too many files in directory: {self.path} ({self.count} files exceeds limit of {self.limit})"


@dataclass(frozen=True)
class BinaryFile(ContextError):
    def __str__(self):
        return f"Binary file skipped: {self.path}"


@dataclass(frozen=True)
class Utf8Error(ContextError):
    def __str__(self):
        return f"UTF-8 decoding error: {self.path}"


@dataclass(frozen=True)
class IoError(ContextError):
    message: str

    def __str__(self):
        return f"I/O error reading {self.path}: {self.message}"


@dataclass
class ContextResult:
    files: List[FileContent] = field(default_factory=list)
    errors: List[ContextError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

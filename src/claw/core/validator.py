# src/claw/core/validator.py
import codecs
from pathlib import Path
from typing import Dict, Iterable

from claw.models import (
    ContextConfig,
    ContextResult,
    DiscoveredFile,
    FileContent,
    FileTooLarge,
    IoError,
    PermissionDenied,
    TooManyFiles,
    Utf8Error,
)

BINARY_SNIFF_BYTES = 8192

# A BOM marks text in that encoding even though UTF-16/32 contain null bytes.
_TEXT_BOMS = (
    codecs.BOM_UTF8,
    codecs.BOM_UTF32_LE,
    codecs.BOM_UTF32_BE,
    codecs.BOM_UTF16_LE,
    codecs.BOM_UTF16_BE,
)

MAGIC_NUMBERS = (b"%PDF", b"\x89PNG")


def looks_binary(chunk: bytes) -> bool:
    if chunk.startswith(_TEXT_BOMS):
        return False
    if b"\0" in chunk:
        return True
    return chunk.startswith(MAGIC_NUMBERS)


def is_binary_file(path: Path) -> bool:
    """Reads the first 8 KB and reports whether the content looks binary."""
    with path.open("rb") as f:
        return looks_binary(f.read(BINARY_SNIFF_BYTES))


def _io_error(path: Path, error: OSError):
    if isinstance(error, PermissionError):
        return PermissionDenied(path)
    return IoError(path, error.strerror or str(error))


def validate_and_read_files(files: Iterable[DiscoveredFile], config: ContextConfig) -> ContextResult:
    """
    Applies the size limit, the per-directory quota and binary detection to
    each discovered file, in order, and reads the survivors as UTF-8.

    Every input ends up in exactly one of result.files, result.errors or
    result.warnings.
    """
    result = ContextResult()
    dir_counts: Dict[Path, int] = {}

    for file in files:
        # A. Size (oversized files do not use a quota slot)
        size_kb = file.size // 1024
        if size_kb > config.max_file_size_kb:
            result.errors.append(FileTooLarge(file.path, size_kb, config.max_file_size_kb))
            continue

        # B. Per-directory quota, counted before comparing
        parent = file.path.parent
        count = dir_counts.get(parent, 0) + 1
        dir_counts[parent] = count
        if count > config.max_files_per_directory:
            result.errors.append(TooManyFiles(parent, count, config.max_files_per_directory))
            continue

        # C. Binary check
        try:
            if is_binary_file(file.path):
                result.warnings.append(f"Skipped binary file: {file.path}")
                continue
        except OSError as e:
            result.errors.append(_io_error(file.path, e))
            continue

        # D. Read
        try:
            content = file.path.read_bytes().decode("utf-8")
        except UnicodeDecodeError:
            result.errors.append(Utf8Error(file.path))
            continue
        except OSError as e:
            result.errors.append(_io_error(file.path, e))
            continue

        result.files.append(FileContent(rel_path=file.rel_path, content=content))

    return result

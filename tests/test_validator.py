# tests/test_validator.py
import codecs
from pathlib import Path

import pytest

from claw.config import ClawConfig
from claw.core.validator import is_binary_file, looks_binary, validate_and_read_files
from claw.models import (
    ContextConfig,
    DiscoveredFile,
    FileTooLarge,
    IoError,
    PermissionDenied,
    TooManyFiles,
    Utf8Error,
)


def make_config(**overrides) -> ContextConfig:
    return ContextConfig.from_claw_config(ClawConfig(**overrides), [])


def discovered(path: Path) -> DiscoveredFile:
    return DiscoveredFile(path=path, size=path.stat().st_size, rel_path=path.name)


def write(path: Path, data) -> DiscoveredFile:
    if isinstance(data, str):
        path.write_text(data, encoding="utf-8")
    else:
        path.write_bytes(data)
    return discovered(path)


# --- Size limit ---

def test_size_limit_uses_truncated_kilobytes(tmp_path):
    at_limit = write(tmp_path / "at_limit.txt", "a" * 2047)   # 1 KB after truncation
    over = write(tmp_path / "over.txt", "b" * 2048)           # 2 KB

    result = validate_and_read_files([at_limit, over], make_config(max_file_size_kb=1))

    assert [f.rel_path for f in result.files] == ["at_limit.txt"]
    assert result.errors == [FileTooLarge(tmp_path / "over.txt", 2, 1)]
    assert str(result.errors[0]) == f"File too large: {tmp_path / 'over.txt'} (2 KB exceeds limit of 1 KB)"


def test_oversized_files_do_not_use_quota_slots(tmp_path):
    files = [
        write(tmp_path / "big.txt", "x" * 4096),
        write(tmp_path / "a.txt", "a"),
        write(tmp_path / "b.txt", "b"),
    ]

    result = validate_and_read_files(files, make_config(max_file_size_kb=1, max_files_per_directory=2))

    assert [f.rel_path for f in result.files] == ["a.txt", "b.txt"]
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], FileTooLarge)


# --- Directory quota ---

def test_quota_rejects_every_file_after_the_limit(tmp_path):
    files = [write(tmp_path / f"{name}.txt", name) for name in "abcd"]

    result = validate_and_read_files(files, make_config(max_files_per_directory=2))

    assert [f.rel_path for f in result.files] == ["a.txt", "b.txt"]
    assert result.errors == [
        TooManyFiles(tmp_path, 3, 2),
        TooManyFiles(tmp_path, 4, 2),
    ]
    assert result.errors[0].directory == tmp_path
    assert "(3 files exceeds limit of 2)" in str(result.errors[0])


def test_quota_is_counted_per_directory(tmp_path):
    (tmp_path / "one").mkdir()
    (tmp_path / "two").mkdir()
    files = [
        write(tmp_path / "one" / "a.txt", "a"),
        write(tmp_path / "two" / "b.txt", "b"),
        write(tmp_path / "one" / "c.txt", "c"),
    ]

    result = validate_and_read_files(files, make_config(max_files_per_directory=1))

    assert [f.content for f in result.files] == ["a", "b"]
    assert result.errors == [TooManyFiles(tmp_path / "one", 2, 1)]


# --- Binary detection ---

def test_binary_file_is_a_warning_not_an_error(tmp_path):
    blob = write(tmp_path / "image.png", b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    text = write(tmp_path / "notes.txt", "hello")

    result = validate_and_read_files([blob, text], make_config())

    assert [f.rel_path for f in result.files] == ["notes.txt"]
    assert result.errors == []
    assert result.warnings == [f"Skipped binary file: {tmp_path / 'image.png'}"]


def test_null_byte_after_first_8kb_is_not_binary_but_still_valid_utf8(tmp_path):
    late_null = write(tmp_path / "late.txt", b"a" * 8192 + b"\x00")

    result = validate_and_read_files([late_null], make_config())

    assert len(result.files) == 1
    assert result.warnings == []


def test_document_magic_number_is_binary_without_null_bytes(tmp_path):
    pdf = write(tmp_path / "paper.pdf", b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n")

    result = validate_and_read_files([pdf], make_config())

    assert result.files == []
    assert result.errors == []
    assert result.warnings == [f"Skipped binary file: {tmp_path / 'paper.pdf'}"]


def test_looks_binary():
    assert looks_binary(b"abc\x00def")
    assert looks_binary(b"%PDF-1.7\n")
    assert looks_binary(b"\x89PNG\r\n\x1a\n")
    assert not looks_binary(b"plain text")
    assert not looks_binary(b"see %PDF-1.7 in the middle")
    assert not looks_binary(b"")
    assert not looks_binary(codecs.BOM_UTF16_LE + "hi".encode("utf-16-le"))


def test_is_binary_file(tmp_path):
    (tmp_path / "text.txt").write_text("Hello, world!", encoding="utf-8")
    (tmp_path / "binary.bin").write_bytes(bytes([0, 1, 2, 0, 3]))

    assert is_binary_file(tmp_path / "text.txt") is False
    assert is_binary_file(tmp_path / "binary.bin") is True


# --- Read errors ---

def test_invalid_utf8_is_an_error(tmp_path):
    bad = write(tmp_path / "latin1.txt", "café".encode("latin-1"))
    utf16 = write(tmp_path / "utf16.txt", codecs.BOM_UTF16_LE + "hi".encode("utf-16-le"))

    result = validate_and_read_files([bad, utf16], make_config())

    assert result.files == []
    assert result.errors == [Utf8Error(tmp_path / "latin1.txt"), Utf8Error(tmp_path / "utf16.txt")]
    assert str(result.errors[0]).startswith("UTF-8 decoding error: ")


def test_permission_failure_maps_to_permission_denied(tmp_path, monkeypatch):
    target = write(tmp_path / "locked.txt", "secret")

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)
    result = validate_and_read_files([target], make_config())

    assert result.errors == [PermissionDenied(tmp_path / "locked.txt")]
    assert result.files == []


def test_vanished_file_maps_to_io_error(tmp_path):
    gone = write(tmp_path / "gone.txt", "soon deleted")
    (tmp_path / "gone.txt").unlink()

    result = validate_and_read_files([gone], make_config())

    assert len(result.errors) == 1
    error = result.errors[0]
    assert isinstance(error, IoError)
    assert error.path == tmp_path / "gone.txt"
    assert str(error).startswith(f"I/O error reading {tmp_path / 'gone.txt'}: ")


# --- Accounting ---

def test_every_file_is_accounted_for_exactly_once(tmp_path):
    files = [
        write(tmp_path / "big.txt", "x" * 3000),
        write(tmp_path / "a.txt", "a"),
        write(tmp_path / "blob.bin", b"\x00\x01"),
        write(tmp_path / "bad.txt", b"\xc3\x28"),
        write(tmp_path / "b.txt", "b"),
        write(tmp_path / "c.txt", "c"),
    ]

    result = validate_and_read_files(files, make_config(max_file_size_kb=1, max_files_per_directory=4))

    assert len(result.files) + len(result.errors) + len(result.warnings) == len(files)
    assert [f.rel_path for f in result.files] == ["a.txt", "b.txt"]


def test_content_is_read_without_newline_translation(tmp_path):
    crlf = write(tmp_path / "crlf.txt", b"line1\r\nline2\r\n")

    result = validate_and_read_files([crlf], make_config())

    assert result.files[0].content == "line1\r\nline2\r\n"

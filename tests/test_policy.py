# tests/test_policy.py
import io
from pathlib import Path

import pytest

from claw.config import ErrorHandlingMode
from claw.core.policy import apply_error_policy
from claw.errors import ContextAbortedError
from claw.models import ContextResult, FileContent, FileTooLarge, Utf8Error


@pytest.fixture
def result_with_errors():
    return ContextResult(
        files=[FileContent(rel_path="ok.txt", content="fine")],
        errors=[FileTooLarge(Path("/p/big.txt"), 2048, 1024), Utf8Error(Path("/p/bad.txt"))],
        warnings=["Skipped binary file: /p/logo.png"],
    )


def answer_with(monkeypatch, reply):
    calls = []

    def fake_input(*args):
        calls.append(args)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    monkeypatch.setattr("builtins.input", fake_input)
    return calls


def refuse_input(*args):
    raise AssertionError("input() must not be called")


# --- No errors: every mode proceeds ---

@pytest.mark.parametrize("mode", list(ErrorHandlingMode))
def test_clean_result_proceeds_without_prompting(mode, monkeypatch):
    monkeypatch.setattr("builtins.input", refuse_input)
    stream = io.StringIO()
    result = ContextResult(files=[FileContent("a.txt", "a")], warnings=["Skipped binary file: x.bin"])

    apply_error_policy(result, mode, stream=stream)

    assert "Skipped binary file: x.bin" in stream.getvalue()


# --- Strict ---

def test_strict_aborts_with_every_error_listed(result_with_errors):
    with pytest.raises(ContextAbortedError) as exc_info:
        apply_error_policy(result_with_errors, ErrorHandlingMode.STRICT, stream=io.StringIO())

    message = str(exc_info.value)
    assert message.startswith("Context processing failed with 2 error(s):\n  ")
    assert "File too large: /p/big.txt (2048 KB exceeds limit of 1024 KB)" in message
    assert "UTF-8 decoding error: /p/bad.txt" in message


# --- Flexible ---

@pytest.mark.parametrize("reply", ["y", "yes", " Y \n", "YES"])
def test_flexible_proceeds_on_confirmation(result_with_errors, monkeypatch, reply):
    calls = answer_with(monkeypatch, reply)
    stream = io.StringIO()

    apply_error_policy(result_with_errors, ErrorHandlingMode.FLEXIBLE, stream=stream)

    report = stream.getvalue()
    assert len(calls) == 1
    assert "Errors (2):" in report
    assert "Warnings (1):" in report
    assert "Successfully processed 1 file(s)." in report
    assert "Do you want to continue with the available files? (y/n): " in report


@pytest.mark.parametrize("reply", ["n", "no", "", "maybe", EOFError()])
def test_flexible_aborts_on_anything_else(result_with_errors, monkeypatch, reply):
    answer_with(monkeypatch, reply)

    with pytest.raises(ContextAbortedError, match="aborted by user"):
        apply_error_policy(result_with_errors, ErrorHandlingMode.FLEXIBLE, stream=io.StringIO())


# --- Ignore ---

def test_ignore_reports_and_continues(result_with_errors, monkeypatch):
    monkeypatch.setattr("builtins.input", refuse_input)
    stream = io.StringIO()

    apply_error_policy(result_with_errors, ErrorHandlingMode.IGNORE, stream=stream)

    report = stream.getvalue()
    assert "Errors (ignored) (2):" in report
    assert "UTF-8 decoding error: /p/bad.txt" in report
    assert "Skipped binary file: /p/logo.png" in report


def test_ignore_continues_with_zero_accepted_files(monkeypatch):
    monkeypatch.setattr("builtins.input", refuse_input)
    result = ContextResult(errors=[Utf8Error(Path("only.txt"))])

    apply_error_policy(result, ErrorHandlingMode.IGNORE, stream=io.StringIO())


def test_diagnostics_default_to_stderr(result_with_errors, capsys):
    apply_error_policy(result_with_errors, ErrorHandlingMode.IGNORE)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Errors (ignored)" in captured.err

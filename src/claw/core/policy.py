# src/claw/core/policy.py
import sys
from typing import Callable, Dict, TextIO

from claw.config import ErrorHandlingMode
from claw.errors import ContextAbortedError
from claw.models import ContextResult

CONFIRM_ANSWERS = ("y", "yes")


def _print_list(title: str, items, stream: TextIO):
    if not items:
        return
    print(f"\n{title} ({len(items)}):", file=stream)
    for item in items:
        print(f"  • {item}", file=stream)


def _strict(result: ContextResult, stream: TextIO):
    messages = "\n  ".join(str(e) for e in result.errors)
    raise ContextAbortedError(
        f"Context processing failed with {len(result.errors)} error(s):\n  {messages}"
    )


def _flexible(result: ContextResult, stream: TextIO):
    print("\n⚠️  Context Processing Issues Detected:", file=stream)
    print("=====================================", file=stream)
    _print_list("Errors", result.errors, stream)
    _print_list("Warnings", result.warnings, stream)
    print(f"\nSuccessfully processed {len(result.files)} file(s).", file=stream)
    print("\nDo you want to continue with the available files? (y/n): ", end="", file=stream, flush=True)

    try:
        answer = input()
    except EOFError:
        answer = ""

    if answer.strip().lower() not in CONFIRM_ANSWERS:
        raise ContextAbortedError("Context processing aborted by user.")


def _ignore(result: ContextResult, stream: TextIO):
    _print_list("⚠️  Warnings", result.warnings, stream)
    _print_list("⚠️  Errors (ignored)", result.errors, stream)


_HANDLERS: Dict[ErrorHandlingMode, Callable[[ContextResult, TextIO], None]] = {
    ErrorHandlingMode.STRICT: _strict,
    ErrorHandlingMode.FLEXIBLE: _flexible,
    ErrorHandlingMode.IGNORE: _ignore,
}


def apply_error_policy(result: ContextResult, mode: ErrorHandlingMode, stream: TextIO = None):
    """
    Decides whether context processing may continue with `result.files`.

    Returns normally to continue and raises ContextAbortedError to stop.
    Without errors every mode continues and only reports warnings. With
    errors, Strict aborts, Flexible asks on stdin and Ignore reports and
    continues.
    """
    stream = stream or sys.stderr
    if not result.errors:
        _print_list("⚠️  Warnings", result.warnings, stream)
        return
    _HANDLERS[mode](result, stream)

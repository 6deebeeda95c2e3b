# tests/test_runner.py
import io

import pytest

from claw.config import ClawConfig, ReceiverType
from claw.errors import LLMCommandError, ScriptError
from claw.runner import (
    ClaudeCliReceiver,
    GenericReceiver,
    check_prompt_size_warning,
    create_receiver,
    execute_context_scripts,
    run_pass_through,
)
from claw.utils.tokenizer import Tokenizer

PROMPT = "Review this:\n  it's got 'quotes' and spaces"


# --- Receivers ---

def test_prompt_is_piped_to_stdin_without_placeholder(tmp_path):
    out = tmp_path / "stdin.txt"
    receiver = GenericReceiver("sh", f"-c 'cat > \"{out}\"'")

    assert receiver.uses_argument is False
    receiver.send_prompt(PROMPT)

    assert out.read_text(encoding="utf-8") == PROMPT


def test_prompt_is_substituted_as_a_single_argument(tmp_path):
    out = tmp_path / "arg.txt"
    receiver = GenericReceiver("sh", f"-c 'printf %s \"$0\" > \"{out}\"' {{{{prompt}}}}")

    assert receiver.uses_argument is True
    receiver.send_prompt(PROMPT)

    assert out.read_text(encoding="utf-8") == PROMPT


def test_non_zero_exit_is_reported():
    receiver = GenericReceiver("sh", "-c 'exit 3'")

    with pytest.raises(LLMCommandError, match="non-zero status: 3") as exc_info:
        receiver.send_prompt("ignored")
    assert exc_info.value.returncode == 3


def test_missing_executable():
    receiver = GenericReceiver("definitely-not-an-llm-binary-xyz")

    with pytest.raises(LLMCommandError, match="not found in your PATH"):
        receiver.send_prompt("hello")


def test_unparseable_template():
    receiver = GenericReceiver("sh", "-c 'unterminated")

    with pytest.raises(LLMCommandError, match="prompt_arg_template"):
        receiver.send_prompt("hello")


def test_create_receiver():
    generic = create_receiver(ClawConfig(llm_command="llm", prompt_arg_template="-p {{prompt}}"))
    assert isinstance(generic, GenericReceiver)
    assert generic.llm_command == "llm"
    assert generic.prompt_arg_template == "-p {{prompt}}"

    claude = create_receiver(ClawConfig(llm_command="llm", receiver_type=ReceiverType.CLAUDE_CLI))
    assert isinstance(claude, ClaudeCliReceiver)
    assert claude.llm_command == "claude"
    assert claude.name == "ClaudeCli"


def test_pass_through_returns_exit_status():
    assert run_pass_through(ClawConfig(llm_command="true")) == 0
    assert run_pass_through(ClawConfig(llm_command="false")) != 0


# --- Large prompt warning ---

def test_no_warning_for_small_prompt_or_stdin_mode():
    stream = io.StringIO()
    big = "x" * (1024 * 1024 + 1)

    assert check_prompt_size_warning("small", "{{prompt}}", stream=stream) is False
    assert check_prompt_size_warning(big, "--print", stream=stream) is False
    assert stream.getvalue() == ""


def test_warning_for_large_prompt_in_argument_mode(monkeypatch):
    monkeypatch.setattr(Tokenizer, "count", staticmethod(lambda text: 42))
    stream = io.StringIO()

    assert check_prompt_size_warning("x" * (1024 * 1024 + 1), "{{prompt}}", stream=stream) is True
    assert "over 1MB (~42 tokens)" in stream.getvalue()


# --- Context scripts ---

def test_execute_context_scripts_strips_output():
    outputs = execute_context_scripts({"greeting": "printf '  hi there \\n\\n'", "pipe": "echo a b | wc -w"})

    assert outputs == {"greeting": "hi there", "pipe": "2"}


def test_execute_context_scripts_failure_includes_stderr():
    with pytest.raises(ScriptError, match="Context script 'bad'") as exc_info:
        execute_context_scripts({"bad": "echo broken >&2; exit 1"})

    assert "broken" in str(exc_info.value)


def test_tokenizer_falls_back_to_character_estimate(monkeypatch):
    from claw.utils import tokenizer

    def unavailable(name):
        raise ValueError(f"no encoding {name}")

    monkeypatch.setattr(tokenizer.tiktoken, "get_encoding", unavailable)
    tokenizer._load_encoding.cache_clear()
    try:
        assert Tokenizer.count("abcdefgh") == 2
    finally:
        tokenizer._load_encoding.cache_clear()

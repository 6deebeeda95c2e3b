# src/claw/runner.py
"""
Hands rendered prompts to the external LLM command-line tool and runs the
shell commands behind a goal's context scripts.
"""
import shlex
import shutil
import subprocess
import sys
from typing import Dict, List

from claw.config import PROMPT_PLACEHOLDER, ClawConfig, ReceiverType
from claw.errors import LLMCommandError, ScriptError
from claw.utils.tokenizer import Tokenizer

LARGE_PROMPT_BYTES = 1024 * 1024


def _resolve_executable(command: str) -> str:
    executable = shutil.which(command)
    if executable is None:
        raise LLMCommandError(
            f"LLM command '{command}' not found in your PATH. "
            "Please make sure it's installed and accessible."
        )
    return executable


def _split_template(template: str) -> List[str]:
    try:
        return shlex.split(template)
    except ValueError as e:
        raise LLMCommandError(f"Could not parse 'prompt_arg_template' from your config: {e}")


class PromptReceiver:
    """Delivers a rendered prompt to some target."""

    name = "base"

    def send_prompt(self, prompt: str) -> None:
        raise NotImplementedError


class GenericReceiver(PromptReceiver):
    """
    Runs an arbitrary CLI. When the argument template contains ``{{prompt}}``
    the prompt is substituted into the arguments; otherwise it is piped to
    the command's stdin.
    """

    name = "Generic"

    def __init__(self, llm_command: str, prompt_arg_template: str = PROMPT_PLACEHOLDER):
        self.llm_command = llm_command
        self.prompt_arg_template = prompt_arg_template

    @property
    def uses_argument(self) -> bool:
        return PROMPT_PLACEHOLDER in self.prompt_arg_template

    def build_command(self, prompt: str) -> List[str]:
        args = _split_template(self.prompt_arg_template)
        if self.uses_argument:
            args = [arg.replace(PROMPT_PLACEHOLDER, prompt) for arg in args]
        return [_resolve_executable(self.llm_command), *args]

    def send_prompt(self, prompt: str) -> None:
        command = self.build_command(prompt)
        try:
            if self.uses_argument:
                completed = subprocess.run(command)
            else:
                completed = subprocess.run(command, input=prompt.encode("utf-8"))
        except OSError as e:
            raise LLMCommandError(f"Failed to execute LLM command '{command[0]}': {e}") from e

        if completed.returncode != 0:
            raise LLMCommandError(
                f"LLM command '{command[0]}' exited with non-zero status: {completed.returncode}",
                returncode=completed.returncode,
            )


class ClaudeCliReceiver(GenericReceiver):
    """GenericReceiver pinned to the `claude` executable."""

    name = "ClaudeCli"

    def __init__(self, prompt_arg_template: str = PROMPT_PLACEHOLDER):
        super().__init__("claude", prompt_arg_template)


def create_receiver(config: ClawConfig) -> PromptReceiver:
    if config.receiver_type == ReceiverType.CLAUDE_CLI:
        return ClaudeCliReceiver(config.prompt_arg_template)
    return GenericReceiver(config.llm_command, config.prompt_arg_template)


def check_prompt_size_warning(prompt: str, template: str, stream=None) -> bool:
    """Warns when a prompt over 1 MB is about to be passed as an argument."""
    if PROMPT_PLACEHOLDER not in template:
        return False
    if len(prompt.encode("utf-8")) <= LARGE_PROMPT_BYTES:
        return False
    tokens = Tokenizer.count(prompt)
    print(
        f"⚠️  Warning: Your prompt is over 1MB (~{tokens} tokens). Consider removing "
        f"{PROMPT_PLACEHOLDER} from prompt_arg_template to use stdin for better handling "
        "of large contexts.",
        file=stream or sys.stderr,
    )
    return True


def execute_context_scripts(scripts: Dict[str, str]) -> Dict[str, str]:
    """Runs each script with `sh -c` and returns its stripped stdout by name."""
    outputs: Dict[str, str] = {}
    for name, command in scripts.items():
        try:
            completed = subprocess.run(["sh", "-c", command], capture_output=True)
        except OSError as e:
            raise ScriptError(f"Failed to execute context script '{name}': {e}") from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace")
            raise ScriptError(
                f"Context script '{name}' (`{command}`) failed with status {completed.returncode}:\n{stderr}"
            )
        try:
            outputs[name] = completed.stdout.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise ScriptError(f"Script output for '{name}' was not valid UTF-8") from e
    return outputs


def run_pass_through(config: ClawConfig) -> int:
    """Runs the LLM command without arguments and returns its exit status."""
    executable = _resolve_executable(config.llm_command)
    try:
        return subprocess.run([executable]).returncode
    except OSError as e:
        raise LLMCommandError(f"Failed to execute LLM command '{executable}': {e}") from e

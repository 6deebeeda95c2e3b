# src/claw/authoring.py
"""
`claw add`: asks the configured LLM to write a new goal's prompt.yaml into
the chosen config directory.
"""
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from claw.config import GOAL_FILE_NAME, LOCAL_DIR_NAME, ClawConfig, ConfigPaths, global_config_dir
from claw.errors import ClawError, TemplateRenderError
from claw.runner import create_receiver

ADD_GOAL_TEMPLATE = """\
You are helping the user create a new goal for claw, a goal-driven wrapper
around LLM command-line tools.

Create the directory {{ save_path }} if it does not exist and write the goal
definition to {{ save_path }}/{{ goal_file }}.

The goal is named "{{ goal_name }}". Start by asking the user what the goal
should accomplish, which inputs it needs and what output they expect.

{{ goal_file }} is YAML with these fields:

  name: short human-readable title (required)
  description: one line shown by `claw list` (optional)
  parameters: list of inputs (optional), each with
    name, description, required (true/false),
    type (string, number or boolean; documentation only) and default
  context_scripts: mapping of name to shell command (optional); each
    command's trimmed stdout is available as {% raw %}{{ Context.<name> }}{% endraw %}
  prompt: the Jinja2 prompt template (required)

Inside the prompt and context scripts, parameters are referenced as
{% raw %}{{ Args.<name> }}{% endraw %}. Undefined names are an error, so give optional
parameters a default.

Example:

name: Code Review
description: Reviews the current changes
parameters:
  - name: focus
    description: What to pay attention to
    required: false
    default: correctness
context_scripts:
  diff: git diff --stat
prompt: |
  Review these changes with a focus on {% raw %}{{ Args.focus }}{% endraw %}.
  {% raw %}{{ Context.diff }}{% endraw %}

When the file is written, tell the user they can run it with
`claw {{ goal_name }}` or inspect it with `claw {{ goal_name }} --explain`.
"""


def resolve_goals_dir(paths: ConfigPaths, local: bool = False, global_: bool = False) -> Path:
    """
    Picks the config directory a new goal is saved under. `--local` creates
    `.claw` in the working directory when none exists, `--global` creates the
    global config directory. Without either flag an existing local directory
    wins over the global one.
    """
    if local:
        base = paths.local or Path(LOCAL_DIR_NAME)
    elif global_:
        base = paths.global_ or global_config_dir()
    else:
        base = paths.local or paths.global_ or global_config_dir()

    try:
        base.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ClawError(f"Failed to create config directory {base}: {e}") from e
    return base / "goals"


def render_add_prompt(goal_name: str, save_path: Path) -> str:
    env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)
    try:
        return env.from_string(ADD_GOAL_TEMPLATE).render(
            goal_name=goal_name,
            save_path=save_path,
            goal_file=GOAL_FILE_NAME,
        )
    except TemplateError as e:
        raise TemplateRenderError(f"Failed to render the goal creation prompt: {e}") from e


def add_goal(
    goal_name: str,
    claw_config: ClawConfig,
    paths: ConfigPaths,
    local: bool = False,
    global_: bool = False,
) -> Path:
    if not goal_name or "/" in goal_name or goal_name in (".", ".."):
        raise ClawError(f"Invalid goal name '{goal_name}'")

    save_path = resolve_goals_dir(paths, local, global_) / goal_name
    if (save_path / GOAL_FILE_NAME).exists():
        raise ClawError(f"Goal '{goal_name}' already exists at {save_path}")

    print(f"Creating goal '{goal_name}' in {save_path}")
    print(f"Handing off to {claw_config.llm_command} to write {GOAL_FILE_NAME}...")
    create_receiver(claw_config).send_prompt(render_add_prompt(goal_name, save_path))
    return save_path

# src/claw/render.py
"""
Builds the final prompt for a goal: validated template arguments, context
script output, the rendered Jinja2 template and, when context paths are
given, the formatted file bundle appended after a blank line.
"""
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from claw.config import ClawConfig, ConfigPaths, LoadedGoal, find_and_load_goal
from claw.core.formatter import format_context
from claw.core.policy import apply_error_policy
from claw.core.scanner import discover_files
from claw.core.validator import validate_and_read_files
from claw.errors import GoalArgumentError, TemplateRenderError
from claw.models import ContextConfig
from claw.runner import execute_context_scripts
from claw.validation import ParameterValidator


def parse_goal_args(args: Sequence[str]) -> Dict[str, str]:
    """Parses `--key=value`, `--key value` and bare `--flag` (set to "true")."""
    parsed: Dict[str, str] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if not arg.startswith("--"):
            raise GoalArgumentError(
                f"Invalid goal argument: '{arg}'. All goal arguments must be flags starting with '--'."
            )
        key_part = arg[2:]
        if "=" in key_part:
            key, value = key_part.split("=", 1)
            parsed[key] = value
            i += 1
        elif i + 1 >= len(args) or args[i + 1].startswith("--"):
            parsed[key_part] = "true"
            i += 1
        else:
            parsed[key_part] = args[i + 1]
            i += 2
    return parsed


def create_environment(goal_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(goal_dir)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_context_scripts(env: Environment, scripts: Dict[str, str], args: Dict[str, str]) -> Dict[str, str]:
    rendered = {}
    for name, script in scripts.items():
        try:
            rendered[name] = env.from_string(script).render(Args=args)
        except TemplateError as e:
            raise TemplateRenderError(f"Failed to render context script '{name}': {e}") from e
    return rendered


def build_context_section(context_config: ContextConfig, cwd: Optional[Path] = None) -> str:
    """Discover, validate, gate and format the context files."""
    files = discover_files(context_config, cwd=cwd)
    result = validate_and_read_files(files, context_config)
    apply_error_policy(result, context_config.error_handling_mode)
    return format_context(result, context_config)


def render_goal(
    goal: LoadedGoal,
    goal_name: str,
    claw_config: ClawConfig,
    template_args: Sequence[str] = (),
    context_paths: Sequence = (),
    recurse_depth: Optional[int] = None,
    cwd: Optional[Path] = None,
) -> str:
    args = ParameterValidator(goal.config.parameters, goal_name).validate(parse_goal_args(template_args))

    env = create_environment(goal.directory)
    scripts = render_context_scripts(env, goal.config.context_scripts, args)
    script_outputs = execute_context_scripts(scripts)

    try:
        prompt = env.from_string(goal.config.prompt).render(Args=args, Context=script_outputs)
    except TemplateError as e:
        raise TemplateRenderError(f"Failed to render prompt for goal '{goal_name}': {e}") from e

    if context_paths:
        context_config = ContextConfig.from_claw_config(claw_config, context_paths, recurse_depth)
        prompt += "\n\n" + build_context_section(context_config, cwd=cwd)

    return prompt


def render_goal_prompt(
    goal_name: str,
    claw_config: ClawConfig,
    template_args: Sequence[str] = (),
    context_paths: Sequence = (),
    recurse_depth: Optional[int] = None,
    paths: Optional[ConfigPaths] = None,
) -> str:
    goal = find_and_load_goal(goal_name, paths)
    return render_goal(goal, goal_name, claw_config, template_args, context_paths, recurse_depth)


def explain_goal(goal: LoadedGoal, goal_name: str) -> str:
    config = goal.config
    lines: List[str] = [f"{goal_name} - {config.name}"]
    if config.description:
        lines.append(f"  {config.description}")
    lines.append("")
    if not config.parameters:
        lines.append("Parameters: accepts arbitrary parameters")
        return "\n".join(lines)

    lines.append("Parameters:")
    for param in config.parameters:
        flag = f"  --{param.name}"
        if param.param_type:
            flag += f" <{param.param_type.value}>"
        flag += " (required)" if param.required else " (optional)"
        if param.default is not None:
            flag += f" [default: {param.default}]"
        lines.append(flag)
        lines.append(f"      {param.description}")
    return "\n".join(lines)

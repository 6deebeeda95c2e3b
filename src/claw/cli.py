# src/claw/cli.py
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from claw.authoring import add_goal
from claw.config import ConfigPaths, find_all_goals, find_and_load_goal, load_claw_config
from claw.errors import ClawError
from claw.render import explain_goal, render_goal
from claw.runner import check_prompt_size_warning, create_receiver, run_pass_through

SUBCOMMANDS = ("add", "dry-run", "list", "pass")


def _depth(value: str) -> int:
    depth = int(value)
    if depth < 0:
        raise argparse.ArgumentTypeError("recursion depth must be >= 0")
    return depth


def _add_context_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "-c", "--context",
        type=Path,
        nargs="+",
        action="extend",
        default=[],
        help="Files or directories to include as context",
    )
    parser.add_argument(
        "-d", "--recurse-depth", "--recurse_depth",
        dest="recurse_depth",
        type=_depth,
        default=None,
        help="Maximum recursion depth when scanning directories (default: unlimited)",
    )


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="claw",
        description="A goal-driven, context-aware wrapper for LLM command-line tools.",
        epilog="Goal arguments go after '--', e.g. claw review -- --scope auth. "
               f"Subcommands: {', '.join(SUBCOMMANDS)}.",
    )
    parser.add_argument("goal", nargs="?", help="Name of the goal to run")
    _add_context_args(parser)
    parser.add_argument("-e", "--explain", action="store_true", help="Show the goal's parameters")
    return parser


def create_subcommand_parser():
    parser = argparse.ArgumentParser(prog="claw")
    sub = parser.add_subparsers(dest="command", required=True)

    dry_run = sub.add_parser("dry-run", help="Render a goal's prompt without running the LLM")
    dry_run.add_argument("goal", help="Name of the goal to render")
    dry_run.add_argument("-o", "--output", type=Path, default=None, help="Write the prompt to this file")
    _add_context_args(dry_run)

    list_cmd = sub.add_parser("list", help="List all available goals")
    scope = list_cmd.add_mutually_exclusive_group()
    scope.add_argument("--local", action="store_true", help="Show only local goals")
    scope.add_argument("--global", dest="global_", action="store_true", help="Show only global goals")

    sub.add_parser("pass", help="Run the LLM command directly without any modifications")

    add = sub.add_parser("add", help="Create a new goal with the help of the LLM")
    add.add_argument("name", help="Name of the goal to create")
    location = add.add_mutually_exclusive_group()
    location.add_argument("--local", action="store_true", help="Save in the local .claw directory")
    location.add_argument("--global", dest="global_", action="store_true", help="Save in the global config directory")
    return parser


def split_goal_args(argv: List[str]) -> Tuple[List[str], List[str]]:
    """Everything after the first '--' belongs to the goal template."""
    if "--" in argv:
        i = argv.index("--")
        return argv[:i], argv[i + 1:]
    return argv, []


def output_prompt(prompt: str, output_file: Optional[Path] = None):
    if output_file is None:
        # No trailing newline: stdout matches the exact LLM input.
        sys.stdout.write(prompt)
        sys.stdout.flush()
        return
    try:
        with open(output_file, "w", encoding="utf-8", newline="") as f:
            f.write(prompt)
    except OSError as e:
        raise ClawError(f"Failed to write dry run output to {output_file}: {e}") from e
    print(f"Dry run output written to {output_file}")


def print_goal_list(paths: ConfigPaths, local_only: bool = False, global_only: bool = False):
    goals = find_all_goals(paths)
    if not goals:
        print("No goals found.")
        return

    sections = []
    if not global_only:
        sections.append(("Local", "local", paths.local))
    if not local_only:
        sections.append(("Global", "global", paths.global_))

    first = True
    for title, source, location in sections:
        selected = [g for g in goals if g.source == source]
        if not selected:
            continue
        if not first:
            print()
        first = False
        print(f"{title} Goals ({location}):")
        print()
        for goal in selected:
            print(f"  {goal.name} - {goal.config.name}")
            if goal.config.description:
                print(f"    {goal.config.description}")
            params = goal.config.parameters
            if not params:
                print("    Parameters: accepts arbitrary parameters")
            else:
                required = sum(1 for p in params if p.required)
                print(f"    Parameters: {required} required, {len(params) - required} optional")


def run(argv: List[str]):
    argv, template_args = split_goal_args(argv)
    paths = ConfigPaths.discover()
    claw_config = load_claw_config(paths)

    if argv and argv[0] in SUBCOMMANDS:
        args = create_subcommand_parser().parse_args(argv)
        if args.command == "dry-run":
            goal = find_and_load_goal(args.goal, paths)
            prompt = render_goal(
                goal, args.goal, claw_config, template_args, args.context, args.recurse_depth
            )
            output_prompt(prompt, args.output)
        elif args.command == "list":
            print_goal_list(paths, args.local, args.global_)
        elif args.command == "pass":
            returncode = run_pass_through(claw_config)
            if returncode != 0:
                sys.exit(returncode)
        elif args.command == "add":
            add_goal(args.name, claw_config, paths, args.local, args.global_)
        return

    args = create_arg_parser().parse_args(argv)
    if not args.goal:
        print("No goal given")
        print_goal_list(paths)
        return

    goal = find_and_load_goal(args.goal, paths)
    if args.explain:
        print(explain_goal(goal, args.goal))
        return

    prompt = render_goal(goal, args.goal, claw_config, template_args, args.context, args.recurse_depth)
    check_prompt_size_warning(prompt, claw_config.prompt_arg_template)
    create_receiver(claw_config).send_prompt(prompt)


def main(argv: Optional[List[str]] = None):
    try:
        run(sys.argv[1:] if argv is None else list(argv))

    except ClawError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

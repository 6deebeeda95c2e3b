# src/claw/core/formatter.py
from claw.core.tree import generate_tree
from claw.models import ContextConfig, ContextResult

CONTEXT_HEADER = """# Context Files

The following files were provided as additional context for this request.
The directory structure shows how the files relate to each other, and each
file's full content is listed below it under its relative path."""


def format_notes(config: ContextConfig) -> str:
    depth = "unlimited" if config.recurse_depth is None else str(config.recurse_depth)
    return (
        "## Notes\n"
        f"- Maximum file size: {config.max_file_size_kb} KB\n"
        f"- Maximum files per directory: {config.max_files_per_directory}\n"
        f"- Excluded directories: {', '.join(config.excluded_directories)}\n"
        f"- Excluded extensions: {', '.join(config.excluded_extensions)}\n"
        f"- Recursion depth: {depth}\n\n"
    )


def format_context(result: ContextResult, config: ContextConfig) -> str:
    """
    Renders the accepted files as a markdown bundle: header, notes, directory
    tree and one fenced block per file in discovery order. The output depends
    only on the arguments.
    """
    parts = [CONTEXT_HEADER, "\n\n", format_notes(config), "---\n\n"]

    parts.append("## Directory Structure\n\n```\n")
    parts.append(generate_tree(f.rel_path for f in result.files))
    parts.append("```\n\n---\n\n")

    parts.append("## Files\n\n")
    for fc in result.files:
        parts.append(f"### {fc.rel_path}\n\n```\n")
        parts.append(fc.content)
        if not fc.content.endswith("\n"):
            parts.append("\n")
        parts.append("```\n\n")

    return "".join(parts)

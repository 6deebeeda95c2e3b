# src/claw/core/tree.py
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Optional

# A node is either None (file) or a dict of child name -> node (directory).
Tree = Dict[str, Optional[dict]]


def build_tree(file_paths: Iterable[str]) -> Tree:
    tree: Tree = {}
    for path in file_paths:
        parts = PurePosixPath(path).parts
        if not parts:
            continue
        level = tree
        for part in parts[:-1]:
            node = level.get(part)
            if not isinstance(node, dict):
                node = level[part] = {}
            level = node
        level.setdefault(parts[-1], None)
    return tree


def _label(name: str, node: Optional[dict]) -> str:
    if node is None or name.endswith("/"):
        return name
    return f"{name}/"


def render_tree(tree: Tree) -> str:
    """Renders each top-level entry as its own tree, siblings sorted by name."""
    lines: List[str] = []

    def _render_children(subtree: Tree, prefix: str):
        entries = sorted(subtree.items())
        for i, (name, node) in enumerate(entries):
            is_last = i == len(entries) - 1
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{_label(name, node)}")
            if node:
                _render_children(node, prefix + ("    " if is_last else "│   "))

    for name, node in sorted(tree.items()):
        lines.append(_label(name, node))
        if node:
            _render_children(node, "")

    return "\n".join(lines) + "\n"


def generate_tree(file_paths: Iterable[str]) -> str:
    paths = list(file_paths)
    if not paths:
        return "(no files)\n"
    return render_tree(build_tree(paths))

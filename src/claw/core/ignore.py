# src/claw/core/ignore.py
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Dict, FrozenSet, Iterable, List, Optional

import pathspec

from claw.errors import DiscoveryError

IGNORE_FILE_NAMES = (".gitignore", ".ignore")


@dataclass(frozen=True)
class ExclusionPolicy:
    """Static directory-name and extension exclusions applied to directory scans."""
    excluded_directories: FrozenSet[str]
    excluded_extensions: FrozenSet[str]

    @classmethod
    def from_config(cls, config) -> "ExclusionPolicy":
        return cls(
            excluded_directories=frozenset(config.excluded_directories),
            excluded_extensions=frozenset(e.lstrip(".") for e in config.excluded_extensions),
        )

    def is_excluded_directory(self, name: str) -> bool:
        return name in self.excluded_directories

    def is_excluded_extension(self, path: PurePath) -> bool:
        suffix = path.suffix
        return bool(suffix) and suffix[1:] in self.excluded_extensions

    def has_excluded_ancestor(self, path: PurePath) -> bool:
        return any(part in self.excluded_directories for part in path.parts)


def scope_patterns(lines: Iterable[str], prefix: str) -> List[str]:
    """
    Rewrites gitignore lines found in `prefix` so they can be matched against
    paths relative to the scan base. Unanchored patterns match at any depth
    below `prefix`, anchored ones (containing a slash) only directly under it.
    """
    scoped = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue
        if not prefix:
            scoped.append(line)
            continue

        negated = line.startswith("!")
        body = line[1:] if negated else line
        anchored = "/" in body.rstrip("/")
        if anchored:
            pattern = f"{prefix}/{body.lstrip('/')}"
        else:
            pattern = f"{prefix}/**/{body}"
        scoped.append(("!" if negated else "") + pattern)
    return scoped


def find_ignore_base(root: Path) -> Path:
    """
    Returns the enclosing repository root (a directory holding `.git`) so that
    ignore files above the scanned directory still apply. Outside a repository
    the scanned directory itself is the base.
    """
    for candidate in [root, *root.parents]:
        if (candidate / ".git").exists():
            return candidate
    return root


class IgnoreRules:
    """
    Hierarchical .gitignore / .ignore rules for one scan, built with pathspec's
    GitIgnoreSpec.
    Each directory's spec is its parent's patterns followed by its own, so the
    deeper file wins because the last matching pattern applies.
    """

    def __init__(self, base: Path):
        self.base = base
        self._lines: Dict[Path, List[str]] = {}
        self._specs: Dict[Path, pathspec.GitIgnoreSpec] = {}

    def _read_patterns(self, directory: Path) -> List[str]:
        prefix = directory.relative_to(self.base).as_posix()
        if prefix == ".":
            prefix = ""
        lines: List[str] = []
        for name in IGNORE_FILE_NAMES:
            ignore_file = directory / name
            if not ignore_file.is_file():
                continue
            try:
                with open(ignore_file, "r", encoding="utf-8", errors="replace") as f:
                    lines.extend(scope_patterns(f.readlines(), prefix))
            except OSError as e:
                raise DiscoveryError(f"Failed to read {ignore_file}: {e}") from e
        return lines

    def _lines_for(self, directory: Path) -> List[str]:
        cached = self._lines.get(directory)
        if cached is not None:
            return cached
        inherited: List[str] = []
        if directory != self.base and self.base in directory.parents:
            inherited = self._lines_for(directory.parent)
        lines = inherited + self._read_patterns(directory)
        self._lines[directory] = lines
        return lines

    def spec_for(self, directory: Path) -> pathspec.GitIgnoreSpec:
        spec = self._specs.get(directory)
        if spec is None:
            spec = pathspec.GitIgnoreSpec.from_lines(self._lines_for(directory))
            self._specs[directory] = spec
        return spec

    def is_ignored(self, path: Path, is_directory: bool = False) -> bool:
        rel = path.relative_to(self.base).as_posix()
        if is_directory:
            rel += "/"
        return self.spec_for(path.parent).match_file(rel)


def load_ignore_rules(root: Path, base: Optional[Path] = None) -> IgnoreRules:
    return IgnoreRules(base or find_ignore_base(root))

# src/claw/core/scanner.py
import os
from pathlib import Path
from typing import Iterator, List, Optional

from claw.core.ignore import ExclusionPolicy, IgnoreRules, load_ignore_rules
from claw.errors import DiscoveryError
from claw.models import ContextConfig, DiscoveredFile


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _relative_to_cwd(path: Path, cwd: Path) -> str:
    try:
        return path.relative_to(cwd).as_posix()
    except ValueError:
        return path.as_posix()


def _describe(path: Path, cwd: Path) -> DiscoveredFile:
    try:
        size = path.stat().st_size
    except OSError as e:
        raise DiscoveryError(f"Failed to read metadata for {path}: {e}") from e
    return DiscoveredFile(path=path, size=size, rel_path=_relative_to_cwd(path, cwd))


class DirectoryScanner:
    """
    Walks one directory argument. Hidden entries, ignore-file matches,
    excluded directory names and excluded extensions are skipped, and the
    walk stops `recurse_depth` directory levels below the root.
    """

    def __init__(
        self,
        root: Path,
        policy: ExclusionPolicy,
        recurse_depth: Optional[int],
        cwd: Path,
        ignore_rules: Optional[IgnoreRules] = None,
        given_path: Optional[Path] = None,
    ):
        self.root = root
        self.policy = policy
        self.recurse_depth = recurse_depth
        self.cwd = cwd
        self.ignore_rules = ignore_rules or load_ignore_rules(root)
        self.given_path = given_path or root

    def _on_walk_error(self, error: OSError):
        raise DiscoveryError(f"Failed to scan {error.filename or self.root}: {error.strerror or error}") from error

    def scan(self) -> Iterator[DiscoveredFile]:
        # The path as typed counts as part of the ancestor chain, e.g. `-c target/debug`.
        if self.policy.has_excluded_ancestor(self.given_path):
            return

        for dirpath, dirs, files in os.walk(self.root, onerror=self._on_walk_error):
            dir_path = Path(dirpath)
            depth = len(dir_path.relative_to(self.root).parts)

            # --- 1. Prune directories in place so os.walk never enters them ---
            if self.recurse_depth is not None and depth >= self.recurse_depth:
                dirs[:] = []
            else:
                dirs[:] = sorted(
                    d for d in dirs
                    if not _is_hidden(d)
                    and not self.policy.is_excluded_directory(d)
                    and not self.ignore_rules.is_ignored(dir_path / d, is_directory=True)
                )

            # --- 2. Files of this directory, in name order ---
            for name in sorted(files):
                file_path = dir_path / name
                if _is_hidden(name):
                    continue
                if self.policy.is_excluded_extension(file_path):
                    continue
                if self.ignore_rules.is_ignored(file_path):
                    continue
                yield _describe(file_path, self.cwd)


def discover_files(config: ContextConfig, cwd: Optional[Path] = None) -> List[DiscoveredFile]:
    """
    Expands the configured context paths into a flat list of candidate files.

    Explicit file arguments are always kept. Directories are walked with
    DirectoryScanner. A missing path or a failing walk raises DiscoveryError
    and nothing is returned.
    """
    cwd = Path(os.path.abspath(cwd or os.getcwd()))
    policy = ExclusionPolicy.from_config(config)
    discovered: List[DiscoveredFile] = []

    for given in config.paths:
        path = Path(os.path.normpath(given if given.is_absolute() else cwd / given))
        if not path.exists():
            raise DiscoveryError(f"Path does not exist: {given}")

        if path.is_file():
            discovered.append(_describe(path, cwd))
        elif path.is_dir():
            scanner = DirectoryScanner(path, policy, config.recurse_depth, cwd, given_path=given)
            discovered.extend(scanner.scan())

    return discovered

# src/claw/config.py
"""
Configuration for claw.

Settings come from ``claw.yaml`` and goals from ``goals/<name>/prompt.yaml``.
Both are looked up in the local ``.claw/`` directory (searched upwards from
the working directory) first and in the global config directory second.
Missing files fall back to the defaults below.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from claw.errors import ConfigError, GoalNotFoundError

LOCAL_DIR_NAME = ".claw"
CONFIG_FILE_NAME = "claw.yaml"
GOAL_FILE_NAME = "prompt.yaml"
PROMPT_PLACEHOLDER = "{{prompt}}"

DEFAULT_LLM_COMMAND = "claude"
DEFAULT_MAX_FILE_SIZE_KB = 1024
DEFAULT_MAX_FILES_PER_DIRECTORY = 50

DEFAULT_EXCLUDED_DIRECTORIES = [
    ".git",
    "node_modules",
    "target",
    ".venv",
    "__pycache__",
]

DEFAULT_EXCLUDED_EXTENSIONS = [
    "exe",
    "bin",
    "so",
    "dylib",
    "dll",
    "o",
    "a",
]


class ErrorHandlingMode(Enum):
    STRICT = "strict"
    FLEXIBLE = "flexible"
    IGNORE = "ignore"

    @classmethod
    def parse(cls, value) -> "ErrorHandlingMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ConfigError(f"Invalid error_handling_mode '{value}' (expected one of: {choices})")


class ReceiverType(Enum):
    GENERIC = "generic"
    CLAUDE_CLI = "claude-cli"


class ParameterType(Enum):
    """Documentation-only type tag for goal parameters. Never enforced."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


def _as_text(value) -> str:
    # YAML turns `default: false` into a bool; templates expect the literal.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_int(data: dict, key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def _as_str_list(data: dict, key: str, default: List[str]) -> List[str]:
    value = data.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list, got {value!r}")
    return [str(v) for v in value]


@dataclass
class ClawConfig:
    llm_command: str = DEFAULT_LLM_COMMAND
    prompt_arg_template: str = PROMPT_PLACEHOLDER
    receiver_type: ReceiverType = ReceiverType.GENERIC
    max_file_size_kb: int = DEFAULT_MAX_FILE_SIZE_KB
    max_files_per_directory: int = DEFAULT_MAX_FILES_PER_DIRECTORY
    error_handling_mode: ErrorHandlingMode = ErrorHandlingMode.FLEXIBLE
    excluded_directories: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRECTORIES))
    excluded_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_EXTENSIONS))
    source_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, source_path: Optional[Path] = None) -> "ClawConfig":
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top level of {source_path or CONFIG_FILE_NAME}")

        receiver = data.get("receiver_type")
        try:
            receiver_type = ReceiverType(receiver) if receiver else ReceiverType.GENERIC
        except ValueError:
            raise ConfigError(f"Invalid receiver_type '{receiver}'")

        mode = data.get("error_handling_mode")
        return cls(
            llm_command=str(data.get("llm_command", DEFAULT_LLM_COMMAND)),
            prompt_arg_template=str(data.get("prompt_arg_template", PROMPT_PLACEHOLDER)),
            receiver_type=receiver_type,
            max_file_size_kb=_as_int(data, "max_file_size_kb", DEFAULT_MAX_FILE_SIZE_KB),
            max_files_per_directory=_as_int(data, "max_files_per_directory", DEFAULT_MAX_FILES_PER_DIRECTORY),
            error_handling_mode=ErrorHandlingMode.parse(mode) if mode is not None else ErrorHandlingMode.FLEXIBLE,
            excluded_directories=_as_str_list(data, "excluded_directories", DEFAULT_EXCLUDED_DIRECTORIES),
            excluded_extensions=_as_str_list(data, "excluded_extensions", DEFAULT_EXCLUDED_EXTENSIONS),
            source_path=source_path,
        )


@dataclass(frozen=True)
class GoalParameter:
    name: str
    description: str = ""
    required: bool = False
    param_type: Optional[ParameterType] = None
    default: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "GoalParameter":
        if not isinstance(data, dict) or "name" not in data:
            raise ConfigError(f"Invalid parameter definition: {data!r}")
        raw_type = data.get("type")
        try:
            param_type = ParameterType(str(raw_type).lower()) if raw_type else None
        except ValueError:
            raise ConfigError(f"Parameter '{data['name']}' has unknown type '{raw_type}'")
        default = data.get("default")
        return cls(
            name=str(data["name"]),
            description=str(data.get("description", "")),
            required=bool(data.get("required", False)),
            param_type=param_type,
            default=_as_text(default) if default is not None else None,
        )


@dataclass
class GoalConfig:
    """Parsed contents of a goal's prompt.yaml."""
    name: str
    prompt: str
    description: Optional[str] = None
    parameters: List[GoalParameter] = field(default_factory=list)
    context_scripts: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict, source_path: Path) -> "GoalConfig":
        if not isinstance(data, dict):
            raise ConfigError(f"Failed to parse {source_path}: expected a mapping")
        for key in ("name", "prompt"):
            if key not in data:
                raise ConfigError(f"Failed to parse {source_path}: missing field '{key}'")
        scripts = data.get("context_scripts") or {}
        if not isinstance(scripts, dict):
            raise ConfigError(f"Failed to parse {source_path}: 'context_scripts' must be a mapping")
        return cls(
            name=str(data["name"]),
            prompt=str(data["prompt"]),
            description=data.get("description"),
            parameters=[GoalParameter.from_dict(p) for p in data.get("parameters") or []],
            context_scripts={str(k): str(v) for k, v in scripts.items()},
        )


@dataclass
class LoadedGoal:
    config: GoalConfig
    directory: Path


@dataclass
class DiscoveredGoal:
    name: str
    source: str  # "local" or "global"
    config: GoalConfig


@dataclass
class ConfigPaths:
    local: Optional[Path] = None
    global_: Optional[Path] = None

    @classmethod
    def discover(cls, cwd: Optional[Path] = None) -> "ConfigPaths":
        return cls(local=find_local_config_dir(cwd), global_=find_global_config_dir())

    def search_order(self):
        if self.local:
            yield "local", self.local
        if self.global_:
            yield "global", self.global_


def find_local_config_dir(cwd: Optional[Path] = None) -> Optional[Path]:
    """Searches upwards from the working directory for a `.claw` directory."""
    start = Path(cwd or os.getcwd()).resolve()
    for ancestor in [start, *start.parents]:
        candidate = ancestor / LOCAL_DIR_NAME
        if candidate.is_dir():
            return candidate
    return None


def global_config_dir() -> Path:
    """Where the global config lives, whether or not it exists yet."""
    override = os.environ.get("CLAW_CONFIG_DIR")
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return (Path(xdg) if xdg else Path.home() / ".config") / "claw"


def find_global_config_dir() -> Optional[Path]:
    base = global_config_dir()
    return base if base.is_dir() else None


def _read_yaml(path: Path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}")


def load_claw_config(paths: Optional[ConfigPaths] = None) -> ClawConfig:
    """Returns the first claw.yaml in the cascade, or the built-in defaults."""
    paths = paths or ConfigPaths.discover()
    for _, base_dir in paths.search_order():
        config_path = base_dir / CONFIG_FILE_NAME
        if config_path.is_file():
            return ClawConfig.from_dict(_read_yaml(config_path) or {}, source_path=config_path)
    return ClawConfig()


def load_goal_config(base_dir: Path, goal_name: str) -> Optional[GoalConfig]:
    path = base_dir / "goals" / goal_name / GOAL_FILE_NAME
    if not path.is_file():
        return None
    return GoalConfig.from_dict(_read_yaml(path), source_path=path)


def find_and_load_goal(goal_name: str, paths: Optional[ConfigPaths] = None) -> LoadedGoal:
    paths = paths or ConfigPaths.discover()
    for _, base_dir in paths.search_order():
        config = load_goal_config(base_dir, goal_name)
        if config is not None:
            return LoadedGoal(config=config, directory=base_dir / "goals" / goal_name)
    raise GoalNotFoundError(goal_name)


def find_all_goals(paths: Optional[ConfigPaths] = None) -> List[DiscoveredGoal]:
    """Lists every goal; a local goal hides a global one with the same name."""
    paths = paths or ConfigPaths.discover()
    goals: List[DiscoveredGoal] = []
    seen = set()
    for source, base_dir in paths.search_order():
        goals_dir = base_dir / "goals"
        if not goals_dir.is_dir():
            continue
        for entry in sorted(goals_dir.iterdir()):
            if not entry.is_dir() or entry.name in seen:
                continue
            config = load_goal_config(base_dir, entry.name)
            if config is not None:
                seen.add(entry.name)
                goals.append(DiscoveredGoal(name=entry.name, source=source, config=config))
    goals.sort(key=lambda g: g.name)
    return goals

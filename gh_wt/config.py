"""Configuration handling for gh-wt"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from gh_wt.exceptions import ActionNotFoundError, ConfigError
from gh_wt.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_WORKTREE_DIR = os.path.join("~", "github", "worktree")
ENV_PREFIX = "GH_WT_"


def default_config_path() -> Path:
    """Location of the user config file."""
    return Path.home() / ".config" / "gh-wt" / "config.yaml"


@dataclass
class Action:
    """A named sequence of templated shell commands."""

    name: str
    cmds: List[str] = field(default_factory=list)
    dir: Optional[str] = None  # Working directory template; worktree path when unset

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigError("action name cannot be empty")
        self.name = self.name.strip()
        if not isinstance(self.cmds, list) or not self.cmds:
            raise ConfigError(f"action '{self.name}' must define at least one command in 'cmds'")
        for cmd in self.cmds:
            if not isinstance(cmd, str):
                raise ConfigError(f"action '{self.name}' has a non-string command: {cmd!r}")
        if self.dir is not None and not isinstance(self.dir, str):
            raise ConfigError(f"action '{self.name}' has a non-string 'dir'")
        if self.dir == "":
            self.dir = None

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        if not isinstance(data, dict):
            raise ConfigError(f"each action must be a mapping, got {data!r}")
        return cls(name=data.get("name", ""), cmds=data.get("cmds") or [], dir=data.get("dir"))


@dataclass
class Config:
    """Configuration for gh-wt with validation."""

    worktree_dir: str = DEFAULT_WORKTREE_DIR
    actions: List[Action] = field(default_factory=list)

    # GitHub integration
    github_token: Optional[str] = None

    # Execution modes
    force: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_worktree_dir()
        self._validate_actions()

    def _validate_worktree_dir(self):
        """Validate worktree_dir is not empty and expand ~."""
        if not self.worktree_dir or not str(self.worktree_dir).strip():
            raise ConfigError("worktree_dir cannot be empty")
        self.worktree_dir = os.path.abspath(os.path.expanduser(str(self.worktree_dir).strip()))

    def _validate_actions(self):
        """Validate actions are Action objects with unique names."""
        if not isinstance(self.actions, list):
            raise ConfigError("actions must be a list")
        self.actions = [a if isinstance(a, Action) else Action.from_dict(a) for a in self.actions]
        seen = set()
        for action in self.actions:
            if action.name in seen:
                raise ConfigError(f"duplicate action name '{action.name}'")
            seen.add(action.name)

    def get_action(self, name: str) -> Action:
        """Look up a configured action by name."""
        for action in self.actions:
            if action.name == name:
                return action
        raise ActionNotFoundError(name)

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return {
            "worktree_dir": self.worktree_dir,
            "actions": [
                {"name": a.name, "cmds": list(a.cmds), **({"dir": a.dir} if a.dir else {})}
                for a in self.actions
            ],
            "github_token": self.github_token,
            "force": self.force,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {"worktree_dir", "actions", "github_token", "force", "verbose", "debug"}

        filtered = {k: v for k, v in config_dict.items() if k in known_fields and v is not None}
        return cls(**filtered)


def _read_config_file(path: Path) -> Dict:
    """Read the YAML config file; a missing file yields an empty mapping."""
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    logger.debug(f"Loaded config file {path}")
    return data


def load_config(
    path: Optional[os.PathLike] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> Config:
    """Resolve configuration from file, environment and flags.

    Precedence, lowest to highest: defaults, config file, ``GH_WT_*``
    environment variables, keyword overrides (CLI flags).

    Args:
        path: Config file to read (defaults to ~/.config/gh-wt/config.yaml)
        environ: Environment mapping (defaults to os.environ)
        **overrides: Values from command-line flags; ``None`` values are ignored

    Returns:
        Validated Config
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path).expanduser() if path else default_config_path()

    if path and not config_path.exists():
        raise ConfigError(f"config file not found: {config_path}")

    data = _read_config_file(config_path)

    env_worktree_dir = environ.get(f"{ENV_PREFIX}WORKTREE_DIR")
    if env_worktree_dir:
        data["worktree_dir"] = env_worktree_dir

    token = environ.get(f"{ENV_PREFIX}GITHUB_TOKEN") or data.get("github_token")
    if not token:
        token = environ.get("GITHUB_TOKEN") or environ.get("GH_TOKEN")
    data["github_token"] = token

    for key, value in overrides.items():
        if value is not None:
            data[key] = value

    return Config.from_dict(data)

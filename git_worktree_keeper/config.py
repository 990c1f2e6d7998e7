"""Configuration handling for git-worktree-keeper"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import tomli

from git_worktree_keeper.constants import BUILTIN_TOOL_ARGS, CONFIG_DIR_NAME, CONFIG_FILE_NAME
from git_worktree_keeper.exceptions import ConfigError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def merge_args(
    default_args: Sequence[str], extra_args: Sequence[str], replace_defaults: bool
) -> List[str]:
    """Combine built-in and user arguments for a tool.

    The user's arguments follow the built-in ones unless ``replace_defaults``
    is set, in which case they stand alone.
    """
    if replace_defaults:
        return list(extra_args)
    return [*default_args, *extra_args]


@dataclass
class ToolConfig:
    """Arguments used to launch one named tool, with validation."""

    name: str
    default_args: List[str] = field(default_factory=list)
    extra_args: List[str] = field(default_factory=list)
    replace_defaults: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_args("default_args", self.default_args)
        self._validate_args("extra_args", self.extra_args)
        if not isinstance(self.replace_defaults, bool):
            raise ValueError(
                f"replace_defaults must be a boolean, got {type(self.replace_defaults).__name__}"
            )

    def _validate_args(self, key: str, value: Any):
        if not isinstance(value, list) or not all(isinstance(arg, str) for arg in value):
            raise ValueError(f"{key} must be a list of strings, got {value!r}")

    @property
    def effective_args(self) -> List[str]:
        return merge_args(self.default_args, self.extra_args, self.replace_defaults)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "ToolConfig":
        """Create a ToolConfig from a ``[commands.<name>]`` table."""
        return cls(
            name=name,
            default_args=list(BUILTIN_TOOL_ARGS.get(name, [])),
            extra_args=data.get("args", []),
            replace_defaults=data.get("replace_defaults", False),
        )


def get_config_path() -> Path:
    """Get the path to the user config file."""
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def display_path(path: Path) -> str:
    """Render a path with the home directory shortened to ``~``."""
    try:
        return str(Path("~") / path.relative_to(Path.home()))
    except ValueError:
        return str(path)


def default_config_contents() -> str:
    """Starter config with a commented-out section per known tool."""
    lines = [
        "# ~/.worktree/config.toml",
        "#",
        "# If a tool has baked-in defaults, your args are appended by default. To replace",
        "# the baked-in defaults entirely, set `replace_defaults = true`.",
    ]
    for name, args in BUILTIN_TOOL_ARGS.items():
        builtin = ", ".join(f'"{arg}"' for arg in args)
        lines += [
            "",
            f"# [commands.{name}]",
            "# Built-in defaults:",
            f"#   [{builtin}]",
            "# args = []",
            "# replace_defaults = false",
        ]
    return "\n".join(lines) + "\n"


class ConfigStore:
    """Reads the per-user config file, at most once per instance."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_config_path()
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.is_file():
            logger.debug(f"No config at {self.path}, using built-in defaults")
            self._data = {}
            return self._data

        try:
            with open(self.path, "rb") as f:
                self._data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(self.path, str(e)) from e
        except OSError as e:
            raise ConfigError(self.path, e.strerror or str(e)) from e

        logger.debug(f"Loaded config from {self.path}")
        return self._data

    def load(self, tool: str) -> ToolConfig:
        """Get the launch configuration for a named tool."""
        commands = self._load().get("commands", {})
        if not isinstance(commands, dict):
            raise ConfigError(self.path, "[commands] must be a table")
        section = commands.get(tool, {})
        if not isinstance(section, dict):
            raise ConfigError(self.path, f"[commands.{tool}] must be a table")
        try:
            return ToolConfig.from_dict(tool, section)
        except ValueError as e:
            raise ConfigError(self.path, f"[commands.{tool}] {e}") from e

    def command_args(self, tool: str, user_args: Sequence[str] = ()) -> List[str]:
        """Full argv (without the program) for launching a named tool."""
        args = self.load(tool).effective_args
        args.extend(user_args)
        logger.debug(f"{tool} arguments: {args}")
        return args

    def init(self) -> bool:
        """Write the starter config. Returns False if a file was already there."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.path, "x", encoding="utf-8") as f:
                f.write(default_config_contents())
        except FileExistsError:
            logger.info(f"Config already exists at {self.path}, leaving it untouched")
            return False
        logger.info(f"Wrote starter config to {self.path}")
        return True

"""
Configuration file support for workspace-tools.

Provides hierarchical configuration loading from:
1. Project config: .workspace-tools.toml or workspace-tools.toml in project root
2. User config: ~/.config/workspace-tools/config.toml

CLI arguments override config file values, and project config overrides user config.
"""

import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from workspace_tools.exceptions import WorkspaceToolsError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# Built-in collection used when neither the command line nor a config file names one
DEFAULT_COLLECTION = "@schematics/angular"

# Config file names to search for in project directories
CONFIG_FILENAMES = [".workspace-tools.toml", "workspace-tools.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "workspace-tools" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "cli": {"default_collection", "schematic_collections", "package_manager", "collection_paths"},
    "new": {"interactive", "defaults"},
}


@dataclass
class CliConfig:
    """Collection and package manager defaults."""

    default_collection: str | None = None
    schematic_collections: list[str] = field(default_factory=list)
    package_manager: str | None = None
    collection_paths: list[str] = field(default_factory=list)


@dataclass
class NewConfig:
    """Defaults for the execution-mode flags of the new command."""

    interactive: bool = True
    defaults: bool = False


@dataclass
class Config:
    """Merged configuration from all sources."""

    cli: CliConfig = field(default_factory=CliConfig)
    new: NewConfig = field(default_factory=NewConfig)

    # Track which file each setting came from (for --show)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            if user_data:
                _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            if project_data:
                _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")

    @property
    def default_collection(self) -> str:
        """The configured default collection, or the built-in one."""
        if self.cli.schematic_collections:
            return self.cli.schematic_collections[0]
        if self.cli.default_collection:
            return self.cli.default_collection
        return DEFAULT_COLLECTION


class ConfigError(WorkspaceToolsError):
    """Configuration-related errors."""

    pass


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any] | None:
    """
    Load a TOML file safely.

    Raises:
        ConfigError: If TOML is invalid or unreadable
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}", context={"file": str(path)}) from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}", context={"file": str(path)}) from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    for section in KNOWN_KEYS:
        if section not in data:
            continue
        section_data = data[section]
        if not isinstance(section_data, dict):
            raise ConfigError(
                f"Config section '{section}' must be a table",
                context={"file": source},
            )
        _warn_unknown_keys(section_data, KNOWN_KEYS[section], section, source)

        section_obj = getattr(config, section)
        for key in sorted(KNOWN_KEYS[section]):
            if key in section_data:
                setattr(section_obj, key, section_data[key])
                sources[f"{section}.{key}"] = source


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return f"""# workspace-tools configuration file
# Place as .workspace-tools.toml in project root or ~/.config/workspace-tools/config.toml for user defaults

[cli]
# Collection used by `new` when --collection is not given
# default_collection = "{DEFAULT_COLLECTION}"

# Ordered list of collections; the first entry takes precedence over default_collection
# schematic_collections = ["{DEFAULT_COLLECTION}"]

# Package manager passed to generators that install dependencies: npm, yarn, pnpm, bun
# package_manager = "npm"

# Extra directories searched for <collection>/collection.json
# collection_paths = ["./generators"]

[new]
# Prompt for missing options on a terminal
# interactive = true

# Use default values instead of prompting
# defaults = false
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }

"""
Config command for workspace-tools CLI.

Provides commands to view, initialize, and inspect configuration.

Usage:
    wst config --show          Show effective configuration with sources
    wst config --init          Create template config file
    wst config --paths         Show config file paths
    wst config get <key>       Get a specific config value
"""

import sys
from dataclasses import fields
from pathlib import Path

from workspace_tools.config import (
    CONFIG_FILENAMES,
    KNOWN_KEYS,
    USER_CONFIG_PATH,
    Config,
    generate_template,
    get_config_paths,
)


def show_config(config: Config) -> int:
    """Show effective configuration with sources."""
    print("# Effective workspace-tools configuration")

    for section in KNOWN_KEYS:
        section_obj = getattr(config, section)
        print()
        print(f"[{section}]")
        for f in fields(section_obj):
            key = f"{section}.{f.name}"
            _print_value(f.name, getattr(section_obj, f.name), config.get_source(key))

    print()
    print(f"# collection used by `new`: {config.default_collection}")
    return 0


def _format_value(value) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "# not set"
    if isinstance(value, list):
        return "[" + ", ".join(_format_value(v) for v in value) + "]"
    return str(value)


def _print_value(key: str, value, source: str) -> None:
    """Print a config value with its source."""
    source_display = Path(source).name if source != "default" else source
    print(f"{key} = {_format_value(value)}  # from: {source_display}")


def show_paths() -> int:
    """Show config file paths."""
    paths = get_config_paths()

    print("Config file paths:")
    print()

    print(f"User config: {USER_CONFIG_PATH}")
    print("  Status: exists" if paths["user"] else "  Status: not found")
    print()

    print(f"Project config search: {', '.join(CONFIG_FILENAMES)}")
    if paths["project"]:
        print(f"  Found: {paths['project']}")
    else:
        print("  Status: not found")

    return 0


def init_config(root: Path, user: bool = False) -> int:
    """Create a template config file."""
    if user:
        target = USER_CONFIG_PATH
        target.parent.mkdir(parents=True, exist_ok=True)
    else:
        target = root / CONFIG_FILENAMES[0]

    if target.exists():
        print(f"Error: Config file already exists: {target}", file=sys.stderr)
        print("Remove it first or edit manually.", file=sys.stderr)
        return 1

    try:
        target.write_text(generate_template())
    except OSError as e:
        print(f"Error writing config file: {e}", file=sys.stderr)
        return 1

    print(f"Created config template: {target}")
    print()
    print("Uncomment and modify values as needed.")
    return 0


def get_config(config: Config, key: str) -> int:
    """Print a specific config value (``section.key``)."""
    parts = key.split(".")
    if len(parts) != 2:
        print(f"Error: Invalid key format '{key}'. Use 'section.key' format.", file=sys.stderr)
        return 1

    section, attr = parts
    if section not in KNOWN_KEYS:
        print(f"Error: Unknown config section '{section}'", file=sys.stderr)
        return 1
    if attr not in KNOWN_KEYS[section]:
        print(f"Error: Unknown key '{attr}' in section '{section}'", file=sys.stderr)
        return 1

    value = getattr(getattr(config, section), attr)
    if value is None:
        print("# not set")
    elif isinstance(value, (bool, list)):
        print(_format_value(value))
    else:
        print(value)

    source = config.get_source(key)
    if source != "default":
        print(f"# source: {source}", file=sys.stderr)

    return 0

"""
Command-line interface for workspace-tools.

Provides CLI commands via the `workspace-tools` or `wst` command:

    workspace-tools new [name]        - Create a new workspace
    workspace-tools config            - View and manage configuration

Examples:
    wst new my-app
    wst new my-app --dry-run --skip-install
    wst n my-app --collection ./generators/minimal
    wst config --show
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from workspace_tools import __version__
from workspace_tools.cli.context import CommandContext
from workspace_tools.cli.registry import discover_commands, register_commands
from workspace_tools.cli.utils import print_error
from workspace_tools.config import Config, ConfigError
from workspace_tools.exceptions import WorkspaceToolsError

__all__ = ["main"]

logger = logging.getLogger(__name__)

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def _configure_logging(verbosity: int) -> None:
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("workspace_tools").setLevel(level)


def _count_verbosity(argv: List[str]) -> int:
    """Count -v flags given before the subcommand; later ones belong to it."""
    count = 0
    for arg in argv:
        if arg == "--" or not arg.startswith("-"):
            break
        if arg == "--verbose":
            count += 1
        elif arg.startswith("-") and not arg.startswith("--") and set(arg[1:]) == {"v"}:
            count += len(arg) - 1
    return count


def _load_config(root: Path) -> Config:
    try:
        return Config.load(root)
    except ConfigError as e:
        logger.warning(f"Ignoring configuration: {e.message}")
        return Config()


def _first_positional(argv: List[str]) -> Optional[str]:
    for arg in argv:
        if arg == "--":
            return None
        if not arg.startswith("-"):
            return arg
    return None


def build_parser(context: CommandContext) -> tuple[argparse.ArgumentParser, dict]:
    """Build the top-level parser and register all discovered commands.

    Returns:
        (parser, registration failures keyed by command name/alias)
    """
    parser = argparse.ArgumentParser(
        prog="workspace-tools",
        description="Create and manage workspaces from generator collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"workspace-tools {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        dest="_verbosity",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug)",
    )

    subparsers = parser.add_subparsers(dest="_subcommand", help="Available commands")
    failures = register_commands(subparsers, discover_commands(), context)
    return parser, failures


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for workspace-tools CLI."""
    if argv is None:
        argv = sys.argv[1:]

    _configure_logging(_count_verbosity(argv))

    root = Path.cwd()
    config = _load_config(root)
    context = CommandContext(root=root, argv=list(argv), config=config)

    parser, failures = build_parser(context)

    requested = _first_positional(argv)
    if requested in failures:
        print_error(failures[requested])
        return failures[requested].exit_code

    args = parser.parse_args(argv)

    command = getattr(args, "_command", None)
    if command is None:
        parser.print_help()
        return 0

    try:
        return command.run(args) or 0
    except WorkspaceToolsError as e:
        print_error(e, verbose=args._verbosity > 1)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())

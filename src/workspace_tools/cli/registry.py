"""Command registry for workspace-tools CLI.

Provides auto-discovery and registration of commands that implement the
Command protocol.

Usage:
    from workspace_tools.cli.registry import discover_commands, register_commands

    # Discover all command modules
    commands = discover_commands()

    # Register them on an argparse subparsers group
    failures = register_commands(subparsers, commands, context)
"""

import argparse
import importlib
import logging
import pkgutil
from typing import TYPE_CHECKING

from workspace_tools.exceptions import WorkspaceToolsError

if TYPE_CHECKING:
    from workspace_tools.cli.command_protocol import Command
    from workspace_tools.cli.context import CommandContext

logger = logging.getLogger(__name__)

# Registry of command classes.
# Populated by discover_commands() at startup.
_registry: dict[str, type["Command"]] = {}


def discover_commands() -> dict[str, type["Command"]]:
    """Discover command classes in the new_commands subpackage.

    Scans workspace_tools.cli.new_commands for modules that define a class
    implementing the Command protocol (has name, help, add_arguments, run).
    Classes imported from elsewhere (such as base classes) are ignored.

    Returns:
        Dict mapping command names to command classes.
    """
    commands: dict[str, type[Command]] = {}

    import workspace_tools.cli.new_commands as pkg

    for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
        if modname.startswith("_"):
            continue
        try:
            module = importlib.import_module(f"workspace_tools.cli.new_commands.{modname}")
        except ImportError as e:
            logger.warning(f"Skipping command module {modname}: {e}")
            continue

        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if (
                isinstance(obj, type)
                and obj.__module__ == module.__name__
                and getattr(obj, "name", None)
                and hasattr(obj, "help")
                and hasattr(obj, "add_arguments")
                and hasattr(obj, "run")
            ):
                commands[obj.name] = obj

    global _registry
    _registry = commands
    return commands


def get_registry() -> dict[str, type["Command"]]:
    """Return the current command registry.

    Returns:
        Dict mapping command names to command classes.
    """
    return _registry


def register_commands(
    subparsers: argparse._SubParsersAction,
    commands: dict[str, type["Command"]],
    context: "CommandContext",
    *,
    skip_existing: bool = True,
) -> dict[str, WorkspaceToolsError]:
    """Instantiate commands and register them on an argparse subparsers group.

    For each command, calls ``prepare()`` if defined, creates a subparser
    and calls the command's add_arguments() method to populate it. Sets a
    ``_command`` default on the subparser so dispatch can find the
    command instance.

    A command whose ``prepare()`` raises a WorkspaceToolsError is not
    registered; the error is returned keyed by every name the command
    would have answered to, so the caller can explain it.

    Args:
        subparsers: The _SubParsersAction from parser.add_subparsers().
        commands: Dict of command name -> command class.
        context: Per-invocation context passed to each command.
        skip_existing: If True, skip commands whose names already exist
            as subparsers.

    Returns:
        Dict of command name/alias -> registration error.
    """
    existing_names: set[str] = set()
    if skip_existing and hasattr(subparsers, "_name_parser_map"):
        existing_names = set(subparsers._name_parser_map.keys())

    failures: dict[str, WorkspaceToolsError] = {}

    for name, cmd_class in sorted(commands.items()):
        if name in existing_names:
            continue

        command = cmd_class(context)
        aliases = [a for a in getattr(command, "aliases", ()) if a not in existing_names]

        prepare = getattr(command, "prepare", None)
        if prepare is not None:
            try:
                prepare()
            except WorkspaceToolsError as e:
                logger.info(f"Command '{name}' is unavailable: {e.message}")
                for key in (name, *aliases):
                    failures[key] = e
                continue

        sub = subparsers.add_parser(name, aliases=aliases, help=cmd_class.help)
        command.add_arguments(sub)
        # Store the command instance so dispatch can find the right run() method
        sub.set_defaults(_command=command)

    return failures

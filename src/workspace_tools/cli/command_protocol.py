"""Command protocol for workspace-tools CLI.

Defines the interface that CLI commands implement. Commands own their
argument parser configuration and execution logic. A command is
instantiated once per CLI invocation with the ``CommandContext``, so any
state it builds while preparing its parser (for example an engine handle)
lives on the instance rather than in module globals.

Usage:
    from workspace_tools.cli.command_protocol import Command

    class MyCommand:
        name = "my-command"
        help = "Description of my command"
        aliases = ("m",)

        def __init__(self, context: CommandContext):
            self.context = context

        def add_arguments(self, parser: argparse.ArgumentParser) -> None:
            parser.add_argument("input", help="Input file")

        def run(self, args: argparse.Namespace) -> int:
            print(f"Processing {args.input}")
            return 0

Commands whose arguments depend on external data can also define
``prepare()``. The registry calls it before creating the subparser; if it
raises, the command is left out and the rest of the CLI keeps working.
"""

import argparse
from typing import Protocol, runtime_checkable


@runtime_checkable
class Command(Protocol):
    """Protocol for CLI commands.

    Attributes:
        name: The subcommand name (e.g., "new", "config").
        help: Brief help text shown in the top-level --help output.
        aliases: Alternative subcommand names.

    Methods:
        add_arguments: Register arguments on the provided subparser.
        run: Execute the command with the parsed argument namespace.
    """

    name: str
    help: str
    aliases: tuple[str, ...]

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Add command-specific arguments to the parser.

        Args:
            parser: The argparse subparser for this command.
        """
        ...

    def run(self, args: argparse.Namespace) -> int:
        """Execute the command.

        Args:
            args: Parsed arguments from argparse. All arguments added
                  in add_arguments() are available as attributes.

        Returns:
            Exit code (0 for success, non-zero for errors).
        """
        ...

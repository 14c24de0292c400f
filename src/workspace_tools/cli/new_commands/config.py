"""Config command: view and initialize workspace-tools configuration."""

import argparse
import sys

from workspace_tools.cli.context import CommandContext


class ConfigCommand:
    """View and manage workspace-tools configuration."""

    name = "config"
    help = "View and manage configuration"
    aliases = ()

    def __init__(self, context: CommandContext):
        self.context = context

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Add config-specific arguments."""
        action_group = parser.add_mutually_exclusive_group()
        action_group.add_argument(
            "--show",
            action="store_true",
            help="Show effective configuration with sources",
        )
        action_group.add_argument(
            "--init",
            action="store_true",
            help="Create template config file in current directory",
        )
        action_group.add_argument(
            "--paths",
            action="store_true",
            help="Show config file paths",
        )
        parser.add_argument(
            "--user",
            action="store_true",
            help="Use user config (~/.config/workspace-tools/config.toml) for --init",
        )
        parser.add_argument(
            "action",
            nargs="?",
            choices=["get"],
            help="Config action",
        )
        parser.add_argument(
            "key",
            nargs="?",
            help="Config key (e.g., cli.default_collection)",
        )

    def run(self, args: argparse.Namespace) -> int:
        from workspace_tools.cli.config_cmd import get_config, init_config, show_config, show_paths

        if args.init:
            return init_config(self.context.root, args.user)
        if args.paths:
            return show_paths()
        if args.action == "get":
            if not args.key:
                print("Error: 'get' requires a key argument", file=sys.stderr)
                return 1
            return get_config(self.context.config, args.key)
        return show_config(self.context.config)

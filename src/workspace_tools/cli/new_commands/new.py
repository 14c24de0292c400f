"""Create a new workspace using the ``ng-new`` generator.

The flags of this command come from the generator's option schema, so the
parser is only complete once the collection has been loaded. The collection
is taken from ``--collection`` on the raw command line, else from config,
else the built-in default.
"""

import argparse
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from workspace_tools import __version__
from workspace_tools.cli.flags import FlagSet, FlagSpec
from workspace_tools.cli.generator_command import (
    GeneratorCommand,
    command_options,
    describe_options,
    execution_flags,
    partition_options,
)
from workspace_tools.config import DEFAULT_COLLECTION
from workspace_tools.engine.base import ProviderTable
from workspace_tools.package_manager import DEFAULT_PACKAGE_MANAGER, ensure_compatible_npm

logger = logging.getLogger(__name__)

VERSION_PROVIDER_KEY = "ng-cli-version"


def check_compatibility(collection_name: str, options: Mapping[str, Any], root: Path) -> None:
    """Verify npm before the default collection installs dependencies with it.

    Only the built-in collection is checked, and only when the install step
    will run with npm.

    Raises:
        IncompatibleEnvironmentError: If the installed npm is known to break
    """
    if collection_name != DEFAULT_COLLECTION:
        return
    if options.get("skipInstall"):
        return
    package_manager = options.get("packageManager")
    if package_manager is not None and package_manager != DEFAULT_PACKAGE_MANAGER:
        return

    logger.debug(f"Checking npm compatibility in {root}")
    ensure_compatible_npm(root)


class NewCommand(GeneratorCommand):
    """Create a new workspace."""

    name = "new"
    help = "Creates a new workspace"
    aliases = ("n",)
    generator_name = "ng-new"

    def builtin_flags(self) -> FlagSet:
        name_help = next(
            (o.description for o in self.schema_options if o.name == "name" and o.description),
            "The name of the new workspace",
        )
        return FlagSet(
            [
                FlagSpec("name", type="string", positional=True, help=name_help),
                FlagSpec(
                    "collection",
                    ("--collection", "-c"),
                    help="A collection of generators to use in generating the initial workspace.",
                ),
                *execution_flags(self.context),
            ]
        )

    def prepare(self) -> None:
        """Load the generator's option schema for the build-time collection."""
        collection_name = self.context.collection_from_args or self.get_default_collection()
        engine = self.get_or_create_workflow_for_builder()
        self.schema_options = describe_options(engine, collection_name, self.generator_name)

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.description = f"{self.help}."
        self.schema_flags = self.add_generator_options(parser, self.schema_options)

    def run(self, args: argparse.Namespace) -> int:
        options = command_options(args)
        collection_name = options.get("collection") or self.get_default_collection()
        engine = self.get_or_create_workflow_for_execution(options)

        providers = ProviderTable()
        providers.add(VERSION_PROVIDER_KEY, lambda: __version__)

        check_compatibility(collection_name, options, self.context.root)

        generator_options, execution_options, _ = partition_options(options)
        return self.run_generator(
            engine, collection_name, generator_options, execution_options, providers
        )

"""Base class for commands that run a generator from a collection.

Handles what every generator-backed command shares:

- resolving the collection (explicit flag, config default, built-in default)
- owning a build-time engine handle (schema introspection) and an
  execution-time engine handle (running the generator)
- the execution-mode flags: --dry-run, --force, --interactive, --defaults
- splitting parsed options into generator options and execution options
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Mapping
from typing import Any

from workspace_tools.cli.context import CommandContext
from workspace_tools.cli.flags import FlagSet, FlagSpec, apply_flag_set, build_flag_set
from workspace_tools.engine.base import ExecutionOptions, ExecutionRequest, ProviderTable, WorkflowEngine
from workspace_tools.engine.local import LocalEngine
from workspace_tools.engine.schema import Option, parse_json_schema_to_options

logger = logging.getLogger(__name__)

EXECUTION_KEYS = ("dry_run", "force", "interactive", "defaults")
RESERVED_KEYS = (*EXECUTION_KEYS, "collection")

EngineFactory = Callable[..., WorkflowEngine]


def default_engine_factory(
    context: CommandContext, options: Mapping[str, Any] | None = None
) -> WorkflowEngine:
    return LocalEngine(context.config, context.root, options)


def resolve_collection(explicit: str | None, context: CommandContext) -> str:
    """Return ``explicit`` unchanged, else the configured or built-in default."""
    if isinstance(explicit, str) and explicit:
        return explicit
    return context.config.default_collection


def describe_options(
    engine: WorkflowEngine, collection_name: str, generator_name: str
) -> list[Option]:
    """Ask ``engine`` for a generator's option schema and parse it.

    Raises:
        CollectionNotFoundError: If the collection cannot be loaded
        GeneratorNotFoundError: If the generator is not in the collection
        SchemaError: If the schema is malformed
    """
    collection = engine.create_collection(collection_name)
    schema = collection.get_generator_option_schema(generator_name)
    return parse_json_schema_to_options(schema)


def command_options(args: argparse.Namespace) -> dict[str, Any]:
    """Parsed options without argparse bookkeeping and unset values.

    Top-level parser attributes use ``_``-prefixed dests, so every remaining
    attribute is an option of the command itself.
    """
    return {key: value for key, value in vars(args).items() if value is not None and not key.startswith("_")}


def partition_options(
    options: Mapping[str, Any],
) -> tuple[dict[str, Any], ExecutionOptions, str | None]:
    """Split options into generator options, execution options and the collection.

    Returns:
        (generator_options, execution_options, collection)
    """
    generator_options = {k: v for k, v in options.items() if k not in RESERVED_KEYS}
    execution = ExecutionOptions(**{k: bool(options[k]) for k in EXECUTION_KEYS if k in options})
    return generator_options, execution, options.get("collection")


def execution_flags(context: CommandContext) -> FlagSet:
    """The execution-mode flags shared by generator commands."""
    return FlagSet(
        [
            FlagSpec(
                "dry_run",
                ("--dry-run", "-d"),
                type="boolean",
                default=False,
                help="Run through and report activity without writing out results.",
            ),
            FlagSpec(
                "force",
                ("--force", "-f"),
                type="boolean",
                default=False,
                help="Force overwriting of existing files.",
            ),
            FlagSpec(
                "interactive",
                ("--interactive",),
                type="boolean",
                default=context.config.new.interactive,
                help="Enable interactive input prompts.",
            ),
            FlagSpec(
                "defaults",
                ("--defaults",),
                type="boolean",
                default=context.config.new.defaults,
                help="Disable interactive input prompts for options with a default.",
            ),
        ]
    )


class GeneratorCommand:
    """Shared behaviour of commands backed by a single generator.

    Subclasses set ``name``, ``help`` and ``generator_name``.

    Args:
        context: Per-invocation command context
        engine_factory: Builds engine handles (default: LocalEngine)
    """

    name: str = ""
    help: str = ""
    aliases: tuple[str, ...] = ()
    generator_name: str = ""

    def __init__(self, context: CommandContext, engine_factory: EngineFactory | None = None):
        self.context = context
        self.engine_factory = engine_factory or default_engine_factory
        self._builder_engine: WorkflowEngine | None = None
        self._execution_engine: WorkflowEngine | None = None
        self.schema_options: list[Option] = []
        self.schema_flags = FlagSet()

    def get_default_collection(self) -> str:
        return resolve_collection(None, self.context)

    def get_or_create_workflow_for_builder(self) -> WorkflowEngine:
        if self._builder_engine is None:
            self._builder_engine = self.engine_factory(self.context, None)
        return self._builder_engine

    def get_or_create_workflow_for_execution(self, options: Mapping[str, Any]) -> WorkflowEngine:
        if self._execution_engine is None:
            self._execution_engine = self.engine_factory(self.context, options)
        return self._execution_engine

    def builtin_flags(self) -> FlagSet:
        return execution_flags(self.context)

    def add_generator_options(
        self, parser: argparse.ArgumentParser, options: list[Option]
    ) -> FlagSet:
        """Register built-in and schema-derived flags on ``parser``."""
        builtins = self.builtin_flags()
        positional = FlagSet([spec for spec in builtins if spec.positional])
        apply_flag_set(parser, positional)

        exec_group = parser.add_argument_group("Execution options")
        apply_flag_set(exec_group, FlagSet([spec for spec in builtins if not spec.positional]))

        schema_flags = build_flag_set(options, builtins)
        schema_positional = FlagSet([spec for spec in schema_flags if spec.positional])
        apply_flag_set(parser, schema_positional)
        gen_group = parser.add_argument_group("Generator options")
        apply_flag_set(gen_group, FlagSet([spec for spec in schema_flags if not spec.positional]))
        return schema_flags

    def run_generator(
        self,
        engine: WorkflowEngine,
        collection_name: str,
        generator_options: Mapping[str, Any],
        execution_options: ExecutionOptions,
        providers: ProviderTable,
    ) -> int:
        request = ExecutionRequest(
            collection_name=collection_name,
            generator_name=self.generator_name,
            generator_options=generator_options,
            execution_options=execution_options,
            providers=providers,
        )
        logger.debug(
            f"Dispatching {collection_name}:{self.generator_name} "
            f"with options {sorted(request.generator_options)}"
        )
        return engine.execute(request)

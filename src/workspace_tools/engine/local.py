"""
Local workflow engine.

Loads collections described by a ``collection.json`` manifest and runs
their generators in-process. A generator factory is a plain Python
callable that receives a ``GeneratorContext`` and records file actions on
its staging ``Tree``::

    def generate(context):
        name = context.options["name"]
        context.tree.create(f"{name}/README.md", f"# {name}\\n")

Collections are resolved, in order, from:
1. A filesystem path (directory containing collection.json, or the file itself)
2. An installed package registered in the ``workspace_tools.collections``
   entry-point group (entry point name = collection identifier)
3. ``<dir>/<identifier>/collection.json`` for each ``[cli] collection_paths`` entry
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import json
import logging
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt

from workspace_tools.config import Config
from workspace_tools.engine.base import ExecutionRequest, ProviderTable
from workspace_tools.engine.manifest import CollectionManifest, GeneratorDescription, load_manifest
from workspace_tools.engine.schema import Option, parse_json_schema_to_options
from workspace_tools.engine.tree import ActionKind, Tree
from workspace_tools.exceptions import (
    CollectionNotFoundError,
    EngineExecutionError,
    GeneratorNotFoundError,
    SchemaError,
    WorkspaceToolsError,
)

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "workspace_tools.collections"
MANIFEST_NAME = "collection.json"

ACTION_STYLES = {
    ActionKind.CREATE: "green",
    ActionKind.UPDATE: "cyan",
    ActionKind.DELETE: "yellow",
}


@dataclass
class GeneratorContext:
    """What a generator factory receives.

    Attributes:
        options: Generator options after defaults, providers and prompts
        tree: Staging tree rooted at the engine root
        collection: Name of the collection being run
        generator: Name of the generator being run
        package_manager: Package manager for generators that schedule installs
        logger: Logger scoped to the generator
    """

    options: dict[str, Any]
    tree: Tree
    collection: str
    generator: str
    package_manager: str | None = None
    logger: logging.Logger = field(default_factory=lambda: logger)


class LocalCollection:
    """A collection loaded from a collection.json manifest."""

    def __init__(
        self,
        name: str,
        manifest_path: Path,
        manifest: CollectionManifest,
        parents: list["LocalCollection"] | None = None,
    ):
        self.name = name
        self.manifest_path = manifest_path
        self.manifest = manifest
        self.parents = parents or []

    @property
    def base_dir(self) -> Path:
        return self.manifest_path.parent

    def list_generators(self) -> list[str]:
        names = {
            name
            for name, desc in self.manifest.generators.items()
            if not desc.hidden and not desc.private
        }
        for parent in self.parents:
            names.update(parent.list_generators())
        return sorted(names)

    def describe(self, generator_name: str) -> tuple["LocalCollection", str, GeneratorDescription]:
        """Find a generator here or in an extended collection.

        Raises:
            GeneratorNotFoundError: If no collection in the chain declares it
        """
        found = self.manifest.find(generator_name)
        if found is not None:
            return self, found[0], found[1]
        for parent in self.parents:
            try:
                return parent.describe(generator_name)
            except GeneratorNotFoundError:
                continue
        raise GeneratorNotFoundError(generator_name, self.name, self.list_generators())

    def get_generator_option_schema(self, generator_name: str) -> dict[str, Any]:
        owner, name, description = self.describe(generator_name)
        if description.schema_path is None:
            return {"type": "object", "properties": {}}

        schema_file = owner.base_dir / description.schema_path
        try:
            schema = json.loads(schema_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise SchemaError(
                f"Invalid JSON in option schema of '{name}': {e.msg}",
                context={"file": str(schema_file), "line": e.lineno},
            ) from e
        except OSError as e:
            raise SchemaError(
                f"Cannot read option schema of '{name}'",
                context={"file": str(schema_file), "reason": str(e)},
            ) from e

        if not isinstance(schema, dict):
            raise SchemaError("Option schema must be a JSON object", context={"file": str(schema_file)})
        return schema

    def load_factory(self, generator_name: str) -> Callable[[GeneratorContext], Any]:
        """Import the factory callable of a generator.

        Raises:
            SchemaError: If the factory reference cannot be imported
        """
        owner, name, description = self.describe(generator_name)
        module_ref, sep, attr = description.factory.partition(":")
        if not sep:
            attr = "generate"

        try:
            if module_ref.endswith(".py") or module_ref.startswith("."):
                module = _load_module_from_file(owner.base_dir / module_ref)
            else:
                module = importlib.import_module(module_ref)
            factory = getattr(module, attr)
        except (ImportError, AttributeError, OSError) as e:
            raise SchemaError(
                f"Cannot load factory for generator '{name}'",
                context={"factory": description.factory, "collection": owner.name, "reason": str(e)},
            ) from e

        if not callable(factory):
            raise SchemaError(
                f"Factory for generator '{name}' is not callable",
                context={"factory": description.factory},
            )
        return factory


def _load_module_from_file(path: Path):
    if path.suffix != ".py":
        path = path.with_suffix(".py")
    resolved = path.resolve()
    digest = hashlib.sha1(str(resolved).encode("utf-8")).hexdigest()[:12]
    module_name = f"_workspace_tools_generator_{digest}"
    if module_name in sys.modules:
        return sys.modules[module_name]

    spec = importlib.util.spec_from_file_location(module_name, resolved)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {resolved}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[module_name]
        raise
    return module


class LocalEngine:
    """Workflow engine that runs generators from local collections.

    Args:
        config: Loaded configuration (for collection search paths)
        root: Directory generators write into
        options: Invocation options this handle is bound to, if any
        console: Console for action reports (default: stdout)
        stdin_is_tty: Override terminal detection for prompts
    """

    def __init__(
        self,
        config: Config,
        root: Path,
        options: Mapping[str, Any] | None = None,
        console: Console | None = None,
        stdin_is_tty: bool | None = None,
    ):
        self.config = config
        self.root = root
        self.options = dict(options or {})
        self.console = console or Console(highlight=False)
        self._stdin_is_tty = stdin_is_tty
        self._collections: dict[str, LocalCollection] = {}

    # -- collection loading -------------------------------------------------

    def _candidate_manifests(self, name: str) -> list[Path]:
        candidates: list[Path] = []

        path = Path(name).expanduser()
        if not path.is_absolute():
            path = self.root / path
        if path.is_file():
            candidates.append(path)
        elif path.is_dir():
            candidates.append(path / MANIFEST_NAME)

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name != name:
                continue
            try:
                module = importlib.import_module(ep.value.partition(":")[0])
            except ImportError as e:
                logger.warning(f"Cannot import collection package {ep.value}: {e}")
                continue
            if getattr(module, "__file__", None):
                candidates.append(Path(module.__file__).parent / MANIFEST_NAME)

        for search_dir in self.config.cli.collection_paths:
            base = Path(search_dir).expanduser()
            if not base.is_absolute():
                base = self.root / base
            candidates.append(base / name / MANIFEST_NAME)

        return candidates

    def create_collection(self, name: str, _seen: tuple[str, ...] = ()) -> LocalCollection:
        if name in self._collections:
            return self._collections[name]
        if name in _seen:
            raise SchemaError(
                "Circular 'extends' between collections",
                context={"chain": " -> ".join((*_seen, name))},
            )

        candidates = self._candidate_manifests(name)
        manifest_path = next((p for p in candidates if p.is_file()), None)
        if manifest_path is None:
            raise CollectionNotFoundError(
                name,
                context={"searched": ", ".join(str(p) for p in candidates) or "(nothing)"},
                suggestions=[
                    "Pass a path to a directory containing collection.json",
                    f"Install a package that registers '{name}' in the {ENTRY_POINT_GROUP} entry points",
                    "Add the parent directory to [cli] collection_paths in .workspace-tools.toml",
                ],
            )

        logger.debug(f"Loading collection '{name}' from {manifest_path}")
        manifest = load_manifest(manifest_path)
        parents = [self.create_collection(parent, (*_seen, name)) for parent in manifest.extends]
        collection = LocalCollection(name, manifest_path, manifest, parents)
        self._collections[name] = collection
        return collection

    # -- execution ----------------------------------------------------------

    def _can_prompt(self) -> bool:
        if self._stdin_is_tty is not None:
            return self._stdin_is_tty
        return sys.stdin.isatty()

    def _ask(self, option: Option) -> Any:
        question = option.prompt or option.description or option.name
        default = option.default
        if option.type == "boolean":
            return Confirm.ask(question, default=bool(default), console=self.console)
        if option.type == "integer":
            return IntPrompt.ask(question, default=default, console=self.console)
        if option.type == "number":
            return FloatPrompt.ask(question, default=default, console=self.console)
        choices = [str(c) for c in option.choices] if option.choices else None
        answer = Prompt.ask(
            question,
            choices=choices,
            default=None if default is None else str(default),
            console=self.console,
        )
        if option.type == "array":
            return [part.strip() for part in (answer or "").split(",") if part.strip()]
        return answer

    def resolve_options(
        self,
        schema_options: list[Option],
        given: Mapping[str, Any],
        providers: ProviderTable,
        prompt: bool,
        use_defaults: bool = False,
    ) -> dict[str, Any]:
        """Fill in provider values, prompted answers and schema defaults.

        With ``use_defaults`` an option that has a schema default takes it
        without asking; options without one are still prompted for.

        Raises:
            EngineExecutionError: If a required option is still missing
        """
        values = dict(given)
        for option in schema_options:
            if option.name in values:
                continue

            source = option.extra.get("$default")
            if isinstance(source, dict) and source.get("$source") in providers:
                values[option.name] = providers.resolve(source["$source"])
            elif use_defaults and option.default is not None:
                values[option.name] = option.default
            elif prompt and option.prompt:
                values[option.name] = self._ask(option)
            elif option.default is not None:
                values[option.name] = option.default

        missing = [o.name for o in schema_options if o.required and values.get(o.name) is None]
        if missing:
            raise EngineExecutionError(
                f"Missing required option(s): {', '.join(missing)}",
                context={"options": ", ".join(missing)},
            )
        return values

    def _report(self, tree: Tree, dry_run: bool) -> None:
        for path in tree.conflicts:
            self.console.print(f"[bold red]ERROR![/] {escape(path)} already exists.")
        for action in tree.actions:
            style = ACTION_STYLES[action.kind]
            self.console.print(f"[{style}]{action.kind.value}[/] {escape(action.detail)}")
        if dry_run:
            self.console.print('\n[yellow]NOTE:[/] The "--dry-run" option means no changes were made.')

    def execute(self, request: ExecutionRequest) -> int:
        execution = request.execution_options
        collection = self.create_collection(request.collection_name)
        schema = collection.get_generator_option_schema(request.generator_name)
        schema_options = parse_json_schema_to_options(schema)
        factory = collection.load_factory(request.generator_name)

        prompt = execution.interactive and self._can_prompt()
        values = self.resolve_options(
            schema_options,
            request.generator_options,
            request.providers,
            prompt,
            use_defaults=execution.defaults,
        )

        tree = Tree(self.root, force=execution.force)
        context = GeneratorContext(
            options=values,
            tree=tree,
            collection=request.collection_name,
            generator=request.generator_name,
            package_manager=self.options.get("packageManager") or self.config.cli.package_manager,
            logger=logging.getLogger(f"{__name__}.{request.generator_name}"),
        )

        logger.info(f"Running generator {request.collection_name}:{request.generator_name}")
        try:
            factory(context)
        except WorkspaceToolsError:
            raise
        except Exception as e:
            raise EngineExecutionError(
                f"Generator '{request.generator_name}' failed: {e}",
                context={"collection": request.collection_name, "error": type(e).__name__},
            ) from e

        self._report(tree, execution.dry_run)
        if tree.conflicts:
            raise EngineExecutionError(
                "The generator workflow failed. See above.",
                suggestions=["Use --force to overwrite existing files"],
            )

        if not execution.dry_run:
            tree.commit()
        return 0

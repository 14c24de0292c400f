"""
Workflow engine interface.

Defines the request passed to a workflow engine and the protocols an
engine and its collections implement. The ``new`` command only talks to
an engine through these types.

Example::

    providers = ProviderTable()
    providers.add("ng-cli-version", lambda: __version__)

    request = ExecutionRequest(
        collection_name="@schematics/angular",
        generator_name="ng-new",
        generator_options={"name": "my-app"},
        execution_options=ExecutionOptions(dry_run=True),
        providers=providers,
    )
    exit_code = engine.execute(request)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

Supplier = Callable[[], Any]


class ProviderTable:
    """Named suppliers for schema defaults.

    A schema property declaring ``"$default": {"$source": "<key>"}`` gets its
    value from the supplier registered under ``<key>``. Each supplier is
    called at most once; later lookups return the cached value.
    """

    def __init__(self, suppliers: Mapping[str, Supplier] | None = None):
        self._suppliers: dict[str, Supplier] = dict(suppliers or {})
        self._values: dict[str, Any] = {}

    def add(self, key: str, supplier: Supplier) -> None:
        """Register ``supplier`` under ``key``, replacing any previous one."""
        self._suppliers[key] = supplier
        self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._suppliers

    def keys(self) -> list[str]:
        return sorted(self._suppliers)

    def resolve(self, key: str) -> Any:
        """Return the value for ``key``.

        Raises:
            KeyError: If no supplier is registered under ``key``
        """
        if key not in self._values:
            self._values[key] = self._suppliers[key]()
        return self._values[key]


@dataclass(frozen=True)
class ExecutionOptions:
    """Controls how the engine applies a generator's effects."""

    dry_run: bool = False
    force: bool = False
    interactive: bool = True
    defaults: bool = False


@dataclass(frozen=True)
class ExecutionRequest:
    """Everything an engine needs to run one generator.

    Attributes:
        collection_name: Collection that provides the generator
        generator_name: Generator to run
        generator_options: Options passed to the generator (read-only)
        execution_options: Execution-mode controls
        providers: Suppliers for provider-sourced schema defaults
    """

    collection_name: str
    generator_name: str
    generator_options: Mapping[str, Any] = field(default_factory=dict)
    execution_options: ExecutionOptions = field(default_factory=ExecutionOptions)
    providers: ProviderTable = field(default_factory=ProviderTable)

    def __post_init__(self) -> None:
        # Detach from the caller's dict so the request cannot change after construction
        object.__setattr__(
            self, "generator_options", MappingProxyType(dict(self.generator_options))
        )


@runtime_checkable
class GeneratorCollection(Protocol):
    """A named bundle of generators."""

    name: str

    def list_generators(self) -> list[str]:
        """Return the names of the public generators in this collection."""
        ...

    def get_generator_option_schema(self, generator_name: str) -> dict[str, Any]:
        """Return the JSON option schema of a generator.

        Raises:
            GeneratorNotFoundError: If the generator is not in this collection
            SchemaError: If the schema cannot be read
        """
        ...


@runtime_checkable
class WorkflowEngine(Protocol):
    """Loads collections and runs generators against a target root."""

    def create_collection(self, name: str) -> GeneratorCollection:
        """Load a collection by identifier.

        Raises:
            CollectionNotFoundError: If the identifier does not resolve
        """
        ...

    def execute(self, request: ExecutionRequest) -> int:
        """Run a generator and return a process exit code."""
        ...


__all__ = [
    "Supplier",
    "ProviderTable",
    "ExecutionOptions",
    "ExecutionRequest",
    "GeneratorCollection",
    "WorkflowEngine",
]

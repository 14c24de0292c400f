"""Workflow engine interface and the local collection engine."""

from .base import (
    ExecutionOptions,
    ExecutionRequest,
    GeneratorCollection,
    ProviderTable,
    WorkflowEngine,
)
from .local import GeneratorContext, LocalCollection, LocalEngine
from .schema import Option, parse_json_schema_to_options
from .tree import Tree

__all__ = [
    "ExecutionOptions",
    "ExecutionRequest",
    "GeneratorCollection",
    "ProviderTable",
    "WorkflowEngine",
    "GeneratorContext",
    "LocalCollection",
    "LocalEngine",
    "Option",
    "parse_json_schema_to_options",
    "Tree",
]

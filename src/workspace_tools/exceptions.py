"""
Custom exception hierarchy for workspace-tools.

Provides consistent error handling with context, suggestions, and actionable guidance.
All exceptions include:
- Context information (collection names, paths, versions, etc.)
- Suggestions for how to fix the issue
- Clear, formatted error messages

Example::

    from workspace_tools.exceptions import IncompatibleEnvironmentError

    raise IncompatibleEnvironmentError(
        "npm version 7.4.0 detected",
        context={"root": "/work/my-app", "npm": "7.4.0"},
        suggestions=["npm install --global npm@^7.5.6"],
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class WorkspaceToolsError(Exception):
    """
    Base exception for all workspace-tools errors.

    Provides consistent formatting with context and suggestions.

    Attributes:
        context: Dictionary of contextual information (collection, path, etc.)
        suggestions: List of actionable suggestions for fixing the error
        exit_code: Process exit code the CLI returns for this error
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()

    def __rich_console__(self, console, options):
        from rich.text import Text

        yield Text(f"Error: {self.message}", style="bold red")
        if self.context:
            yield Text("\nContext:", style="bold")
            for key, value in self.context.items():
                yield Text(f"  {key}: {value}")
        if self.suggestions:
            yield Text("\nSuggestions:", style="bold")
            for suggestion in self.suggestions:
                yield Text(f"  - {suggestion}", style="cyan")


class CollectionNotFoundError(WorkspaceToolsError):
    """
    A collection identifier did not resolve to a loadable collection.

    Example::

        raise CollectionNotFoundError(
            "@acme/generators",
            context={"searched": "./generators/@acme/generators/collection.json"},
            suggestions=["Install the package that provides the collection"],
        )
    """

    def __init__(
        self,
        collection: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.collection = collection
        ctx = {"collection": collection}
        ctx.update(context or {})
        super().__init__(f"Collection '{collection}' cannot be resolved", ctx, suggestions)


class GeneratorNotFoundError(WorkspaceToolsError):
    """
    The named generator is not part of the loaded collection.

    Attributes:
        generator: Requested generator name
        collection: Collection that was searched
    """

    def __init__(
        self,
        generator: str,
        collection: str,
        available: Optional[List[str]] = None,
    ):
        self.generator = generator
        self.collection = collection
        context: Dict[str, Any] = {"generator": generator, "collection": collection}
        if available:
            context["available"] = ", ".join(sorted(available))
        super().__init__(
            f"Generator '{generator}' not found in collection '{collection}'",
            context,
        )


class SchemaError(WorkspaceToolsError):
    """
    A collection manifest or generator option schema is malformed.

    Example::

        raise SchemaError(
            "Invalid JSON in option schema",
            context={"file": "ng-new/schema.json", "line": 12},
        )
    """

    pass


class IncompatibleEnvironmentError(WorkspaceToolsError):
    """
    The local environment cannot safely run the generator.

    Raised before any file is written, so a failure never leaves a
    partially generated workspace behind.
    """

    exit_code = 3


class EngineExecutionError(WorkspaceToolsError):
    """
    The workflow engine reported a failed execution.

    The exit code is surfaced to the caller unchanged.
    """

    def __init__(
        self,
        message: str,
        exit_code: int = 1,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.exit_code = exit_code
        super().__init__(message, context, suggestions)


__all__ = [
    "WorkspaceToolsError",
    "CollectionNotFoundError",
    "GeneratorNotFoundError",
    "SchemaError",
    "IncompatibleEnvironmentError",
    "EngineExecutionError",
]

"""Tests for workspace_tools.exceptions module."""

import pytest

from workspace_tools.exceptions import (
    CollectionNotFoundError,
    EngineExecutionError,
    GeneratorNotFoundError,
    IncompatibleEnvironmentError,
    SchemaError,
    WorkspaceToolsError,
)


class TestWorkspaceToolsError:
    """Tests for the base exception class."""

    def test_basic_message(self):
        err = WorkspaceToolsError("Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.message == "Something went wrong"
        assert err.context == {}
        assert err.suggestions == []
        assert err.exit_code == 1

    def test_with_context_and_suggestions(self):
        err = WorkspaceToolsError(
            "Operation failed",
            context={"collection": "@acme/gen"},
            suggestions=["Install the collection"],
        )
        msg = str(err)
        assert "Context:" in msg
        assert "collection: @acme/gen" in msg
        assert "Suggestions:" in msg
        assert "- Install the collection" in msg
        assert msg.index("Context:") < msg.index("Suggestions:")

    def test_can_be_caught_as_exception(self):
        with pytest.raises(Exception):
            raise WorkspaceToolsError("boom")

    def test_renders_with_rich(self):
        from rich.console import Console

        console = Console(record=True, width=100)
        console.print(WorkspaceToolsError("Rich error", suggestions=["Try again"]))
        text = console.export_text()
        assert "Error: Rich error" in text
        assert "Try again" in text


class TestSubclasses:
    """Tests for the specific error types."""

    def test_collection_not_found(self):
        err = CollectionNotFoundError("@acme/gen", context={"searched": "/tmp"})
        assert err.collection == "@acme/gen"
        assert "Collection '@acme/gen' cannot be resolved" in str(err)
        assert err.context == {"collection": "@acme/gen", "searched": "/tmp"}

    def test_generator_not_found_lists_available(self):
        err = GeneratorNotFoundError("ng-new", "@acme/gen", available=["lib", "app"])
        assert err.generator == "ng-new"
        assert err.context["available"] == "app, lib"

    def test_incompatible_environment_exit_code(self):
        err = IncompatibleEnvironmentError("npm too old")
        assert err.exit_code == 3

    def test_engine_execution_error_keeps_exit_code(self):
        err = EngineExecutionError("failed", exit_code=42)
        assert err.exit_code == 42

    @pytest.mark.parametrize(
        "exc",
        [
            CollectionNotFoundError("x"),
            GeneratorNotFoundError("g", "x"),
            SchemaError("bad"),
            IncompatibleEnvironmentError("old"),
            EngineExecutionError("failed"),
        ],
    )
    def test_all_inherit_from_base(self, exc):
        assert isinstance(exc, WorkspaceToolsError)

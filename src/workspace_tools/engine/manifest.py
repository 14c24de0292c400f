"""
Pydantic models for collection.json manifests.

A collection manifest lists the generators of a collection::

    {
      "generators": {
        "ng-new": {
          "description": "Create a new workspace.",
          "factory": "./ng_new.py:generate",
          "schema": "./ng-new/schema.json",
          "aliases": ["new"]
        }
      }
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from workspace_tools.exceptions import SchemaError

__all__ = ["GeneratorDescription", "CollectionManifest", "load_manifest"]


class GeneratorDescription(BaseModel):
    """One generator entry of a collection manifest."""

    description: str = Field(default="", description="Help text for the generator")
    factory: str = Field(..., description="'module:function' or './file.py:function'")
    schema_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("schema", "schema_path"),
        description="Option schema path relative to the manifest",
    )
    aliases: list[str] = Field(default_factory=list, description="Alternative generator names")
    hidden: bool = Field(default=False, description="Hide from generator listings")
    private: bool = Field(default=False, description="Only runnable by name from tooling")


class CollectionManifest(BaseModel):
    """Parsed collection.json."""

    name: str | None = Field(default=None, description="Declared collection name")
    extends: list[str] = Field(default_factory=list, description="Collections to inherit from")
    generators: dict[str, GeneratorDescription] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("generators", "schematics"),
    )

    def find(self, name: str) -> tuple[str, GeneratorDescription] | None:
        """Look up a generator by name or alias."""
        if name in self.generators:
            return name, self.generators[name]
        for gen_name, description in self.generators.items():
            if name in description.aliases:
                return gen_name, description
        return None


def load_manifest(path: Path) -> CollectionManifest:
    """Read and validate a collection.json file.

    Raises:
        SchemaError: If the file is not valid JSON or not a valid manifest
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SchemaError(
            f"Invalid JSON in collection manifest: {e.msg}",
            context={"file": str(path), "line": e.lineno},
        ) from e
    except OSError as e:
        raise SchemaError(f"Cannot read collection manifest: {e}", context={"file": str(path)}) from e

    try:
        return CollectionManifest.model_validate(data)
    except ValidationError as e:
        raise SchemaError(
            "Invalid collection manifest",
            context={"file": str(path), "errors": e.error_count()},
            suggestions=[err["msg"] for err in e.errors()[:5]],
        ) from e

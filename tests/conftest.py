"""Pytest fixtures for workspace-tools tests."""

import copy
import json
from pathlib import Path

import pytest

from workspace_tools.cli.context import CommandContext
from workspace_tools.config import DEFAULT_COLLECTION, CliConfig, Config

# Option schema of the sample ng-new generator
NG_NEW_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema",
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "The name of the new workspace and initial project.",
            "$default": {"$source": "argv", "index": 0},
            "x-prompt": "What name would you like to use for the new workspace?",
        },
        "directory": {
            "type": "string",
            "description": "The directory name to create the workspace in.",
        },
        "version": {
            "type": "string",
            "description": "The version of the CLI.",
            "visible": False,
            "$default": {"$source": "ng-cli-version"},
        },
        "skipInstall": {
            "type": "boolean",
            "description": "Do not install dependency packages.",
            "default": False,
        },
        "packageManager": {
            "type": "string",
            "description": "The package manager used to install dependencies.",
            "enum": ["npm", "yarn", "pnpm", "bun"],
        },
        "style": {
            "type": "string",
            "alias": "s",
            "description": "The file extension for style files.",
            "enum": ["css", "scss", "sass", "less"],
            "default": "css",
        },
        "tags": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Tags written into the workspace file.",
        },
    },
    "required": ["name"],
}

NG_NEW_FACTORY = '''
import json


def generate(context):
    name = context.options["name"]
    directory = context.options.get("directory") or name
    context.tree.create(f"{directory}/README.md", f"# {name}\\n")
    context.tree.create(
        f"{directory}/workspace.json",
        json.dumps(
            {
                "name": name,
                "version": context.options.get("version"),
                "style": context.options.get("style"),
                "tags": context.options.get("tags", []),
            },
            indent=2,
        ),
    )
'''


def write_collection(
    base: Path,
    generators: dict | None = None,
    schema: dict | None = None,
    factory: str = NG_NEW_FACTORY,
) -> Path:
    """Write a collection with one ng-new generator into ``base``."""
    base.mkdir(parents=True, exist_ok=True)
    (base / "ng-new").mkdir(exist_ok=True)
    (base / "ng-new" / "schema.json").write_text(json.dumps(schema or NG_NEW_SCHEMA))
    (base / "ng_new.py").write_text(factory)
    manifest = {
        "generators": generators
        or {
            "ng-new": {
                "description": "Create a new workspace.",
                "factory": "./ng_new.py:generate",
                "schema": "./ng-new/schema.json",
                "aliases": ["new"],
            }
        }
    }
    (base / "collection.json").write_text(json.dumps(manifest))
    return base


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path_factory, monkeypatch):
    """Keep the developer's own user config out of the tests."""
    user_config = tmp_path_factory.mktemp("home") / "config.toml"
    monkeypatch.setattr("workspace_tools.config.USER_CONFIG_PATH", user_config)
    monkeypatch.setattr("workspace_tools.cli.config_cmd.USER_CONFIG_PATH", user_config)
    return user_config


@pytest.fixture
def collections_dir(tmp_path: Path) -> Path:
    """Directory holding the sample default collection under its identifier."""
    base = tmp_path / "collections"
    write_collection(base / DEFAULT_COLLECTION)
    return base


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def context(workspace_root: Path, collections_dir: Path) -> CommandContext:
    """Context whose config finds the sample collection as the default."""
    config = Config(cli=CliConfig(collection_paths=[str(collections_dir)]))
    return CommandContext(root=workspace_root, argv=[], config=config)


@pytest.fixture
def ng_new_schema() -> dict:
    """A private copy of the sample ng-new option schema."""
    return copy.deepcopy(NG_NEW_SCHEMA)


@pytest.fixture
def make_collection():
    """Factory writing sample collections into arbitrary directories."""
    return write_collection

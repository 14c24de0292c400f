"""
Option schema parsing.

Turns the JSON schema a generator declares for its options into a list of
``Option`` descriptors the CLI can project onto flags.

Supported property keywords:
    type            string, boolean, number, integer, array
    description     help text
    alias/aliases   short names
    default         default value applied by the engine
    enum            allowed values
    $default        {"$source": "argv", "index": N} marks a positional argument
    visible         false hides the option from help
    x-deprecated    true or a message
    x-prompt        question asked when interactive
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from workspace_tools.exceptions import SchemaError

OPTION_TYPES = ("string", "boolean", "number", "integer", "array")


@dataclass(frozen=True)
class Option:
    """A single generator option declared by a schema.

    Attributes:
        name: Property name as declared in the schema (e.g., "skipInstall")
        type: One of OPTION_TYPES
        description: Help text
        aliases: Alternative names; single letters become short flags
        default: Schema default, applied by the engine
        choices: Allowed values from ``enum``
        positional: Index of the positional argument, if argv-sourced
        required: Whether the schema lists the property as required
        hidden: True for ``visible: false``
        deprecated: Deprecation message, or True
        prompt: Question asked when the option is missing and prompting is on
    """

    name: str
    type: str = "string"
    description: str = ""
    aliases: tuple[str, ...] = ()
    default: Any = None
    choices: tuple[Any, ...] | None = None
    positional: int | None = None
    required: bool = False
    hidden: bool = False
    deprecated: bool | str = False
    prompt: str | None = None
    item_type: str = "string"
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def _option_type(name: str, prop: dict[str, Any]) -> str:
    prop_type = prop.get("type")
    if prop_type is None and "enum" in prop:
        values = prop["enum"]
        if values and all(isinstance(v, bool) for v in values):
            return "boolean"
        if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return "integer"
        return "string"

    if isinstance(prop_type, list):
        # ["string", "boolean"] style unions: prefer the most permissive type
        candidates = [t for t in prop_type if t in OPTION_TYPES]
        if not candidates:
            raise SchemaError(f"Option '{name}' has no supported type", context={"type": prop_type})
        return "string" if "string" in candidates else candidates[0]

    if prop_type not in OPTION_TYPES:
        raise SchemaError(
            f"Option '{name}' has unsupported type '{prop_type}'",
            context={"option": name},
            suggestions=[f"Use one of: {', '.join(OPTION_TYPES)}"],
        )
    return prop_type


def _prompt_text(prop: dict[str, Any]) -> str | None:
    prompt = prop.get("x-prompt")
    if prompt is None:
        return None
    if isinstance(prompt, str):
        return prompt
    if isinstance(prompt, dict):
        return prompt.get("message")
    raise SchemaError("x-prompt must be a string or an object with a message")


def parse_option(name: str, prop: dict[str, Any], required: bool = False) -> Option:
    """Parse one schema property into an Option."""
    if not isinstance(prop, dict):
        raise SchemaError(f"Option '{name}' must be a JSON object", context={"option": name})

    if "enum" in prop and not isinstance(prop["enum"], list):
        raise SchemaError(f"Option '{name}' enum must be a list", context={"option": name})

    option_type = _option_type(name, prop)

    aliases: list[str] = []
    if "alias" in prop:
        aliases.append(prop["alias"])
    extra_aliases = prop.get("aliases", [])
    if not isinstance(extra_aliases, list):
        raise SchemaError(f"Option '{name}' aliases must be a list", context={"option": name})
    aliases.extend(extra_aliases)
    if not all(isinstance(alias, str) and alias for alias in aliases):
        raise SchemaError(f"Option '{name}' aliases must be non-empty strings", context={"option": name})

    positional = None
    source = prop.get("$default")
    if isinstance(source, dict) and source.get("$source") == "argv":
        index = source.get("index", 0)
        # bool is an int subclass
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise SchemaError(
                f"Option '{name}' has an invalid argv index",
                context={"option": name, "index": index},
            )
        positional = index

    item_type = "string"
    if option_type == "array":
        items = prop.get("items", {})
        if isinstance(items, dict) and items.get("type") in ("string", "number", "integer"):
            item_type = items["type"]

    choices = tuple(prop["enum"]) if "enum" in prop else None

    return Option(
        name=name,
        type=option_type,
        description=prop.get("description", ""),
        aliases=tuple(dict.fromkeys(aliases)),
        default=prop.get("default"),
        choices=choices,
        positional=positional,
        required=required,
        hidden=prop.get("visible", True) is False,
        deprecated=prop.get("x-deprecated", False),
        prompt=_prompt_text(prop),
        item_type=item_type,
        extra={k: v for k, v in prop.items() if k.startswith("x-") or k == "$default"},
    )


def parse_json_schema_to_options(schema: dict[str, Any]) -> list[Option]:
    """Parse a generator's JSON option schema.

    Args:
        schema: JSON schema with a ``properties`` object

    Returns:
        Options in declaration order

    Raises:
        SchemaError: If the schema or one of its properties is malformed
    """
    if not isinstance(schema, dict):
        raise SchemaError("Option schema must be a JSON object")

    properties = schema.get("properties", {})
    if not isinstance(properties, dict):
        raise SchemaError("Option schema 'properties' must be a JSON object")

    required = schema.get("required", [])
    if not isinstance(required, list) or not all(isinstance(key, str) for key in required):
        raise SchemaError("Option schema 'required' must be a list of property names")
    required_names = set(required)
    return [parse_option(name, prop, name in required_names) for name, prop in properties.items()]


__all__ = ["Option", "OPTION_TYPES", "parse_option", "parse_json_schema_to_options"]

"""Projection of generator option schemas onto argparse flags.

Binding happens in two steps:

1. ``build_flag_set(options, builtins)`` is a pure function that turns the
   parsed ``Option`` descriptors into ``FlagSpec``s, dropping anything that
   would shadow a built-in flag.
2. ``apply_flag_set(parser, flag_set)`` registers the specs on an argparse
   parser or argument group.
"""

from __future__ import annotations

import argparse
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from workspace_tools.engine.schema import Option

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")

ITEM_TYPES = {"string": str, "number": float, "integer": int}


def to_kebab_case(name: str) -> str:
    """Convert an option name to its long-flag form (``skipInstall`` -> ``skip-install``)."""
    return _CAMEL_RE.sub(r"-\1", name).replace("_", "-").lower()


def alias_flag(alias: str) -> str:
    """Single letters become short flags, anything longer a long flag."""
    return f"-{alias}" if len(alias) == 1 else f"--{to_kebab_case(alias)}"


@dataclass(frozen=True)
class FlagSpec:
    """A flag ready to be registered on an argparse parser.

    Attributes:
        dest: Attribute name on the parsed namespace
        flags: Option strings (empty for positionals)
        type: Schema type: string, boolean, number, integer, array
        help: Help text
        choices: Allowed values
        default: Parsed value when the flag is absent
        positional: True for positional arguments
        hidden: Suppress from --help
        item_type: Element type for arrays
        metavar: Placeholder shown in help
    """

    dest: str
    flags: tuple[str, ...] = ()
    type: str = "string"
    help: str = ""
    choices: tuple[Any, ...] | None = None
    default: Any = None
    positional: bool = False
    hidden: bool = False
    item_type: str = "string"
    metavar: str | None = None

    @property
    def names(self) -> set[str]:
        """Every token this spec claims on the command line."""
        return {self.dest, *self.flags}


@dataclass
class FlagSet:
    """Ordered collection of flag specs."""

    specs: list[FlagSpec] = field(default_factory=list)

    def __iter__(self):
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)

    @property
    def dests(self) -> set[str]:
        return {spec.dest for spec in self.specs}

    @property
    def flags(self) -> set[str]:
        return {flag for spec in self.specs for flag in spec.flags}

    def get(self, dest: str) -> FlagSpec | None:
        return next((spec for spec in self.specs if spec.dest == dest), None)


def _help_text(option: Option) -> str:
    text = option.description
    if option.deprecated:
        note = option.deprecated if isinstance(option.deprecated, str) else "Deprecated."
        text = f"{text} (deprecated: {note})" if text else f"(deprecated: {note})"
    return text


def build_flag_set(options: Iterable[Option], builtins: FlagSet) -> FlagSet:
    """Turn schema options into flag specs.

    Each option yields at most one spec. An option whose name or long flag
    matches a built-in is skipped so built-ins are never shadowed; an alias
    that matches a built-in (or an earlier option) is dropped on its own.

    Args:
        options: Parsed schema options
        builtins: Flags the command declares itself

    Returns:
        Flag specs for the schema options, positionals ordered by index
    """
    taken_dests = set(builtins.dests)
    taken_flags = set(builtins.flags)
    flag_specs: list[FlagSpec] = []
    positional_specs: list[tuple[int, FlagSpec]] = []

    for option in options:
        long_flag = f"--{to_kebab_case(option.name)}"
        snake = to_kebab_case(option.name).replace("-", "_")
        if option.name in taken_dests or snake in taken_dests or long_flag in taken_flags:
            continue

        if option.positional is not None:
            spec = FlagSpec(
                dest=option.name,
                type=option.type,
                help=_help_text(option),
                choices=option.choices,
                positional=True,
                hidden=option.hidden,
                item_type=option.item_type,
            )
            positional_specs.append((option.positional, spec))
            taken_dests.add(option.name)
            continue

        flags = [long_flag]
        for alias in option.aliases:
            flag = alias_flag(alias)
            if flag not in taken_flags and flag not in flags:
                flags.append(flag)

        spec = FlagSpec(
            dest=option.name,
            flags=tuple(flags),
            type=option.type,
            help=_help_text(option),
            choices=None if option.type == "boolean" else option.choices,
            hidden=option.hidden,
            item_type=option.item_type,
        )
        flag_specs.append(spec)
        taken_dests.add(option.name)
        taken_flags.update(spec.flags)

    positional_specs.sort(key=lambda item: item[0])
    return FlagSet([spec for _, spec in positional_specs] + flag_specs)


def _argparse_kwargs(spec: FlagSpec) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "help": argparse.SUPPRESS if spec.hidden else spec.help,
        "default": spec.default,
    }
    if spec.metavar:
        kwargs["metavar"] = spec.metavar

    if spec.type == "boolean":
        if spec.positional:
            kwargs["type"] = _parse_bool
            kwargs["nargs"] = "?"
        else:
            kwargs["action"] = argparse.BooleanOptionalAction
        return kwargs

    if spec.type == "array":
        kwargs["type"] = ITEM_TYPES.get(spec.item_type, str)
        if spec.positional:
            kwargs["nargs"] = "*"
        else:
            kwargs["action"] = "extend"
            kwargs["nargs"] = "+"
    else:
        kwargs["type"] = ITEM_TYPES.get(spec.type, str)
        if spec.positional:
            kwargs["nargs"] = "?"

    if spec.choices is not None:
        kwargs["choices"] = list(spec.choices)
    return kwargs


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def apply_flag_set(parser: argparse.ArgumentParser | Any, flag_set: FlagSet) -> None:
    """Register every spec of ``flag_set`` on a parser or argument group."""
    for spec in flag_set:
        kwargs = _argparse_kwargs(spec)
        if spec.positional:
            parser.add_argument(spec.dest, **kwargs)
        else:
            parser.add_argument(*spec.flags, dest=spec.dest, **kwargs)


__all__ = [
    "FlagSpec",
    "FlagSet",
    "to_kebab_case",
    "alias_flag",
    "build_flag_set",
    "apply_flag_set",
]

"""Tests for projecting option schemas onto argparse flags."""

import argparse

import pytest

from workspace_tools.cli.flags import (
    FlagSet,
    FlagSpec,
    alias_flag,
    apply_flag_set,
    build_flag_set,
    to_kebab_case,
)
from workspace_tools.engine.schema import Option, parse_json_schema_to_options

BUILTINS = FlagSet(
    [
        FlagSpec("name", positional=True, help="Workspace name"),
        FlagSpec("collection", ("--collection", "-c")),
        FlagSpec("dry_run", ("--dry-run", "-d"), type="boolean", default=False),
        FlagSpec("force", ("--force", "-f"), type="boolean", default=False),
        FlagSpec("interactive", ("--interactive",), type="boolean", default=True),
        FlagSpec("defaults", ("--defaults",), type="boolean", default=False),
    ]
)


def _parser(options: list[Option]) -> tuple[argparse.ArgumentParser, FlagSet]:
    parser = argparse.ArgumentParser()
    apply_flag_set(parser, BUILTINS)
    flag_set = build_flag_set(options, BUILTINS)
    apply_flag_set(parser, flag_set)
    return parser, flag_set


class TestNaming:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("skipInstall", "skip-install"),
            ("packageManager", "package-manager"),
            ("inlineStyle", "inline-style"),
            ("ssr", "ssr"),
            ("dry_run", "dry-run"),
            ("routing2Module", "routing2-module"),
        ],
    )
    def test_to_kebab_case(self, name, expected):
        assert to_kebab_case(name) == expected

    def test_alias_flag(self):
        assert alias_flag("s") == "-s"
        assert alias_flag("inlineTemplate") == "--inline-template"


class TestBuildFlagSet:
    """Tests for the pure schema-to-flag projection."""

    def test_one_flag_per_property(self, ng_new_schema):
        options = parse_json_schema_to_options(ng_new_schema)
        # "name" is a built-in positional, everything else maps to its own flag
        flag_set = build_flag_set(options, BUILTINS)

        assert sorted(flag_set.dests) == sorted(o.name for o in options if o.name != "name")
        assert len(flag_set) == len(options) - 1

    def test_every_property_without_builtins(self, ng_new_schema):
        options = parse_json_schema_to_options(ng_new_schema)
        flag_set = build_flag_set(options, FlagSet())

        assert len(flag_set) == len(options)
        assert flag_set.get("name").positional is True

    def test_builtins_never_shadowed(self):
        options = [
            Option("collection", description="schema collection"),
            Option("dryRun", type="boolean"),
            Option("force", type="boolean"),
            Option("defaults", type="string"),
            Option("routing", type="boolean"),
        ]
        flag_set = build_flag_set(options, BUILTINS)

        assert [spec.dest for spec in flag_set] == ["routing"]
        assert not flag_set.flags & BUILTINS.flags

    def test_colliding_alias_dropped_but_option_kept(self):
        options = [Option("minimal", type="boolean", aliases=("d", "m"))]
        flag_set = build_flag_set(options, BUILTINS)

        assert flag_set.get("minimal").flags == ("--minimal", "-m")

    def test_first_option_wins_on_duplicate_flag(self):
        options = [
            Option("skipTests", type="boolean", aliases=("S",)),
            Option("skip_tests", type="boolean"),
            Option("skipGit", type="boolean", aliases=("S",)),
        ]
        flag_set = build_flag_set(options, BUILTINS)

        assert [spec.dest for spec in flag_set] == ["skipTests", "skipGit"]
        assert flag_set.get("skipGit").flags == ("--skip-git",)

    def test_positionals_ordered_by_index(self):
        options = [
            Option("second", positional=1),
            Option("flag", type="boolean"),
            Option("first", positional=0),
        ]
        flag_set = build_flag_set(options, FlagSet())

        assert [spec.dest for spec in flag_set] == ["first", "second", "flag"]

    def test_deprecated_help(self):
        flag_set = build_flag_set([Option("old", description="Old flag", deprecated=True)], FlagSet())
        assert "deprecated" in flag_set.get("old").help

    def test_builtins_unchanged(self):
        before = list(BUILTINS)
        build_flag_set([Option("force", type="boolean")], BUILTINS)
        assert list(BUILTINS) == before


class TestApplyFlagSet:
    """Tests for registering specs on argparse."""

    def test_types_are_bound(self):
        options = [
            Option("skipInstall", type="boolean"),
            Option("port", type="integer"),
            Option("ratio", type="number"),
            Option("style", type="string", aliases=("s",), choices=("css", "scss")),
            Option("tags", type="array"),
        ]
        parser, _ = _parser(options)

        args = parser.parse_args(
            ["app", "--skip-install", "--port", "4200", "--ratio", "0.5", "-s", "scss", "--tags", "a", "b"]
        )

        assert args.name == "app"
        assert args.skipInstall is True
        assert args.port == 4200
        assert args.ratio == 0.5
        assert args.style == "scss"
        assert args.tags == ["a", "b"]

    def test_boolean_negation(self):
        parser, _ = _parser([Option("commit", type="boolean")])
        assert parser.parse_args(["--no-commit"]).commit is False

    def test_unset_options_are_none(self):
        parser, _ = _parser([Option("skipInstall", type="boolean"), Option("style")])
        args = parser.parse_args([])

        assert args.skipInstall is None
        assert args.style is None
        assert args.dry_run is False
        assert args.interactive is True

    def test_array_flag_repeats_extend(self):
        parser, _ = _parser([Option("tags", type="array")])
        assert parser.parse_args(["--tags", "a", "--tags", "b"]).tags == ["a", "b"]

    def test_invalid_choice_rejected(self):
        parser, _ = _parser([Option("style", choices=("css", "scss"))])
        with pytest.raises(SystemExit):
            parser.parse_args(["--style", "stylus"])

    def test_builtin_flags_still_work_with_colliding_schema(self):
        parser, _ = _parser([Option("collection"), Option("force", type="boolean", aliases=("x",))])
        args = parser.parse_args(["-c", "@acme/gen", "--force"])

        assert args.collection == "@acme/gen"
        assert args.force is True

    def test_hidden_option_not_in_help(self):
        parser, _ = _parser([Option("version", hidden=True, description="CLI version")])
        help_text = parser.format_help()

        assert "--version" not in help_text
        assert parser.parse_args(["--version", "1.0"]).version == "1.0"

"""Per-invocation context shared by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from workspace_tools.config import Config


@dataclass
class CommandContext:
    """What a command knows before its arguments are parsed.

    Attributes:
        root: Working directory the command operates in
        argv: Raw command-line arguments (without the program name)
        config: Loaded configuration
    """

    root: Path
    argv: list[str] = field(default_factory=list)
    config: Config = field(default_factory=Config)

    @property
    def collection_from_args(self) -> str | None:
        """The ``--collection``/``-c`` value from raw argv, if present.

        Parser construction needs the collection before argparse has run,
        so this scans argv directly. Scanning stops at ``--``.
        """
        args = self.argv
        for i, arg in enumerate(args):
            if arg == "--":
                break
            if arg in ("--collection", "-c"):
                if i + 1 < len(args) and not args[i + 1].startswith("-"):
                    return args[i + 1]
                return None
            if arg.startswith("--collection="):
                return arg.split("=", 1)[1] or None
            if arg.startswith("-c") and not arg.startswith("--") and len(arg) > 2:
                value = arg[2:]
                return value[1:] if value.startswith("=") else value
        return None

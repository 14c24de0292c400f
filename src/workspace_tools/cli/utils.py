"""Shared utilities for CLI commands."""

from __future__ import annotations

import sys
import traceback
from typing import TYPE_CHECKING

from workspace_tools.exceptions import WorkspaceToolsError

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["format_error", "print_error", "get_error_console"]

# Module-level console for error output, created lazily
_error_console: Console | None = None


def get_error_console() -> Console:
    """Get or create the Rich console for error output.

    Returns a console configured for stderr with appropriate settings.
    The console is created lazily and cached for reuse.
    """
    global _error_console
    if _error_console is None:
        from rich.console import Console

        _error_console = Console(stderr=True, force_terminal=None)
    return _error_console


def print_error(
    e: Exception,
    verbose: bool = False,
    use_rich: bool | None = None,
) -> None:
    """
    Print an exception with Rich formatting when available.

    Uses Rich console for error output on TTY terminals,
    falls back to plain text for non-TTY (pipes, CI logs, etc.).

    Args:
        e: The exception to print
        verbose: If True, include full stack trace
        use_rich: Override automatic TTY detection (None = auto-detect)
    """
    console = get_error_console()

    if use_rich is None:
        use_rich = console.is_terminal

    if verbose:
        # Always use plain text for stack traces
        print("".join(traceback.format_exception(e)), file=sys.stderr)
        return

    if use_rich and isinstance(e, WorkspaceToolsError):
        # Use Rich rendering via __rich_console__
        console.print(e)
    else:
        print(format_error(e), file=sys.stderr)


def format_error(e: Exception) -> str:
    """
    Format an exception for user-friendly display (plain text).

    This is the plain-text fallback for non-TTY environments.
    For Rich formatted output, use print_error() instead.
    """
    if isinstance(e, WorkspaceToolsError):
        return f"Error: {e}"

    return f"Error: {type(e).__name__}: {e}"

"""Staging tree for generator output.

Generators never touch the filesystem directly. They record file actions
on a ``Tree``; the engine reviews the actions, reports them, and commits
them to disk unless running in dry-run mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from workspace_tools.exceptions import EngineExecutionError


class ActionKind(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class FileAction:
    """A pending change to one file."""

    kind: ActionKind
    path: str
    content: bytes | None = None

    @property
    def detail(self) -> str:
        if self.content is None:
            return self.path
        return f"{self.path} ({len(self.content)} bytes)"

    def describe(self) -> str:
        return f"{self.kind.value} {self.detail}"


class Tree:
    """Records file actions relative to a root directory.

    Args:
        root: Directory the paths are relative to
        force: Allow ``create`` to replace existing files
    """

    def __init__(self, root: Path, force: bool = False):
        self.root = root
        self.force = force
        self._actions: dict[str, FileAction] = {}
        self.conflicts: list[str] = []

    @staticmethod
    def _normalize(path: str) -> str:
        pure = PurePosixPath(path.replace("\\", "/"))
        if pure.is_absolute() or ".." in pure.parts:
            raise EngineExecutionError(
                f"Generator path escapes the workspace root: {path}",
                context={"path": path},
            )
        return str(pure)

    def _disk_path(self, path: str) -> Path:
        return self.root / path

    def exists(self, path: str) -> bool:
        path = self._normalize(path)
        action = self._actions.get(path)
        if action is not None:
            return action.kind is not ActionKind.DELETE
        return self._disk_path(path).is_file()

    def read(self, path: str) -> bytes | None:
        path = self._normalize(path)
        action = self._actions.get(path)
        if action is not None:
            return action.content
        disk = self._disk_path(path)
        return disk.read_bytes() if disk.is_file() else None

    def create(self, path: str, content: str | bytes) -> None:
        """Create a new file. Existing files are a conflict unless ``force`` is set."""
        path = self._normalize(path)
        data = content.encode("utf-8") if isinstance(content, str) else content
        if self._disk_path(path).exists():
            if not self.force:
                self.conflicts.append(path)
                return
            self._actions[path] = FileAction(ActionKind.UPDATE, path, data)
            return
        self._actions[path] = FileAction(ActionKind.CREATE, path, data)

    def overwrite(self, path: str, content: str | bytes) -> None:
        """Replace or create a file regardless of ``force``."""
        path = self._normalize(path)
        data = content.encode("utf-8") if isinstance(content, str) else content
        kind = ActionKind.UPDATE if self._disk_path(path).exists() else ActionKind.CREATE
        previous = self._actions.get(path)
        if previous is not None and previous.kind is ActionKind.CREATE:
            kind = ActionKind.CREATE
        self._actions[path] = FileAction(kind, path, data)

    def delete(self, path: str) -> None:
        path = self._normalize(path)
        previous = self._actions.pop(path, None)
        if self._disk_path(path).exists():
            self._actions[path] = FileAction(ActionKind.DELETE, path)
        elif previous is None:
            raise EngineExecutionError(f"Cannot delete missing file: {path}", context={"path": path})

    @property
    def actions(self) -> list[FileAction]:
        return [self._actions[p] for p in sorted(self._actions)]

    def commit(self) -> None:
        """Write all recorded actions to disk."""
        for action in self.actions:
            target = self._disk_path(action.path)
            if action.kind is ActionKind.DELETE:
                target.unlink()
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(action.content or b"")

"""Package manager utilities.

Provides functions to detect which package manager a workspace uses,
query the installed version of a package manager, and verify that the
installed npm is safe to use for new workspaces.
"""

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from workspace_tools.exceptions import IncompatibleEnvironmentError

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_MANAGER = "npm"

# Lock files checked in order; the first match wins
LOCK_FILES = [
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("package-lock.json", "npm"),
]

# npm 7 releases before 7.5.6 corrupt peer dependency resolution of new workspaces
INCOMPATIBLE_NPM_MIN = (7, 0, 0)
INCOMPATIBLE_NPM_MAX = (7, 5, 6)

VERSION_TIMEOUT = 10

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")


def parse_version(text: str) -> Optional[tuple[int, int, int]]:
    """Parse a semantic version string into a (major, minor, patch) tuple.

    Returns None if the text does not start with a version.
    """
    match = _VERSION_RE.match(text.strip())
    if not match:
        return None
    return tuple(int(part) for part in match.groups())  # type: ignore[return-value]


def detect_package_manager(root: Path) -> str:
    """Detect the package manager of a workspace from its lock files.

    Args:
        root: Workspace root directory

    Returns:
        Package manager name, "npm" when no lock file is present
    """
    for filename, manager in LOCK_FILES:
        if (root / filename).exists():
            return manager
    return DEFAULT_PACKAGE_MANAGER


def get_package_manager_version(name: str, root: Path) -> Optional[str]:
    """Run ``<name> --version`` in ``root`` and return the reported version.

    Returns None if the executable is missing, fails, or times out.
    """
    executable = shutil.which(name)
    if executable is None:
        logger.debug(f"{name} not found on PATH")
        return None

    try:
        result = subprocess.run(
            [executable, "--version"],
            cwd=root if root.is_dir() else None,
            capture_output=True,
            text=True,
            timeout=VERSION_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        logger.debug(f"{name} --version timed out after {VERSION_TIMEOUT}s")
        return None
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Failed to run {name} --version: {e}")
        return None

    if result.returncode != 0:
        logger.debug(f"{name} --version exited with {result.returncode}: {result.stderr.strip()}")
        return None

    return result.stdout.strip() or None


def ensure_compatible_npm(root: Path) -> None:
    """Verify that the installed npm can safely create a workspace in ``root``.

    Workspaces managed by another package manager are not checked. A missing
    or unparsable npm is not an error; the install step reports it later.

    Raises:
        IncompatibleEnvironmentError: If npm is inside the known-bad 7.x window
    """
    if detect_package_manager(root) != "npm":
        return

    version_text = get_package_manager_version("npm", root)
    if version_text is None:
        return

    version = parse_version(version_text)
    if version is None:
        logger.debug(f"Unrecognized npm version output: {version_text!r}")
        return

    logger.info(f"Detected npm {version_text}")
    if INCOMPATIBLE_NPM_MIN <= version < INCOMPATIBLE_NPM_MAX:
        minimum = ".".join(str(part) for part in INCOMPATIBLE_NPM_MAX)
        raise IncompatibleEnvironmentError(
            f"npm version {version_text} detected. "
            f"npm 7 requires version {minimum} or higher to create a new workspace.",
            context={"root": str(root), "npm": version_text},
            suggestions=[
                f"Update npm: npm install --global npm@^{minimum}",
                "Or skip the install step with --skip-install",
                "Or use another package manager with --package-manager",
            ],
        )

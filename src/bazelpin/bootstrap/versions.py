"""Pinned version lookup.

A workspace pins its Bazel release in a plain-text file (by default
``tools/bazel-version``) whose trimmed content is the version string.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from bazelpin.core.errors import ConfigMissingError, InvalidVersionError
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)

# Default location of the version file, relative to the workspace root
DEFAULT_VERSION_FILE = "tools/bazel-version"

# Files that mark the root of a Bazel workspace
WORKSPACE_MARKERS = ("MODULE.bazel", "WORKSPACE.bazel", "WORKSPACE")

# A version becomes a directory name and a URL path segment
_INVALID_VERSION_CHARS = re.compile(r"[\s/\\]")


def find_workspace_root(
    start: Path,
    version_file: str = DEFAULT_VERSION_FILE,
    markers: Sequence[str] = WORKSPACE_MARKERS,
) -> Path:
    """Find the workspace root containing ``start``.

    Walks up from ``start`` to the first directory that holds the version
    file or one of ``markers``.

    Args:
        start: Directory to start searching from.
        version_file: Version file path relative to the workspace root.
        markers: File names that mark a workspace root.

    Returns:
        The workspace root, or ``start`` if no marker was found.
    """
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / version_file).is_file():
            return candidate
        if any((candidate / marker).is_file() for marker in markers):
            return candidate
    LOGGER.debug(f"No workspace marker above {start}, using it as the workspace root")
    return start


def validate_version(version: str) -> str:
    """Check that a version string is usable as a path and URL segment.

    Raises:
        InvalidVersionError: If the version is empty or contains
            whitespace or path separators, or is ``.``/``..``.
    """
    if not version:
        raise InvalidVersionError("Pinned version is empty")
    if _INVALID_VERSION_CHARS.search(version) or version in (".", ".."):
        raise InvalidVersionError(f"Invalid pinned version: {version!r}")
    return version


def get_pinned_version(
    workspace_root: Path,
    version_file: str = DEFAULT_VERSION_FILE,
) -> str:
    """Read the pinned Bazel version for a workspace.

    Args:
        workspace_root: Root directory of the workspace.
        version_file: Version file path relative to the workspace root.

    Returns:
        The trimmed version string.

    Raises:
        ConfigMissingError: If the file is absent, unreadable or empty.
        InvalidVersionError: If the content is not a usable version.
    """
    path = workspace_root / version_file
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigMissingError(f"Version file not found: {path}", path=path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigMissingError(f"Cannot read version file {path}: {e}", path=path) from e

    version = content.strip()
    if not version:
        raise ConfigMissingError(f"Version file is empty: {path}", path=path)

    try:
        validate_version(version)
    except InvalidVersionError as e:
        raise InvalidVersionError(f"{e} (from {path})", path=path) from e

    LOGGER.debug(f"Pinned version {version} from {path}")
    return version


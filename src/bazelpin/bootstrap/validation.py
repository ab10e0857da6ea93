"""Cache entry validation.

An entry is valid when its binary exists and is executable. No checksum
or marker file is kept.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from bazelpin.bootstrap.paths import CacheEntry
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)


class ToolStatus(str, Enum):
    """Status of a tool binary."""

    PRESENT = "present"
    MISSING = "missing"
    NOT_EXECUTABLE = "not_executable"


def validate_binary(path: Path) -> ToolStatus:
    """Validate a single tool binary.

    Args:
        path: Path to the tool binary.

    Returns:
        ToolStatus indicating whether the tool is present and executable.
    """
    if not path.is_file():
        return ToolStatus.MISSING

    if not os.access(path, os.X_OK):
        return ToolStatus.NOT_EXECUTABLE

    return ToolStatus.PRESENT


def is_entry_valid(entry: CacheEntry) -> bool:
    """Check whether a cache entry holds an executable binary."""
    status = validate_binary(entry.binary)
    if status != ToolStatus.PRESENT:
        LOGGER.debug(f"Cache entry {entry.directory}: {status.value} at {entry.binary}")
        return False
    return True

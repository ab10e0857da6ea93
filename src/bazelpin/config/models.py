"""Configuration dataclasses for bazelpin."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from bazelpin.bootstrap.download import DEFAULT_RELEASE_BASE_URL, DEFAULT_TOOL_NAME
from bazelpin.bootstrap.paths import DEFAULT_BINARY_PATH
from bazelpin.bootstrap.versions import DEFAULT_VERSION_FILE


@dataclass(frozen=True)
class WrapperConfig:
    """Resolved wrapper configuration.

    Built once at startup and never mutated. ``trusted_key`` holds the
    text of the release signing key.
    """

    trusted_key: str
    tool_name: str = DEFAULT_TOOL_NAME
    release_base_url: str = DEFAULT_RELEASE_BASE_URL
    version_file: str = DEFAULT_VERSION_FILE
    binary_path: str = DEFAULT_BINARY_PATH
    cache_dir: Optional[Path] = None
    trusted_key_file: Optional[Path] = None
    sources: List[str] = field(default_factory=list, compare=False)

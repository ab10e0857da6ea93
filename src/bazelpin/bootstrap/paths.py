"""Path management for the bazelpin install cache.

Each Bazel release lives in its own directory, keyed by version and
platform:

    {cache_root}/{version}-{os}-{arch}/bin/bazel

Nothing in this module touches the filesystem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from bazelpin.bootstrap.platform import PlatformInfo

# Directory name under the platform cache base
CACHE_DIR_NAME = "bazelpin"

# Linux: cache base override (XDG Base Directory)
XDG_CACHE_HOME_ENV = "XDG_CACHE_HOME"

# Explicit cache root override, all platforms
BAZELPIN_CACHE_DIR_ENV = "BAZELPIN_CACHE_DIR"

# Relative path of the real binary inside a cache entry
DEFAULT_BINARY_PATH = "bin/bazel"


def get_cache_base(
    os_name: str,
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Get the platform cache base directory.

    Resolution:
    - darwin: ~/Library/Caches (fixed)
    - everything else: $XDG_CACHE_HOME if set and non-empty, else ~/.cache

    Args:
        os_name: Normalized OS name from PlatformInfo.
        environ: Environment mapping (defaults to os.environ).
        home: Home directory (defaults to Path.home()).

    Returns:
        Path to the cache base directory.
    """
    env = os.environ if environ is None else environ
    home_dir = home if home is not None else Path.home()

    if os_name == "darwin":
        return home_dir / "Library" / "Caches"

    xdg = env.get(XDG_CACHE_HOME_ENV)
    if xdg:
        return Path(xdg)
    return home_dir / ".cache"


def get_cache_root(
    os_name: str,
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Get the bazelpin cache root.

    Resolution order:
    1. BAZELPIN_CACHE_DIR environment variable (if set)
    2. {cache base}/bazelpin
    """
    env = os.environ if environ is None else environ
    override = env.get(BAZELPIN_CACHE_DIR_ENV)
    if override:
        return Path(override)
    return get_cache_base(os_name, env, home) / CACHE_DIR_NAME


@dataclass(frozen=True)
class CacheEntry:
    """One installed Bazel release.

    Attributes:
        directory: Install prefix for this release.
        binary: Path to the real bazel binary inside the prefix.
    """

    directory: Path
    binary: Path


@dataclass(frozen=True)
class BazelpinPaths:
    """Resolves cache entry locations under a cache root."""

    root: Path
    binary_relpath: str = DEFAULT_BINARY_PATH

    def entry_dir(self, version: str, platform_info: PlatformInfo) -> Path:
        """Install prefix for a version on a platform."""
        return self.root / platform_info.cache_key(version)

    def binary_path(self, version: str, platform_info: PlatformInfo) -> Path:
        """Expected path of the real binary for a version on a platform."""
        return self.entry_dir(version, platform_info) / self.binary_relpath

    def entry(self, version: str, platform_info: PlatformInfo) -> CacheEntry:
        """Return the CacheEntry for a version on a platform."""
        return CacheEntry(
            directory=self.entry_dir(version, platform_info),
            binary=self.binary_path(version, platform_info),
        )

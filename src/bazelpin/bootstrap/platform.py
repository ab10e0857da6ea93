"""Host platform as Bazel release artifacts name it.

Bazel publishes self-extracting installers for Linux and macOS only, on
x86_64 and arm64. The ``{os}-{arch}`` suffix appears both in installer
filenames and in cache entry names, so it must be stable across hosts
that report the same hardware differently (``aarch64`` vs ``arm64``).
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Dict, Optional

from bazelpin.core.errors import UnsupportedPlatformError

# platform.system() (lowercased) -> release token
_OS_TOKENS: Dict[str, str] = {
    "linux": "linux",
    "darwin": "darwin",
}

# platform.machine() (lowercased) -> release token
_ARCH_TOKENS: Dict[str, str] = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def normalize_arch(machine: str) -> Optional[str]:
    """Map a raw machine name to its release token, or None if unknown."""
    return _ARCH_TOKENS.get(machine.lower())


def _token(kind: str, raw: str, table: Dict[str, str]) -> str:
    token = table.get(raw.lower())
    if token is None:
        available = ", ".join(sorted(set(table.values())))
        raise UnsupportedPlatformError(
            f"Unsupported {kind}: {raw or 'unknown'}. Bazel installers exist for: {available}"
        )
    return token


def detect_os() -> str:
    """Return the release token for the running OS.

    Raises:
        UnsupportedPlatformError: If Bazel ships no installer for it.
    """
    return _token("operating system", platform.system(), _OS_TOKENS)


def detect_arch() -> str:
    """Return the release token for the running CPU.

    Raises:
        UnsupportedPlatformError: If Bazel ships no installer for it.
    """
    return _token("architecture", platform.machine(), _ARCH_TOKENS)


@dataclass(frozen=True)
class PlatformInfo:
    """An (os, arch) pair in release-token form, e.g. ("linux", "x86_64")."""

    os: str
    arch: str

    @property
    def suffix(self) -> str:
        """``linux-x86_64``, ``darwin-arm64``, ..."""
        return f"{self.os}-{self.arch}"

    def cache_key(self, version: str) -> str:
        """Name of the cache entry holding ``version`` for this platform."""
        return f"{version}-{self.suffix}"


def get_platform_info() -> PlatformInfo:
    """Detect the host platform.

    Raises:
        UnsupportedPlatformError: If the host has no Bazel installer.
    """
    return PlatformInfo(os=detect_os(), arch=detect_arch())

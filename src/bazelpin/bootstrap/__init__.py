"""Bootstrap module for pinned Bazel installs.

This module handles:
- Platform detection (OS + architecture)
- Pinned version lookup (tools/bazel-version)
- Cache directory layout ({cache_root}/{version}-{os}-{arch}/)
- Installer download, signature verification and installation
"""

from bazelpin.bootstrap.platform import get_platform_info, PlatformInfo
from bazelpin.bootstrap.paths import get_cache_root, BazelpinPaths, CacheEntry
from bazelpin.bootstrap.versions import get_pinned_version, find_workspace_root
from bazelpin.bootstrap.download import ArtifactFetcher, DownloadBundle
from bazelpin.bootstrap.signature import SignatureVerifier, VerifyOutcome
from bazelpin.bootstrap.installer import Installer

__all__ = [
    "get_platform_info",
    "PlatformInfo",
    "get_cache_root",
    "BazelpinPaths",
    "CacheEntry",
    "get_pinned_version",
    "find_workspace_root",
    "ArtifactFetcher",
    "DownloadBundle",
    "SignatureVerifier",
    "VerifyOutcome",
    "Installer",
]

"""Launcher: resolve the pinned Bazel binary and hand the process over to it.

States:

    START -> RESOLVED -> CACHE_HIT ------------------------------> EXECUTING
                      -> CACHE_MISS -> FETCHING -> VERIFYING
                                    -> INSTALLING -> RESOLVED -> EXECUTING

Any failure before EXECUTING raises a BazelpinError. EXECUTING replaces
the current process image and never returns.
"""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Mapping, NoReturn, Optional, Sequence

from bazelpin.bootstrap.download import ArtifactFetcher
from bazelpin.bootstrap.installer import Installer
from bazelpin.bootstrap.paths import BazelpinPaths, get_cache_root
from bazelpin.bootstrap.platform import PlatformInfo, get_platform_info
from bazelpin.bootstrap.signature import SignatureVerifier, VerifyOutcome
from bazelpin.bootstrap.validation import is_entry_valid
from bazelpin.bootstrap.versions import (
    WORKSPACE_MARKERS,
    find_workspace_root,
    get_pinned_version,
)
from bazelpin.config import WrapperConfig, load_config
from bazelpin.config.loader import PROJECT_CONFIG_NAMES
from bazelpin.core.errors import InstallError, LaunchError, VerificationError
from bazelpin.core.logging import flush_logging, get_logger

LOGGER = get_logger(__name__)


class LaunchState(str, Enum):
    """Launcher state machine states."""

    START = "start"
    RESOLVED = "resolved"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    FETCHING = "fetching"
    VERIFYING = "verifying"
    INSTALLING = "installing"
    EXECUTING = "executing"


def exec_binary(binary: Path, args: Sequence[str]) -> NoReturn:
    """Replace the current process with ``binary``, forwarding ``args``.

    Environment and standard streams are inherited unchanged. Pending
    output is flushed first so nothing from this process appears later.

    Raises:
        LaunchError: If the exec itself fails.
    """
    flush_logging()
    sys.stdout.flush()
    sys.stderr.flush()
    argv = [str(binary), *args]
    try:
        os.execv(argv[0], argv)
    except OSError as e:
        raise LaunchError(f"Failed to execute {binary}: {e}") from e


@dataclass
class Launcher:
    """Drives resolve -> fetch -> verify -> install -> exec."""

    config: WrapperConfig
    platform_info: PlatformInfo
    workspace_root: Path
    paths: BazelpinPaths
    fetcher: ArtifactFetcher
    verifier: SignatureVerifier
    installer: Installer
    state: LaunchState = LaunchState.START
    history: List[LaunchState] = field(default_factory=lambda: [LaunchState.START])

    @classmethod
    def create(
        cls,
        config: WrapperConfig,
        platform_info: PlatformInfo,
        workspace_root: Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Launcher":
        """Wire up a Launcher from a resolved configuration."""
        cache_root = config.cache_dir or get_cache_root(platform_info.os, environ)
        paths = BazelpinPaths(cache_root, binary_relpath=config.binary_path)
        return cls(
            config=config,
            platform_info=platform_info,
            workspace_root=workspace_root,
            paths=paths,
            fetcher=ArtifactFetcher(base_url=config.release_base_url, tool_name=config.tool_name),
            verifier=SignatureVerifier(trusted_key=config.trusted_key),
            installer=Installer(paths),
        )

    @classmethod
    def from_environment(
        cls,
        cwd: Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Launcher":
        """Detect the platform, find the workspace and load its config.

        Raises:
            UnsupportedPlatformError: If the host has no Bazel installer.
            ConfigError: If the configuration cannot be loaded.
        """
        platform_info = get_platform_info()
        # A workspace config may move the version file, so it marks the root too
        workspace_root = find_workspace_root(
            cwd, markers=(*WORKSPACE_MARKERS, *PROJECT_CONFIG_NAMES)
        )
        config = load_config(workspace_root, environ)
        return cls.create(config, platform_info, workspace_root, environ)

    def _transition(self, state: LaunchState) -> None:
        LOGGER.debug(f"launcher: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def resolve(self) -> Path:
        """Return the pinned binary, installing it first if needed.

        Raises:
            ConfigMissingError: If the workspace pins no version.
            DownloadError: If fetching the installer fails.
            VerificationError: If the installer's signature is bad.
            InstallError: If the installer fails.
        """
        version = get_pinned_version(self.workspace_root, self.config.version_file)
        entry = self.paths.entry(version, self.platform_info)
        self._transition(LaunchState.RESOLVED)

        if is_entry_valid(entry):
            self._transition(LaunchState.CACHE_HIT)
            LOGGER.debug(f"Using cached bazel {version} at {entry.binary}")
            return entry.binary

        self._transition(LaunchState.CACHE_MISS)
        self._install(version)

        entry = self.paths.entry(version, self.platform_info)
        self._transition(LaunchState.RESOLVED)
        if not is_entry_valid(entry):
            raise InstallError(f"bazel {version} is still missing at {entry.binary} after install")
        return entry.binary

    def _install(self, version: str) -> None:
        """Fetch, verify and install ``version`` using one scoped temp dir."""
        with tempfile.TemporaryDirectory(prefix="bazelpin-download-") as tmp:
            self._transition(LaunchState.FETCHING)
            bundle = self.fetcher.fetch(version, self.platform_info, Path(tmp))

            self._transition(LaunchState.VERIFYING)
            outcome = self.verifier.verify(bundle.signature, bundle.artifact)
            if outcome == VerifyOutcome.FAILED:
                raise VerificationError(
                    f"Signature verification failed for {bundle.artifact.name}; not installing"
                )
            if outcome == VerifyOutcome.SKIPPED_NO_TOOL:
                LOGGER.warning(
                    f"gpg not found; installing {bundle.artifact.name} without "
                    "verifying its signature"
                )

            self._transition(LaunchState.INSTALLING)
            self.installer.install(version, self.platform_info, bundle.artifact)

    def run(self, args: Sequence[str]) -> NoReturn:
        """Resolve the binary and exec it with ``args``. Never returns."""
        binary = self.resolve()
        self._transition(LaunchState.EXECUTING)
        exec_binary(binary, args)

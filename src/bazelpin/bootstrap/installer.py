"""Runs a verified Bazel installer into the cache.

The installer script is invoked with ``--prefix`` pointing at the cache
entry for its version. It runs from a private temporary working
directory that is removed however the install ends.
"""

from __future__ import annotations

import shutil
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path

from bazelpin.bootstrap.paths import BazelpinPaths, CacheEntry
from bazelpin.bootstrap.platform import PlatformInfo
from bazelpin.bootstrap.validation import is_entry_valid
from bazelpin.core.errors import InstallError
from bazelpin.core.logging import get_logger
from bazelpin.core.subprocess_runner import run_command

LOGGER = get_logger(__name__)


def make_executable(path: Path) -> None:
    """Add execute permission for user, group and other."""
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


@dataclass
class Installer:
    """Materializes Bazel releases under the cache root."""

    paths: BazelpinPaths

    def install(self, version: str, platform_info: PlatformInfo, artifact_path: Path) -> CacheEntry:
        """Run the installer for ``version`` into its cache entry.

        The installer's stdout (release notes) is discarded; its stderr is
        passed through.

        Args:
            version: Release being installed.
            platform_info: Platform the installer was built for.
            artifact_path: Verified installer script.

        Returns:
            The populated CacheEntry.

        Raises:
            InstallError: If the installer exits non-zero, cannot be
                started, or leaves no executable binary behind.
        """
        entry = self.paths.entry(version, platform_info)
        created_entry = not entry.directory.exists()

        LOGGER.info(f"Installing bazel {version} to {entry.directory}")
        try:
            with tempfile.TemporaryDirectory(prefix="bazelpin-install-") as work_dir:
                make_executable(artifact_path)
                result = run_command(
                    [str(artifact_path), f"--prefix={entry.directory}"],
                    cwd=work_dir,
                    discard_stdout=True,
                )
        except OSError as e:
            self._discard(entry, created_entry)
            raise InstallError(f"Failed to run installer {artifact_path.name}: {e}") from e

        if result.returncode != 0:
            self._discard(entry, created_entry)
            raise InstallError(
                f"Installer {artifact_path.name} exited with status {result.returncode}",
                returncode=result.returncode,
            )

        if not is_entry_valid(entry):
            self._discard(entry, created_entry)
            raise InstallError(
                f"Installer {artifact_path.name} finished but {entry.binary} is not an executable"
            )

        LOGGER.info(f"bazel {version} installed to {entry.directory}")
        return entry

    @staticmethod
    def _discard(entry: CacheEntry, created_entry: bool) -> None:
        """Remove a partially written entry this install created."""
        if created_entry and entry.directory.exists():
            LOGGER.debug(f"Removing partial install at {entry.directory}")
            shutil.rmtree(entry.directory, ignore_errors=True)

"""Error taxonomy for bazelpin.

Every fatal condition in the resolve/fetch/verify/install chain raises a
subclass of BazelpinError. The CLI turns any of them into a one-line
diagnostic on stderr and exit status 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class BazelpinError(Exception):
    """Base class for fatal bazelpin errors."""

    pass


class ConfigError(BazelpinError):
    """Configuration loading or parsing error."""

    pass


class ConfigMissingError(BazelpinError):
    """No usable pinned version was found for the workspace."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidVersionError(ConfigMissingError):
    """The pinned version is not usable as a path or URL segment."""

    pass


class UnsupportedPlatformError(BazelpinError):
    """The host OS or architecture has no Bazel installer."""

    pass


class DownloadError(BazelpinError):
    """Fetching the installer or its signature failed."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class VerificationError(BazelpinError):
    """The installer's detached signature did not verify."""

    pass


class InstallError(BazelpinError):
    """The installer script failed or left no binary behind."""

    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class LaunchError(BazelpinError):
    """The resolved binary could not be executed."""

    pass

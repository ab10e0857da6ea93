"""Detached signature verification for installer artifacts.

Verification runs gpg (through python-gnupg) against a throwaway keyring
that holds only the trusted release key. The user's own keyring is never
read or modified. If gpg is not installed the check is skipped rather
than failed.
"""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import gnupg

from bazelpin.bootstrap.keys import has_public_key_block
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_GPG_BINARY = "gpg"

TRUST_LEVEL = "TRUST_ULTIMATE"


class VerifyOutcome(str, Enum):
    """Result of a signature check."""

    VERIFIED = "verified"
    SKIPPED_NO_TOOL = "skipped_no_tool"
    FAILED = "failed"


@dataclass
class SignatureVerifier:
    """Checks detached signatures against one trusted key."""

    trusted_key: str
    gpg_binary: str = DEFAULT_GPG_BINARY

    def find_gpg(self) -> Optional[str]:
        """Locate the gpg executable, or None if it is not installed."""
        return shutil.which(self.gpg_binary)

    def verify(self, signature_path: Path, artifact_path: Path) -> VerifyOutcome:
        """Verify ``signature_path`` as a detached signature of ``artifact_path``.

        Returns:
            VERIFIED if the signature checks out against the trusted key,
            SKIPPED_NO_TOOL if gpg is not available, FAILED otherwise.
        """
        gpg_path = self.find_gpg()
        if gpg_path is None:
            LOGGER.debug(f"{self.gpg_binary} not found on PATH")
            return VerifyOutcome.SKIPPED_NO_TOOL

        if not has_public_key_block(self.trusted_key):
            LOGGER.error(
                "No trusted public key is configured; cannot verify the installer. "
                "Set trusted_key_file to the release signing key."
            )
            return VerifyOutcome.FAILED

        with tempfile.TemporaryDirectory(prefix="bazelpin-gnupg-") as gnupg_home:
            try:
                gpg = gnupg.GPG(gpgbinary=gpg_path, gnupghome=gnupg_home)
                return self._verify_in_keyring(gpg, signature_path, artifact_path)
            except (OSError, ValueError) as e:
                LOGGER.error(f"Failed to run {gpg_path}: {e}")
                return VerifyOutcome.FAILED

    def _verify_in_keyring(
        self,
        gpg: gnupg.GPG,
        signature_path: Path,
        artifact_path: Path,
    ) -> VerifyOutcome:
        """Import the trusted key into ``gpg``'s keyring and check the signature."""
        imported = gpg.import_keys(self.trusted_key)
        if not imported.fingerprints:
            self._log_failure("Importing the trusted key failed", imported)
            return VerifyOutcome.FAILED
        LOGGER.debug(f"Trusted key fingerprints: {', '.join(imported.fingerprints)}")

        trusted = gpg.trust_keys(imported.fingerprints, TRUST_LEVEL)
        if not trusted:
            self._log_failure("Trusting the release key failed", trusted)
            return VerifyOutcome.FAILED

        with open(signature_path, "rb") as sig_file:
            verified = gpg.verify_file(sig_file, data_filename=str(artifact_path))
        if not verified.valid:
            self._log_failure(f"Bad signature for {artifact_path.name}", verified)
            return VerifyOutcome.FAILED

        LOGGER.debug(f"Signature OK for {artifact_path.name} (key {verified.key_id})")
        return VerifyOutcome.VERIFIED

    @staticmethod
    def _log_failure(message: str, result: Any) -> None:
        status = getattr(result, "status", None)
        LOGGER.error(f"{message} ({status})" if status else message)
        stderr = getattr(result, "stderr", "")
        if stderr:
            LOGGER.debug(stderr.strip())

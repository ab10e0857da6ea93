"""Trusted release signing key.

The key ships as package data and is read once at startup into the
immutable WrapperConfig. It is never rotated at runtime.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Optional

from bazelpin.core.errors import ConfigError
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)

# Package data file holding the ASCII-armored release key
RELEASE_KEY_RESOURCE = "bazel-release.pub.asc"

PUBLIC_KEY_HEADER = "-----BEGIN PGP PUBLIC KEY BLOCK-----"


def has_public_key_block(key_text: str) -> bool:
    """Check whether text contains an ASCII-armored public key block."""
    return PUBLIC_KEY_HEADER in key_text


def load_trusted_key(key_file: Optional[Path] = None) -> str:
    """Load the trusted release key.

    Args:
        key_file: Optional replacement key file (for private release
            mirrors signed with their own key). Defaults to the key
            shipped with bazelpin.

    Returns:
        The key file's text.

    Raises:
        ConfigError: If the key file cannot be read.
    """
    if key_file is not None:
        try:
            text = key_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read trusted key file {key_file}: {e}") from e
        source = str(key_file)
    else:
        data_dir = resources.files("bazelpin.bootstrap").joinpath("data")
        resource = data_dir.joinpath(RELEASE_KEY_RESOURCE)
        try:
            text = resource.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read bundled release key: {e}") from e
        source = RELEASE_KEY_RESOURCE

    if not has_public_key_block(text):
        LOGGER.debug(f"No public key block in {source}")
    return text

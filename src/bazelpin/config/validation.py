"""Configuration validation for bazelpin.

Unknown keys only produce a warning (with a suggestion when one is
close). A known key with the wrong type is an error.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any, Dict, Optional

from bazelpin.core.errors import ConfigError
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)

# Valid top-level keys and the type each value must have
VALID_KEYS: Dict[str, type] = {
    "tool_name": str,
    "release_base_url": str,
    "version_file": str,
    "binary_path": str,
    "cache_dir": str,
    "trusted_key_file": str,
}


def _suggest(key: str) -> Optional[str]:
    matches = get_close_matches(key, list(VALID_KEYS), n=1, cutoff=0.6)
    return matches[0] if matches else None


def validate_config(data: Dict[str, Any], source: str) -> None:
    """Validate a raw config mapping.

    Args:
        data: Parsed YAML mapping.
        source: Where the mapping came from, for messages.

    Raises:
        ConfigError: If a known key has a value of the wrong type, or
            release_base_url is not an https:// URL.
    """
    for key, value in data.items():
        if key not in VALID_KEYS:
            suggestion = _suggest(str(key))
            hint = f" (did you mean '{suggestion}'?)" if suggestion else ""
            LOGGER.warning(f"{source}: unknown config key '{key}'{hint}")
            continue

        expected = VALID_KEYS[key]
        if not isinstance(value, expected):
            raise ConfigError(
                f"{source}: '{key}' must be a {expected.__name__}, "
                f"got {type(value).__name__}"
            )

    base_url = data.get("release_base_url")
    if isinstance(base_url, str) and not base_url.startswith("https://"):
        raise ConfigError(f"{source}: release_base_url must be an https:// URL, got {base_url}")

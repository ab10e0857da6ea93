"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Global config ($BAZELPIN_CONFIG or ~/.config/bazelpin/config.yml)
- Workspace config (.bazelpin.yml in the workspace root)
- Environment variable expansion (${VAR})
- Environment overrides (BAZELPIN_CACHE_DIR)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from bazelpin.bootstrap.keys import load_trusted_key
from bazelpin.bootstrap.paths import BAZELPIN_CACHE_DIR_ENV
from bazelpin.config.models import WrapperConfig
from bazelpin.config.validation import validate_config
from bazelpin.core.errors import ConfigError
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [".bazelpin.yml", ".bazelpin.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable naming an explicit global config file
BAZELPIN_CONFIG_ENV = "BAZELPIN_CONFIG"
XDG_CONFIG_HOME_ENV = "XDG_CONFIG_HOME"

# Keys whose values are filesystem paths, resolved against the config file
PATH_KEYS = ("cache_dir", "trusted_key_file")

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def load_config(
    workspace_root: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> WrapperConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. Environment overrides (BAZELPIN_CACHE_DIR)
    2. Workspace config (.bazelpin.yml)
    3. Global config
    4. Built-in defaults

    Args:
        workspace_root: Workspace root for finding .bazelpin.yml.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Frozen WrapperConfig with the trusted key loaded.

    Raises:
        ConfigError: If the workspace config or the trusted key file
            cannot be read or parsed.
    """
    env = os.environ if environ is None else environ
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config. A broken global file must not stop a build.
    global_path = find_global_config(env)
    if global_path is not None:
        try:
            global_dict = load_yaml_file(global_path, env)
            validate_config(global_dict, source=str(global_path))
            merged = merge_configs(merged, global_dict)
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except (ConfigError, OSError, yaml.YAMLError) as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    # Layer 2: Workspace config
    project_path = find_project_config(workspace_root)
    if project_path is not None:
        try:
            project_dict = load_yaml_file(project_path, env)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {project_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read {project_path}: {e}") from e
        validate_config(project_dict, source=str(project_path))
        merged = merge_configs(merged, project_dict)
        sources.append(f"project:{project_path}")
        LOGGER.debug(f"Loaded workspace config from {project_path}")

    # Layer 3: Environment overrides
    cache_override = env.get(BAZELPIN_CACHE_DIR_ENV)
    if cache_override:
        merged["cache_dir"] = str(Path(cache_override).expanduser())
        sources.append("env")

    config = dict_to_config(merged)
    LOGGER.debug(f"Config loaded from sources: {sources}")
    return WrapperConfig(
        trusted_key=load_trusted_key(config.trusted_key_file),
        tool_name=config.tool_name,
        release_base_url=config.release_base_url,
        version_file=config.version_file,
        binary_path=config.binary_path,
        cache_dir=config.cache_dir,
        trusted_key_file=config.trusted_key_file,
        sources=sources,
    )


def find_project_config(workspace_root: Path) -> Optional[Path]:
    """Find config file in the workspace root.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = workspace_root / name
        if config_path.is_file():
            return config_path
    return None


def find_global_config(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Find the global config file.

    Resolution order:
    1. BAZELPIN_CONFIG environment variable (if set)
    2. $XDG_CONFIG_HOME/bazelpin/config.yml
    3. ~/.config/bazelpin/config.yml

    Returns:
        Path to global config if it exists, None otherwise.
    """
    env = os.environ if environ is None else environ

    explicit = env.get(BAZELPIN_CONFIG_ENV)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            LOGGER.warning(f"{BAZELPIN_CONFIG_ENV} points at a missing file: {path}")
            return None
        return path

    config_home = env.get(XDG_CONFIG_HOME_ENV)
    base = Path(config_home) if config_home else Path.home() / ".config"
    config_path = base / "bazelpin" / GLOBAL_CONFIG_NAME
    if config_path.is_file():
        return config_path
    return None


def load_yaml_file(path: Path, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values and resolves
    relative path values against the file's directory.
    Variables are looked up in ``environ`` (defaults to os.environ).

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    expanded = expand_env_vars(data, environ)
    for key in PATH_KEYS:
        value = expanded.get(key)
        if isinstance(value, str) and value:
            resolved = Path(value).expanduser()
            if not resolved.is_absolute():
                resolved = path.parent / resolved
            expanded[key] = str(resolved)
    return expanded


def expand_env_vars(data: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    env = os.environ if environ is None else environ
    if isinstance(data, dict):
        return {k: expand_env_vars(v, env) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item, env) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(lambda match: _env_var_replacer(match, env), data)
    else:
        return data


def _env_var_replacer(match: re.Match[str], environ: Mapping[str, str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two config dicts, with overlay taking precedence."""
    result = base.copy()
    result.update(overlay)
    return result


def dict_to_config(data: Dict[str, Any]) -> WrapperConfig:
    """Convert a merged config dict to a WrapperConfig without a key.

    The trusted key is filled in by load_config once the key file is known.
    """
    defaults = WrapperConfig(trusted_key="")

    cache_dir = data.get("cache_dir")
    key_file = data.get("trusted_key_file")

    return WrapperConfig(
        trusted_key="",
        tool_name=data.get("tool_name", defaults.tool_name),
        release_base_url=data.get("release_base_url", defaults.release_base_url),
        version_file=data.get("version_file", defaults.version_file),
        binary_path=data.get("binary_path", defaults.binary_path),
        cache_dir=Path(cache_dir) if cache_dir else None,
        trusted_key_file=Path(key_file) if key_file else None,
    )

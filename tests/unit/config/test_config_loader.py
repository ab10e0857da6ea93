"""Tests for configuration loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from bazelpin.bootstrap.download import DEFAULT_RELEASE_BASE_URL
from bazelpin.config.loader import (
    expand_env_vars,
    find_global_config,
    find_project_config,
    load_config,
    load_yaml_file,
)
from bazelpin.config.models import WrapperConfig
from bazelpin.core.errors import ConfigError

KEY_TEXT = "-----BEGIN PGP PUBLIC KEY BLOCK-----\n\nabc\n-----END PGP PUBLIC KEY BLOCK-----\n"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    return root


@pytest.fixture
def isolated_env(tmp_path: Path) -> dict:
    """Environment with no global config and no overrides."""
    return {"XDG_CONFIG_HOME": str(tmp_path / "xdg-config")}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self, workspace: Path, isolated_env: dict) -> None:
        config = load_config(workspace, isolated_env)
        assert isinstance(config, WrapperConfig)
        assert config.tool_name == "bazel"
        assert config.release_base_url == DEFAULT_RELEASE_BASE_URL
        assert config.version_file == "tools/bazel-version"
        assert config.binary_path == "bin/bazel"
        assert config.cache_dir is None
        assert isinstance(config.trusted_key, str)
        assert config.sources == []

    def test_config_is_frozen(self, workspace: Path, isolated_env: dict) -> None:
        config = load_config(workspace, isolated_env)
        with pytest.raises(AttributeError):
            config.trusted_key = "other"  # type: ignore[misc]

    def test_workspace_config(self, workspace: Path, isolated_env: dict) -> None:
        (workspace / "mirror.asc").write_text(KEY_TEXT)
        (workspace / ".bazelpin.yml").write_text(
            "release_base_url: https://mirror.example.com/bazel\n"
            "trusted_key_file: mirror.asc\n"
            "cache_dir: cache\n"
        )
        config = load_config(workspace, isolated_env)
        assert config.release_base_url == "https://mirror.example.com/bazel"
        assert config.trusted_key == KEY_TEXT
        assert config.trusted_key_file == workspace / "mirror.asc"
        assert config.cache_dir == workspace / "cache"
        assert config.sources == [f"project:{workspace / '.bazelpin.yml'}"]

    def test_workspace_overrides_global(
        self, workspace: Path, isolated_env: dict, tmp_path: Path
    ) -> None:
        global_dir = tmp_path / "xdg-config" / "bazelpin"
        global_dir.mkdir(parents=True)
        (global_dir / "config.yml").write_text(
            "version_file: .bazelversion\nrelease_base_url: https://global.example.com\n"
        )
        (workspace / ".bazelpin.yml").write_text("release_base_url: https://ws.example.com\n")

        config = load_config(workspace, isolated_env)

        assert config.version_file == ".bazelversion"
        assert config.release_base_url == "https://ws.example.com"
        assert [s.split(":")[0] for s in config.sources] == ["global", "project"]

    def test_broken_global_config_is_a_warning(
        self, workspace: Path, isolated_env: dict, tmp_path: Path, caplog
    ) -> None:
        global_dir = tmp_path / "xdg-config" / "bazelpin"
        global_dir.mkdir(parents=True)
        (global_dir / "config.yml").write_text("tool_name: [unclosed\n")

        with caplog.at_level(logging.WARNING):
            config = load_config(workspace, isolated_env)

        assert config.tool_name == "bazel"
        assert "Failed to load global config" in caplog.text

    def test_broken_workspace_config_raises(self, workspace: Path, isolated_env: dict) -> None:
        (workspace / ".bazelpin.yml").write_text("tool_name: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(workspace, isolated_env)

    def test_wrong_type_raises(self, workspace: Path, isolated_env: dict) -> None:
        (workspace / ".bazelpin.yml").write_text("version_file: 3\n")
        with pytest.raises(ConfigError, match="must be a str"):
            load_config(workspace, isolated_env)

    def test_plain_http_base_url_raises(self, workspace: Path, isolated_env: dict) -> None:
        (workspace / ".bazelpin.yml").write_text("release_base_url: http://insecure.example.com\n")
        with pytest.raises(ConfigError, match="https"):
            load_config(workspace, isolated_env)

    def test_unknown_key_warns_with_suggestion(
        self, workspace: Path, isolated_env: dict, caplog
    ) -> None:
        (workspace / ".bazelpin.yml").write_text("cache_dri: /tmp/x\n")
        with caplog.at_level(logging.WARNING):
            load_config(workspace, isolated_env)
        assert "did you mean 'cache_dir'" in caplog.text

    def test_env_cache_dir_overrides_file(
        self, workspace: Path, isolated_env: dict, tmp_path: Path
    ) -> None:
        (workspace / ".bazelpin.yml").write_text("cache_dir: /from/file\n")
        env = dict(isolated_env, BAZELPIN_CACHE_DIR=str(tmp_path / "from-env"))
        config = load_config(workspace, env)
        assert config.cache_dir == tmp_path / "from-env"
        assert config.sources[-1] == "env"

    def test_missing_trusted_key_file_raises(self, workspace: Path, isolated_env: dict) -> None:
        (workspace / ".bazelpin.yml").write_text("trusted_key_file: nope.asc\n")
        with pytest.raises(ConfigError, match="trusted key file"):
            load_config(workspace, isolated_env)


class TestFindConfig:
    def test_find_project_config_prefers_yml(self, workspace: Path) -> None:
        (workspace / ".bazelpin.yml").write_text("")
        (workspace / ".bazelpin.yaml").write_text("")
        assert find_project_config(workspace) == workspace / ".bazelpin.yml"

    def test_find_project_config_none(self, workspace: Path) -> None:
        assert find_project_config(workspace) is None

    def test_explicit_global_config(self, tmp_path: Path) -> None:
        path = tmp_path / "global.yml"
        path.write_text("")
        assert find_global_config({"BAZELPIN_CONFIG": str(path)}) == path

    def test_explicit_global_config_missing(self, tmp_path: Path) -> None:
        assert find_global_config({"BAZELPIN_CONFIG": str(tmp_path / "absent.yml")}) is None


class TestLoadYamlFile:
    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml_file(path)

    def test_expands_and_resolves_paths(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yml"
        path.write_text("cache_dir: ${BAZELPIN_TEST_DIR:-rel}/cache\n")
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("BAZELPIN_TEST_DIR", None)
            data = load_yaml_file(path)
        assert data["cache_dir"] == str(tmp_path / "rel" / "cache")


class TestExpandEnvVars:
    def test_expands_set_variable(self) -> None:
        with patch.dict(os.environ, {"BAZELPIN_TEST_VAR": "value"}):
            assert expand_env_vars({"a": ["${BAZELPIN_TEST_VAR}"]}) == {"a": ["value"]}

    def test_default_value(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("BAZELPIN_TEST_VAR", None)
            assert expand_env_vars("${BAZELPIN_TEST_VAR:-fallback}") == "fallback"

    def test_non_strings_untouched(self) -> None:
        assert expand_env_vars({"n": 3}) == {"n": 3}

    def test_uses_given_mapping_not_process_env(self) -> None:
        with patch.dict(os.environ, {"BAZELPIN_TEST_VAR": "process"}):
            expanded = expand_env_vars("${BAZELPIN_TEST_VAR}", {"BAZELPIN_TEST_VAR": "given"})
        assert expanded == "given"


class TestLoadConfigExpansion:
    def test_workspace_config_expands_from_given_env(
        self, workspace: Path, isolated_env: dict, tmp_path: Path
    ) -> None:
        (workspace / ".bazelpin.yml").write_text("cache_dir: ${BAZELPIN_TEST_CACHE}/bazel\n")
        env = dict(isolated_env, BAZELPIN_TEST_CACHE=str(tmp_path / "from-env"))
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("BAZELPIN_TEST_CACHE", None)
            config = load_config(workspace, env)
        assert config.cache_dir == tmp_path / "from-env" / "bazel"

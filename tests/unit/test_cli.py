"""Tests for the bazelpin console entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

import bazelpin.cli as cli
from bazelpin.bootstrap.platform import PlatformInfo
from bazelpin.core.errors import UnsupportedPlatformError

LINUX = PlatformInfo(os="linux", arch="x86_64")


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    (root / "MODULE.bazel").write_text("")
    monkeypatch.chdir(root)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("BAZELPIN_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.delenv("BAZELPIN_CONFIG", raising=False)
    monkeypatch.delenv("BAZEL_VERSION_TRACE", raising=False)
    return root


@pytest.fixture(autouse=True)
def linux_host():
    with patch("bazelpin.launcher.get_platform_info", return_value=LINUX):
        yield


def _install_cached(tmp_path: Path, version: str) -> Path:
    binary = tmp_path / "cache" / f"{version}-linux-x86_64" / "bin" / "bazel"
    binary.parent.mkdir(parents=True)
    binary.write_text("#!/bin/sh\n")
    binary.chmod(0o755)
    return binary


class TestExitCodes:
    def test_missing_version_file_exits_1(self, workspace: Path, capsys) -> None:
        exit_code = cli.main(["version"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert "bazelpin:" in captured.err
        assert str(workspace.resolve() / "tools" / "bazel-version") in captured.err

    def test_unsupported_platform_exits_1(self, workspace: Path, capsys) -> None:
        with patch(
            "bazelpin.launcher.get_platform_info",
            side_effect=UnsupportedPlatformError("Unsupported operating system: Windows"),
        ):
            exit_code = cli.main([])
        assert exit_code == 1
        assert "Unsupported operating system" in capsys.readouterr().err


class TestArgumentForwarding:
    def test_warm_cache_execs_with_arguments_untouched(
        self, workspace: Path, tmp_path: Path, capsys
    ) -> None:
        (workspace / "tools").mkdir()
        (workspace / "tools" / "bazel-version").write_text("0.7.0\n")
        binary = _install_cached(tmp_path, "0.7.0")
        args = ["--help", "--version", "build", "-c", "opt", "//..."]

        with patch("bazelpin.launcher.os.execv") as mock_execv:
            cli.main(args)

        mock_execv.assert_called_once_with(str(binary), [str(binary), *args])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_reads_sys_argv_by_default(self, workspace: Path, tmp_path: Path) -> None:
        (workspace / "tools").mkdir()
        (workspace / "tools" / "bazel-version").write_text("0.6.1")
        binary = _install_cached(tmp_path, "0.6.1")

        with patch("sys.argv", ["bazelpin", "info", "release"]):
            with patch("bazelpin.launcher.os.execv") as mock_execv:
                cli.main()

        mock_execv.assert_called_once_with(str(binary), [str(binary), "info", "release"])

    def test_trace_is_enabled_from_environment(self, workspace: Path, monkeypatch) -> None:
        monkeypatch.setenv("BAZEL_VERSION_TRACE", "1")
        with patch("bazelpin.cli.configure_logging") as mock_configure:
            cli.main([])
        mock_configure.assert_called_once_with(trace=True)

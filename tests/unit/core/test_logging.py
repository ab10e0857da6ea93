"""Tests for logging configuration."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from bazelpin.core.logging import configure_logging, get_logger, trace_enabled


class TestTraceEnabled:
    def test_unset_variable(self) -> None:
        assert trace_enabled({}) is False

    def test_sentinel_value(self) -> None:
        assert trace_enabled({"BAZEL_VERSION_TRACE": "unset"}) is False

    @pytest.mark.parametrize("value", ["1", "0", "", "yes"])
    def test_any_other_value(self, value: str) -> None:
        assert trace_enabled({"BAZEL_VERSION_TRACE": value}) is True


class TestConfigureLogging:
    def test_default_level_is_warning(self) -> None:
        with patch("logging.basicConfig") as mock_config:
            configure_logging()
        assert mock_config.call_args.kwargs["level"] == logging.WARNING

    def test_trace_level_is_debug(self) -> None:
        with patch("logging.basicConfig") as mock_config:
            configure_logging(trace=True)
        assert mock_config.call_args.kwargs["level"] == logging.DEBUG


def test_get_logger_uses_name() -> None:
    assert get_logger("bazelpin.test").name == "bazelpin.test"

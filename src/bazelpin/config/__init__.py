"""Configuration loading for bazelpin."""

from bazelpin.config.loader import load_config
from bazelpin.config.models import WrapperConfig

__all__ = ["load_config", "WrapperConfig"]

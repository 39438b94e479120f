"""Harness configuration module."""

from .harness_config import (
    ConfigKey,
    ConfigurationStore,
    read_config_file,
    CONFIG_FILE,
    DEFAULT_CONFIG_FILE,
    HARDCODED_DEFAULTS,
)

__all__ = [
    "ConfigKey",
    "ConfigurationStore",
    "read_config_file",
    "CONFIG_FILE",
    "DEFAULT_CONFIG_FILE",
    "HARDCODED_DEFAULTS",
]

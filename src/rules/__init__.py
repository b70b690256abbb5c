"""Configuration for phpusage runs."""

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    FinderConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "FinderConfig",
    "load_config",
]

"""Configuration module for sdkfetch.

This module provides YAML configuration parsing and validation for sdkfetch.yaml.
"""

from sdkfetch.config.parser import (
    DEFAULT_CONFIG_NAME,
    InstallerConfig,
    load_config,
    parse_config,
)
from sdkfetch.core.exceptions import ConfigError

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "InstallerConfig",
    "ConfigError",
    "load_config",
    "parse_config",
]

"""Installer settings, collected fields and preflight checks."""

from mumbleup.config.fields import ConfigurationField, ConfigurationSet
from mumbleup.config.loader import (
    home_config_exists,
    load_config,
    local_config_exists,
)
from mumbleup.config.schema import DEFAULT_CONFIG, InstallerConfig

__all__ = [
    "ConfigurationField",
    "ConfigurationSet",
    "DEFAULT_CONFIG",
    "InstallerConfig",
    "home_config_exists",
    "load_config",
    "local_config_exists",
]

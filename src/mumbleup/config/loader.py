"""Settings file loading and merging."""

import logging
from pathlib import Path

import yaml

from mumbleup.config.schema import DEFAULT_CONFIG, InstallerConfig

logger = logging.getLogger(__name__)

SETTINGS_DIRNAME = ".mumbleup"
CONFIG_FILENAME = "config.yaml"


def get_home_config_path() -> Path:
    """Get path to global settings: ~/.mumbleup/config.yaml."""
    return Path.home() / SETTINGS_DIRNAME / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to settings for this directory: ./.mumbleup/config.yaml."""
    return Path.cwd() / SETTINGS_DIRNAME / CONFIG_FILENAME


def home_config_exists() -> bool:
    return get_home_config_path().exists()


def local_config_exists() -> bool:
    return get_local_config_path().exists()


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Read one settings file.

    Missing, empty, malformed or non-mapping files all read as None.
    """
    if not path.exists():
        return None
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed settings file %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Ignoring settings file %s: not a mapping", path)
        return None
    return data


def load_config() -> InstallerConfig:
    """Load merged settings.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global settings (~/.mumbleup/config.yaml)
    3. Local settings (./.mumbleup/config.yaml)
    """
    config = DEFAULT_CONFIG
    for path in (get_home_config_path(), get_local_config_path()):
        data = load_yaml_config(path)
        if data:
            logger.debug("Applying settings from %s", path)
            config = config.merge(InstallerConfig.from_dict(data))
    return config


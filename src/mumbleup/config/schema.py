"""Installer settings schema."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class InstallerConfig:
    """Installer settings.

    None values indicate "not set" and are filled from lower layers
    when merged.
    """

    # Compose mode
    compose_file: str | None = None
    container_name: str | None = None
    docker_install_url: str | None = None

    # Native mode
    service_name: str | None = None
    native_config_file: str | None = None

    # Server defaults offered by the wizard
    port: int | None = None
    timezone: str | None = None

    # Firewall
    ssh_port: int | None = None

    # Secret extraction polling
    secret_attempts: int | None = None
    secret_interval: float | None = None

    def merge(self, other: InstallerConfig) -> InstallerConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new InstallerConfig instance.
        """
        merged: dict[str, Any] = {}
        for f in fields(self):
            theirs = getattr(other, f.name)
            merged[f.name] = theirs if theirs is not None else getattr(self, f.name)
        return InstallerConfig(**merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallerConfig:
        """Create an InstallerConfig from a dictionary.

        Unknown keys are ignored. Numeric values are coerced; a value that
        does not convert is treated as unset.
        """

        def _number(key: str, kind: Callable[[Any], Any]) -> Any:
            raw = data.get(key)
            if raw is None:
                return None
            try:
                return kind(raw)
            except (TypeError, ValueError):
                logger.warning("Ignoring setting %s: %r is not a number", key, raw)
                return None

        def _str(key: str) -> str | None:
            raw = data.get(key)
            return str(raw) if raw is not None else None

        return cls(
            compose_file=_str("compose_file"),
            container_name=_str("container_name"),
            docker_install_url=_str("docker_install_url"),
            service_name=_str("service_name"),
            native_config_file=_str("native_config_file"),
            port=_number("port", int),
            timezone=_str("timezone"),
            ssh_port=_number("ssh_port", int),
            secret_attempts=_number("secret_attempts", int),
            secret_interval=_number("secret_interval", float),
        )


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = InstallerConfig(
    compose_file="docker-compose.yml",
    container_name="mumble-server",
    docker_install_url="https://get.docker.com",
    service_name="mumble-server",
    port=64738,
    timezone="UTC",
    ssh_port=22,
    secret_attempts=30,
    secret_interval=2.0,
)

"""Shared fixtures for mumbleup tests."""

from collections.abc import Callable

import pytest

from mumbleup.config import fields as k
from mumbleup.config.fields import ConfigurationSet

ConfigFactory = Callable[..., ConfigurationSet]


@pytest.fixture
def compose_config() -> ConfigFactory:
    """Factory for a collected compose-mode configuration."""

    def _make(**overrides: str | bool) -> ConfigurationSet:
        values: dict[str, str | bool] = {
            k.SERVER_NAME: "My Server",
            k.WELCOME_TEXT: "<b>Welcome to My Server!</b>",
            k.SERVER_PASSWORD: "",
            k.PUBLIC_LISTING: False,
            k.REGISTER_HOSTNAME: "",
            k.REGISTER_NAME: "My Server",
            k.REGISTER_PASSWORD: "",
            k.REGISTER_URL: "",
            k.PORT: "64738",
            k.TIMEZONE: "UTC",
        }
        values.update(overrides)
        return ConfigurationSet.from_values(values)

    return _make


@pytest.fixture
def native_config() -> ConfigFactory:
    """Factory for a collected native-mode configuration."""

    def _make(**overrides: str | bool) -> ConfigurationSet:
        values: dict[str, str | bool] = {
            k.SERVER_NAME: "Mumble Server",
            k.WELCOME_TEXT: "Welcome!",
            k.SERVER_PASSWORD: "",
            k.PORT: "64738",
            k.MAX_USERS: "100",
            k.BANDWIDTH: "558000",
            k.CERT_REQUIRED: False,
            k.OBFUSCATE: False,
            k.ALLOW_RECORDING: True,
            k.ALLOW_HTML: True,
            k.PUBLIC_LISTING: False,
        }
        values.update(overrides)
        return ConfigurationSet.from_values(values)

    return _make

"""Collected configuration values handed to the transformer."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass

from mumbleup.errors import MissingFieldError

# Returns an error message, or None when the raw value is acceptable.
Validator = Callable[[str], "str | None"]

TRUE = "true"
FALSE = "false"


@dataclass(frozen=True)
class ConfigurationField:
    """A single collected key/value pair."""

    key: str
    value: str = ""
    required: bool = False
    validator: Validator | None = None
    default: str | None = None

    def is_valid(self) -> bool:
        """Check the value against the required flag and validator."""
        if self.required and not self.value:
            return False
        if self.validator is not None:
            return self.validator(self.value) is None
        return True


class ConfigurationSet(Mapping[str, ConfigurationField]):
    """Immutable, ordered mapping of key to ConfigurationField."""

    def __init__(self, fields: Iterable[ConfigurationField] = ()) -> None:
        self._fields: dict[str, ConfigurationField] = {}
        for f in fields:
            self._fields[f.key] = f

    @classmethod
    def from_values(cls, values: Mapping[str, str | bool]) -> ConfigurationSet:
        """Build a set from plain values. Booleans become gate strings."""
        return cls(
            ConfigurationField(key=key, value=to_flag(v) if isinstance(v, bool) else v)
            for key, v in values.items()
        )

    def __getitem__(self, key: str) -> ConfigurationField:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"ConfigurationSet({self.as_dict()!r})"

    def value(self, key: str) -> str:
        """Return the value for key, or an empty string if not collected."""
        f = self._fields.get(key)
        return f.value if f is not None else ""

    def flag(self, key: str) -> bool:
        """Return a gate field as a boolean."""
        return self.value(key).lower() == TRUE

    def as_dict(self) -> dict[str, str]:
        """Return plain key/value pairs in collection order."""
        return {key: f.value for key, f in self._fields.items()}

    def validate(self) -> None:
        """Raise MissingFieldError for the first required field left empty."""
        for f in self._fields.values():
            if f.required and not f.value:
                raise MissingFieldError(f.key)


def to_flag(value: bool) -> str:
    """Encode a boolean gate value."""
    return TRUE if value else FALSE


# Field keys shared by the wizard, the rule tables and the reporter.
SERVER_NAME = "server_name"
WELCOME_TEXT = "welcome_text"
SERVER_PASSWORD = "server_password"
PUBLIC_LISTING = "public_listing"
REGISTER_HOSTNAME = "register_hostname"
REGISTER_NAME = "register_name"
REGISTER_PASSWORD = "register_password"
REGISTER_URL = "register_url"
REGISTER_LOCATION = "register_location"
PORT = "port"
TIMEZONE = "timezone"
MAX_USERS = "max_users"
BANDWIDTH = "bandwidth"
CERT_REQUIRED = "cert_required"
OBFUSCATE = "obfuscate"
ALLOW_RECORDING = "allow_recording"
ALLOW_HTML = "allow_html"

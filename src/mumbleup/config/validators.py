"""Input validators for the configuration wizard.

Each factory returns a callable that takes the raw answer and returns an
error message, or None when the answer is acceptable.
"""

import re
from collections.abc import Collection

from mumbleup.config.fields import Validator


def _is_number(value: str) -> bool:
    return re.fullmatch(r"[0-9]+", value) is not None


def not_empty(field_name: str) -> Validator:
    """Reject empty answers."""

    def _check(value: str) -> str | None:
        if not value.strip():
            return f"{field_name} cannot be empty."
        return None

    return _check


def number_range(minimum: int | None = None, maximum: int | None = None) -> Validator:
    """Accept only whole numbers within the optional bounds."""

    def _check(value: str) -> str | None:
        if not _is_number(value):
            return "Please enter a valid number."
        number = int(value)
        if minimum is not None and number < minimum:
            return f"Please enter a number at least {minimum}."
        if maximum is not None and number > maximum:
            return f"Please enter a number at most {maximum}."
        return None

    return _check


def one_of(choices: Collection[str], message: str) -> Validator:
    """Accept only the exact menu entries in `choices`."""

    def _check(value: str) -> str | None:
        return None if value in choices else message

    return _check


def port(value: str) -> str | None:
    """Accept TCP/UDP port numbers."""
    if not _is_number(value) or not 1 <= int(value) <= 65535:
        return "Port must be a number between 1 and 65535."
    return None


def username(value: str) -> str | None:
    """Accept names usable for a new system account."""
    if not value:
        return "Username cannot be empty."
    if value == "root":
        return "Cannot create user named 'root'."
    return None

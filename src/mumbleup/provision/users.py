"""Creating an unprivileged admin account when started as root."""

from __future__ import annotations

import logging
import pwd
from pathlib import Path

from mumbleup.command import run_command
from mumbleup.config.validators import username as validate_username
from mumbleup.errors import PreconditionError

logger = logging.getLogger(__name__)

SUDOERS_DROP_IN = Path("/etc/sudoers.d/sudo_group")


def user_exists(name: str) -> bool:
    """Check the passwd database for `name`."""
    try:
        pwd.getpwnam(name)
    except KeyError:
        return False
    return True


def create_admin_user(name: str, password: str) -> None:
    """Create `name` with a home directory and sudo rights.

    Must run as root.
    """
    error = validate_username(name)
    if error:
        raise PreconditionError(error)
    if user_exists(name):
        raise PreconditionError(f"User '{name}' already exists.")
    if not password:
        raise PreconditionError("Password cannot be empty.")

    run_command(["useradd", "-m", "-s", "/bin/bash", name])
    run_command(["chpasswd"], input_text=f"{name}:{password}\n")
    run_command(["usermod", "-aG", "sudo", name])

    if not SUDOERS_DROP_IN.exists():
        SUDOERS_DROP_IN.write_text("%sudo ALL=(ALL:ALL) ALL\n")
        SUDOERS_DROP_IN.chmod(0o440)
    logger.info("Created user %s with sudo access", name)

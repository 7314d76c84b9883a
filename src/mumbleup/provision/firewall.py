"""Host firewall (ufw) rules."""

from __future__ import annotations

from typing import Literal

from mumbleup.command import run_command
from mumbleup.errors import CommandError, PreconditionError

Protocol = Literal["tcp", "udp"]


class UfwFirewall:
    """Open ports and switch on ufw.

    Every call is safe to repeat: ufw skips rules that already exist.
    """

    def __init__(self, use_sudo: bool = False) -> None:
        self._use_sudo = use_sudo

    def _ufw(self, *args: str, check: bool = True) -> str:
        try:
            result = run_command(["ufw", *args], use_sudo=self._use_sudo, check=check)
        except CommandError as e:
            if e.returncode == 127:
                raise PreconditionError("ufw is not installed") from e
            raise
        return result.stdout or ""

    def open_port(self, port: int, protocol: Protocol = "tcp") -> None:
        """Allow inbound traffic on `port`/`protocol`."""
        self._ufw("allow", f"{port}/{protocol}")

    def enable(self) -> None:
        """Enable the firewall without the interactive confirmation."""
        self._ufw("--force", "enable")

    def reload(self) -> None:
        """Reload rules."""
        self._ufw("reload")

    def is_active(self) -> bool:
        """Check whether ufw reports itself active."""
        return "Status: active" in self._ufw("status", check=False)

    def status(self) -> str:
        """Verbose status text for the completion report."""
        return self._ufw("status", "verbose", check=False)

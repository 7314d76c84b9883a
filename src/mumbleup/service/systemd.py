"""systemd unit control and murmur INI discovery."""

from __future__ import annotations

import re
from pathlib import Path

from mumbleup.command import run_command

UNIT_DIRS = (Path("/lib/systemd/system"), Path("/usr/lib/systemd/system"))

# Where distributions have shipped the murmur INI file.
INI_CANDIDATES = (
    Path("/etc/mumble/mumble-server.ini"),
    Path("/etc/mumble-server.ini"),
    Path("/etc/murmur/murmur.ini"),
)

_INI_ARG = re.compile(r"-ini\s+(\S+)")


class SystemdService:
    """A systemd unit driven through systemctl."""

    def __init__(self, name: str, use_sudo: bool = False) -> None:
        self.name = name
        self._use_sudo = use_sudo

    def _systemctl(self, *args: str, check: bool = True) -> int:
        result = run_command(
            ["systemctl", *args, self.name], use_sudo=self._use_sudo, check=check
        )
        return result.returncode

    def enable(self) -> None:
        self._systemctl("enable")

    def start(self) -> None:
        self._systemctl("start")

    def restart(self) -> None:
        self._systemctl("restart")

    def is_active(self) -> bool:
        return self._systemctl("is-active", "--quiet", check=False) == 0

    def unit_file(self) -> Path | None:
        """Locate the unit file for this service, if installed."""
        for directory in UNIT_DIRS:
            candidate = directory / f"{self.name}.service"
            if candidate.is_file():
                return candidate
        return None


def ini_path_from_unit(unit_file: Path) -> Path | None:
    """Extract the `-ini <path>` argument from a unit's ExecStart line."""
    for line in unit_file.read_text().splitlines():
        if not line.startswith("ExecStart="):
            continue
        m = _INI_ARG.search(line)
        if m:
            return Path(m.group(1))
    return None


def detect_native_config_file(
    service: SystemdService,
    candidates: tuple[Path, ...] = INI_CANDIDATES,
) -> Path | None:
    """Find the INI file the installed server actually reads.

    The unit's ExecStart wins; otherwise the first existing common location.
    """
    unit = service.unit_file()
    if unit is not None:
        from_unit = ini_path_from_unit(unit)
        if from_unit is not None and from_unit.is_file():
            return from_unit
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None

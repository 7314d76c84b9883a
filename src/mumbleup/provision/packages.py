"""apt package installation and repository setup."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from mumbleup.command import run_command
from mumbleup.errors import CommandError, PreconditionError

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")
SOURCES_DIR = Path("/etc/apt/sources.list.d")

_DEBIAN_13_SOURCES = """\
Types: deb deb-src
URIs: https://deb.debian.org/debian
Suites: trixie trixie-updates
Components: main contrib non-free non-free-firmware
Signed-By: /usr/share/keyrings/debian-archive-keyring.gpg
"""

_DEBIAN_13_SECURITY = """\
Types: deb deb-src
URIs: https://security.debian.org/debian-security
Suites: trixie-security
Components: main contrib non-free non-free-firmware
Signed-By: /usr/share/keyrings/debian-archive-keyring.gpg
"""


@dataclass(frozen=True)
class Distro:
    """Distribution id and major version from os-release."""

    id: str = ""
    version: str = ""


def read_os_release(path: Path = OS_RELEASE) -> Distro:
    """Parse ID and the major part of VERSION_ID from os-release."""
    if not path.exists():
        return Distro()
    values: dict[str, str] = {}
    for line in path.read_text().splitlines():
        if "=" not in line:
            continue
        key, _, raw = line.partition("=")
        values[key.strip()] = raw.strip().strip('"')
    return Distro(
        id=values.get("ID", ""),
        version=values.get("VERSION_ID", "").split(".")[0],
    )


def essential_packages(distro: Distro, root_mode: bool) -> list[str]:
    """Packages the compose installer relies on, per distribution."""
    if distro.id == "debian":
        packages = ["curl", "wget", "gnupg", "ca-certificates", "apt-transport-https", "ufw"]
    elif distro.id == "ubuntu":
        packages = [
            "curl",
            "wget",
            "gnupg2",
            "software-properties-common",
            "ca-certificates",
            "apt-transport-https",
            "ufw",
        ]
    else:
        packages = [
            "curl",
            "wget",
            "gnupg",
            "software-properties-common",
            "ca-certificates",
            "apt-transport-https",
            "ufw",
        ]
    if not root_mode:
        packages.append("sudo")
    return packages


class AptPackageManager:
    """Install and verify Debian/Ubuntu packages."""

    def __init__(self, use_sudo: bool = False) -> None:
        self._use_sudo = use_sudo

    def update(self) -> None:
        """Refresh package lists."""
        try:
            run_command(["apt-get", "update"], use_sudo=self._use_sudo, capture=False)
        except CommandError as e:
            raise PreconditionError(
                "Failed to update package lists. "
                "Please check your internet connection and package repositories."
            ) from e

    def upgrade(self) -> None:
        """Upgrade installed packages."""
        run_command(["apt-get", "upgrade", "-y"], use_sudo=self._use_sudo, capture=False)

    def is_installed(self, package: str) -> bool:
        """Check the dpkg database for an installed package."""
        result = run_command(
            ["dpkg-query", "-W", "-f=${Status}", package], check=False
        )
        return result.returncode == 0 and "install ok installed" in result.stdout

    def verify(self, package: str, command: str | None = None) -> bool:
        """Check a package through dpkg, PATH, or the usual binary dirs."""
        if self.is_installed(package):
            return True
        command = command or package
        if shutil.which(command) is not None:
            return True
        return any(Path(d, command).is_file() for d in ("/usr/bin", "/usr/sbin"))

    def install(self, *packages: str) -> None:
        """Install packages non-interactively."""
        run_command(
            ["apt-get", "install", "-y", *packages],
            use_sudo=self._use_sudo,
            capture=False,
        )

    def ensure_installed(self, package: str, command: str | None = None) -> bool:
        """Install `package` unless already present, then verify it.

        Returns True if the package was installed by this call.
        """
        if self.is_installed(package):
            logger.debug("%s already installed", package)
            return False
        self.install(package)
        if not self.verify(package, command):
            raise PreconditionError(f"{package} installation verification failed")
        return True

    def configure_debian_repositories(self, distro: Distro) -> bool:
        """Enable non-free-firmware on Debian 13 (needed for ufw).

        Returns True if the sources were rewritten.
        """
        if distro.id != "debian" or distro.version != "13":
            return False
        sources = SOURCES_DIR / "debian.sources"
        if sources.exists() and "non-free-firmware" in sources.read_text():
            return False
        self._write_root_file(sources, _DEBIAN_13_SOURCES)
        self._write_root_file(SOURCES_DIR / "debian-security.sources", _DEBIAN_13_SECURITY)
        return True

    def _write_root_file(self, path: Path, content: str) -> None:
        run_command(
            ["tee", str(path)],
            use_sudo=self._use_sudo,
            input_text=content,
        )

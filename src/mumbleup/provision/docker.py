"""Docker engine installation via the upstream convenience script."""

from __future__ import annotations

import getpass
import logging
import os
import shutil
import tempfile
from pathlib import Path

from mumbleup.command import run_command
from mumbleup.errors import PreconditionError, ServiceError
from mumbleup.service.systemd import SystemdService

logger = logging.getLogger(__name__)


class DockerInstaller:
    """Install Docker and make sure its daemon is running."""

    def __init__(
        self,
        use_sudo: bool = False,
        install_url: str = "https://get.docker.com",
    ) -> None:
        self._use_sudo = use_sudo
        self._install_url = install_url
        self._service = SystemdService("docker", use_sudo=use_sudo)

    @staticmethod
    def is_installed() -> bool:
        """Check if the docker CLI is on PATH."""
        return shutil.which("docker") is not None

    def install(self) -> None:
        """Download and run the installer script.

        The invoking user is added to the docker group when not root.
        """
        if shutil.which("curl") is None:
            raise PreconditionError("curl not found after essential packages installation")

        fd, script_name = tempfile.mkstemp(prefix="install-docker-", suffix=".sh")
        os.close(fd)
        script = Path(script_name)
        try:
            run_command(["curl", "-fsSL", self._install_url, "-o", str(script)])
            run_command(["sh", str(script)], use_sudo=self._use_sudo, capture=False)
        finally:
            script.unlink(missing_ok=True)

        if self._use_sudo:
            user = os.environ.get("USER") or getpass.getuser()
            run_command(["usermod", "-aG", "docker", user], use_sudo=True)

    def ensure_runtime_active(self) -> None:
        """Enable the docker unit, start it if needed and verify it runs."""
        self._service.enable()
        if not self._service.is_active():
            self._service.start()
        if not self._service.is_active():
            raise ServiceError("Docker service is not running after installation")

"""docker compose deployment of the server container."""

from __future__ import annotations

import logging
import re
import shutil
import time
from collections.abc import Callable
from pathlib import Path

import docker
from docker.errors import DockerException, NotFound

from mumbleup.command import run_command
from mumbleup.errors import CommandError, ServiceError

logger = logging.getLogger(__name__)

# Tried in order against each log line; group 1 is the password.
SUPERUSER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"superuser.*?set to '([^']+)'", re.IGNORECASE),
    re.compile(r"superuser password[^']*'([^']+)'", re.IGNORECASE),
    re.compile(r"set to '([^']+)'", re.IGNORECASE),
)


def extract_secret(
    text: str, patterns: tuple[re.Pattern[str], ...] = SUPERUSER_PATTERNS
) -> str | None:
    """Return the first credential captured by `patterns` in `text`."""
    lines = text.splitlines()
    for pattern in patterns:
        for line in lines:
            m = pattern.search(line)
            if m and m.group(1):
                return m.group(1)
    return None


class ComposeService:
    """Bring the compose project up and read the container's output."""

    def __init__(
        self,
        compose_file: Path,
        container_name: str = "mumble-server",
        use_sudo: bool = False,
    ) -> None:
        self.compose_file = compose_file
        self.container_name = container_name
        self._use_sudo = use_sudo
        self._compose: list[str] | None = None

    def _compose_command(self) -> list[str]:
        """Prefer the compose plugin, fall back to standalone docker-compose."""
        if self._compose is None:
            plugin = run_command(
                ["docker", "compose", "version"], use_sudo=self._use_sudo, check=False
            )
            if plugin.returncode == 0:
                self._compose = ["docker", "compose"]
            elif shutil.which("docker-compose") is not None:
                self._compose = ["docker-compose"]
            else:
                raise ServiceError("docker compose is not available")
        return self._compose

    def _run_compose(self, *args: str, check: bool = True) -> None:
        run_command(
            [*self._compose_command(), "-f", str(self.compose_file), *args],
            use_sudo=self._use_sudo,
            check=check,
            cwd=self.compose_file.parent,
        )

    def is_available(self) -> bool:
        """Check that some flavour of docker compose is installed."""
        try:
            self._compose_command()
        except ServiceError:
            return False
        return True

    def down(self) -> None:
        """Stop the project. Failures are ignored (nothing may be running)."""
        self._run_compose("down", check=False)

    def restart(self) -> None:
        """Recreate and start the container in the background."""
        if self.is_active():
            logger.info("Stopping existing %s container", self.container_name)
            self.down()
        try:
            self._run_compose("up", "-d")
        except CommandError as e:
            raise ServiceError(f"Failed to start {self.container_name}: {e}") from e

    def is_active(self) -> bool:
        """Check whether the container is running."""
        result = run_command(
            [
                "docker",
                "ps",
                "-q",
                "-f",
                f"name=^{self.container_name}$",
                "-f",
                "status=running",
            ],
            use_sudo=self._use_sudo,
            check=False,
        )
        return result.returncode == 0 and bool(result.stdout.strip())

    def logs(self) -> str:
        """Combined stdout/stderr of the container so far."""
        result = run_command(
            ["docker", "logs", self.container_name],
            use_sudo=self._use_sudo,
            check=False,
        )
        return (result.stdout or "") + (result.stderr or "")

    def wait_for_secret(
        self,
        patterns: tuple[re.Pattern[str], ...] = SUPERUSER_PATTERNS,
        attempts: int = 30,
        interval: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        on_attempt: Callable[[int], None] | None = None,
    ) -> str | None:
        """Poll the container logs for a generated credential.

        Returns None when nothing shows up within attempts * interval.
        """
        for attempt in range(1, attempts + 1):
            secret = extract_secret(self.logs(), patterns)
            if secret:
                return secret
            if on_attempt is not None:
                on_attempt(attempt)
            if attempt < attempts:
                sleep(interval)
        logger.warning(
            "No credential in %s logs after %d attempts", self.container_name, attempts
        )
        return None


class ContainerInspector:
    """Read-only view of the container through the Docker API."""

    def __init__(self, container_name: str = "mumble-server") -> None:
        self.container_name = container_name
        self._client: docker.DockerClient | None = None

    def _get_client(self) -> docker.DockerClient:
        """Get or create Docker client."""
        if self._client is None:
            self._client = docker.from_env()
        return self._client

    def status(self) -> str | None:
        """Container state ("running", "exited", ...) or None if absent."""
        try:
            container = self._get_client().containers.get(self.container_name)
        except NotFound:
            return None
        return str(container.status)

    def logs(self) -> str:
        """Full container log, or an empty string if there is no container."""
        try:
            container = self._get_client().containers.get(self.container_name)
        except NotFound:
            return ""
        raw: bytes = container.logs(stdout=True, stderr=True)
        return raw.decode("utf-8", errors="replace")

    def close(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            except DockerException:
                logger.debug("Docker client failed to close", exc_info=True)
            self._client = None

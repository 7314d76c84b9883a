"""Package installation: mumble-server from apt, INI rewrite, systemd restart."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from mumbleup.command import is_root, run_command
from mumbleup.config import fields as k
from mumbleup.config.fields import ConfigurationSet
from mumbleup.config.schema import DEFAULT_CONFIG, InstallerConfig
from mumbleup.config.wizard import collect_native_settings
from mumbleup.console import print_header, print_status, print_warning
from mumbleup.errors import ArtifactNotFoundError, PreconditionError, ServiceError
from mumbleup.provision import AptPackageManager, UfwFirewall
from mumbleup.report import report_native_completion
from mumbleup.service import SystemdService, detect_native_config_file
from mumbleup.service.systemd import INI_CANDIDATES
from mumbleup.transform import (
    INI,
    NATIVE_RULES,
    ArtifactBackup,
    timestamped_backup_path,
    transform_artifact,
)

logger = logging.getLogger(__name__)

PACKAGE = "mumble-server"


class NativeInstaller:
    """Runs the package-based installation. Must run as root."""

    def __init__(
        self,
        settings: InstallerConfig = DEFAULT_CONFIG,
        config_file: Path | None = None,
        packages: AptPackageManager | None = None,
        firewall: UfwFirewall | None = None,
        service: SystemdService | None = None,
        collect: Callable[[InstallerConfig], ConfigurationSet] = collect_native_settings,
        reconfigure: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self._config_file = config_file or (
            Path(settings.native_config_file) if settings.native_config_file else None
        )
        self.packages = packages or AptPackageManager()
        self.firewall = firewall or UfwFirewall()
        self.service = service or SystemdService(settings.service_name or PACKAGE)
        self._collect = collect
        self._reconfigure = reconfigure
        self._sleep = sleep
        self.backup_path: Path | None = None

    def run(self) -> None:
        """Full installation. Raises InstallerError subclasses on failure."""
        if not is_root():
            raise PreconditionError("This installer must be run as root or with sudo")

        print_status("Starting Mumble server installation...")
        print_status("Updating package lists...")
        self.packages.update()
        print_status("Upgrading system packages...")
        self.packages.upgrade()

        if self.packages.ensure_installed("ufw"):
            print_status("Installed UFW firewall")
        print_status("Installing Mumble server...")
        self.packages.install(PACKAGE)

        config_file = self.locate_config_file()
        print_status(f"Using configuration file: {config_file}")

        if self._reconfigure:
            print_status("Launching Mumble server configuration...")
            print_warning("Please set the SuperUser password when prompted.")
            run_command(["dpkg-reconfigure", PACKAGE], capture=False)

        print_status("Now let's configure some common settings for your Mumble server...")
        config = self._collect(self.settings)
        config.validate()

        self.apply(config_file, config)
        report_native_completion(
            config, config_file, self.service.name, backup_path=self.backup_path
        )
        print_status("Installation and configuration completed successfully!")

    def locate_config_file(self) -> Path:
        """The INI file to rewrite: explicit override, else detected."""
        print_status("Detecting configuration file location...")
        config_file = self._config_file or detect_native_config_file(self.service)
        if config_file is None or not config_file.is_file():
            locations = ", ".join(str(p) for p in INI_CANDIDATES)
            raise ArtifactNotFoundError(
                "Could not detect Mumble configuration file location. "
                f"Common locations are: {locations}"
            )
        return config_file

    def apply(self, config_file: Path, config: ConfigurationSet) -> None:
        """Rewrite the INI file, open ports and restart the service.

        The INI file is restored from its backup if any of this fails.
        """
        backup_path = timestamped_backup_path(config_file)
        with ArtifactBackup(config_file, backup_path) as backup:
            print_status(f"Configuration backed up to: {backup_path}")
            transform_artifact(config_file, NATIVE_RULES, config, INI)
            print_status("Mumble server configuration has been updated.")

            self.configure_firewall(int(config.value(k.PORT) or self.settings.port or 64738))
            self.restart()
            backup.commit()
        self.backup_path = backup_path

    def configure_firewall(self, port: int) -> None:
        print_header("Configuring UFW firewall")
        ssh_port = self.settings.ssh_port or 22
        print_status(f"Allowing SSH port {ssh_port}...")
        self.firewall.open_port(ssh_port, "tcp")
        print_status(f"Allowing Mumble TCP/UDP port {port}...")
        self.firewall.open_port(port, "tcp")
        self.firewall.open_port(port, "udp")
        if not self.firewall.is_active():
            print_status("Enabling UFW firewall...")
            self.firewall.enable()
        self.firewall.reload()
        print_status("Firewall configuration completed.")

    def restart(self) -> None:
        print_status("Restarting Mumble server to apply all configuration changes...")
        self.service.restart()
        self._sleep(2)
        if not self.service.is_active():
            raise ServiceError(
                "Mumble server failed to start. "
                f"Check logs with: journalctl -u {self.service.name} -xe"
            )
        print_status("Mumble server is running successfully with new configuration!")

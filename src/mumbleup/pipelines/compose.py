"""Container deployment: Docker, compose file rewrite, firewall, startup."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

import click

from mumbleup.command import is_root
from mumbleup.config import fields as k
from mumbleup.config import validators
from mumbleup.config.fields import ConfigurationSet
from mumbleup.config.preflight import check_internet, ensure_sudo
from mumbleup.config.schema import DEFAULT_CONFIG, InstallerConfig
from mumbleup.config.wizard import FieldDefinition, collect_compose_settings, prompt_field
from mumbleup.console import console, print_header, print_status, print_warning
from mumbleup.errors import ArtifactNotFoundError, Cancelled, PreconditionError, ServiceError
from mumbleup.provision import (
    AptPackageManager,
    DockerInstaller,
    UfwFirewall,
    create_admin_user,
    essential_packages,
    read_os_release,
)
from mumbleup.report import render_summary, report_compose_completion
from mumbleup.service import ComposeService
from mumbleup.transform import (
    COMPOSE,
    COMPOSE_RULES,
    ArtifactBackup,
    compose_backup_path,
    transform_artifact,
)

logger = logging.getLogger(__name__)

# Startup checks after `compose up`: attempts x seconds.
STARTUP_CHECKS = 5
STARTUP_INTERVAL = 2.0


def show_welcome() -> None:
    """Explain what is about to happen."""
    print_header("Mumble Server Auto-Installer")
    console.print(
        "\nThis installer sets up Docker and deploys a Mumble voice server.\n"
        "You will be prompted for configuration options along the way.\n\n"
        "Requirements:\n"
        "  - Ubuntu/Debian-based Linux system\n"
        "  - Sudo privileges\n"
        "  - Internet connection\n\n"
        "Steps:\n"
        "  1. Install Docker using the official installer\n"
        "  2. Configure Mumble server settings\n"
        "  3. Update docker-compose.yml with your settings\n"
        "  4. Configure firewall (UFW) for SSH and Mumble ports\n"
        "  5. Deploy the Mumble server\n"
    )


class ComposeInstaller:
    """Runs the container installation from prerequisites to report."""

    def __init__(
        self,
        compose_file: Path,
        settings: InstallerConfig = DEFAULT_CONFIG,
        assume_yes: bool = False,
        root_mode: bool | None = None,
        packages: AptPackageManager | None = None,
        docker_installer: DockerInstaller | None = None,
        firewall: UfwFirewall | None = None,
        service: ComposeService | None = None,
        collect: Callable[[InstallerConfig], ConfigurationSet] = collect_compose_settings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.compose_file = compose_file
        self.settings = settings
        self.assume_yes = assume_yes
        self.root_mode = is_root() if root_mode is None else root_mode
        use_sudo = not self.root_mode
        self.packages = packages or AptPackageManager(use_sudo=use_sudo)
        self.docker = docker_installer or DockerInstaller(
            use_sudo=use_sudo,
            install_url=settings.docker_install_url or "https://get.docker.com",
        )
        self.firewall = firewall or UfwFirewall(use_sudo=use_sudo)
        self.service = service or ComposeService(
            compose_file,
            container_name=settings.container_name or "mumble-server",
            use_sudo=use_sudo,
        )
        self._collect = collect
        self._sleep = sleep

    def _confirm(self, question: str, default: bool = True) -> bool:
        if self.assume_yes:
            return default
        return click.confirm(question, default=default)

    def run(self) -> None:
        """Full installation. Raises InstallerError subclasses on failure."""
        show_welcome()
        if not self._confirm("Continue with the installation?"):
            raise Cancelled("Installation cancelled.")

        self.check_prerequisites()
        self.install_docker()

        config = self._collect(self.settings)
        config.validate()
        console.print()
        render_summary(config)
        if not self._confirm("Apply this configuration?"):
            raise Cancelled("No changes made.")

        self.apply(config)
        self.report(config)

    def check_prerequisites(self) -> None:
        """Root handling, compose file, sudo, internet, base packages."""
        print_header("Checking Prerequisites")

        if not self.compose_file.is_file():
            raise ArtifactNotFoundError(
                f"{self.compose_file.name} not found in {self.compose_file.parent}"
            )

        if self.root_mode:
            self._handle_root()
        else:
            ensure_sudo()

        if not check_internet():
            print_warning("Could not verify internet connection. Please ensure you're online.")
            if not self._confirm("Continue anyway?", default=False):
                raise PreconditionError("No internet connection")

        self.install_essential_packages()
        print_status("Prerequisites check passed")

    def _handle_root(self) -> None:
        """Offer to create a normal admin account instead of running as root."""
        print_warning("Installer is running as root.")
        print_warning("For security reasons, we should create a normal user.")
        if self.assume_yes or not click.confirm(
            "Do you want to create a new user for Mumble server management?",
            default=True,
        ):
            if not self._confirm("Are you sure you want to continue as root?", default=False):
                raise Cancelled(
                    "Please create a normal user and run this installer as that user."
                )
            return

        self.packages.ensure_installed("sudo")
        name = prompt_field(
            FieldDefinition("username", "Enter username for the new user", validator=validators.username)
        ).value
        while True:
            password = click.prompt(
                f"Enter password for {name}", hide_input=True, confirmation_prompt=True
            )
            if password:
                break
            print_warning("Password cannot be empty.")
        create_admin_user(name, password)
        print_status(f"User '{name}' created and added to sudo group.")
        console.print(f"  su - {name}")
        console.print(f"  cd {Path.cwd()}")
        console.print("  mumbleup install")
        raise Cancelled("Please run the installer again as the new user.")

    def install_essential_packages(self) -> None:
        print_header("Installing Essential Packages")
        distro = read_os_release()
        if self.packages.configure_debian_repositories(distro):
            print_status("Added non-free-firmware repository (required for UFW)")
        print_status("Updating package lists...")
        self.packages.update()
        for package in essential_packages(distro, self.root_mode):
            if self.packages.ensure_installed(package):
                print_status(f"{package} installed and verified successfully")
        print_status("All essential packages installed successfully")

    def install_docker(self) -> None:
        print_header("Installing Docker")
        if self.docker.is_installed():
            print_warning("Docker is already installed.")
            if not self.assume_yes and click.confirm(
                "Do you want to reinstall/upgrade Docker?", default=False
            ):
                self.docker.install()
            else:
                print_status("Skipping Docker installation")
        else:
            print_status("Downloading and running the Docker installer...")
            self.docker.install()
            if not self.root_mode:
                print_warning(
                    "You may need to log out and log back in for group changes to take effect"
                )
        print_status("Enabling and starting Docker service...")
        self.docker.ensure_runtime_active()
        print_status("Docker is installed and running")

    def apply(self, config: ConfigurationSet) -> None:
        """Rewrite the compose file, open ports and start the container.

        The compose file is restored from its backup if any of this fails.
        """
        backup_path = compose_backup_path(self.compose_file)
        with ArtifactBackup(self.compose_file, backup_path) as backup:
            print_header(f"Updating {self.compose_file.name}")
            print_status(f"Backup of {self.compose_file.name} created at {backup_path}")
            transform_artifact(self.compose_file, COMPOSE_RULES, config, COMPOSE)
            print_status(f"{self.compose_file.name} updated successfully")

            self.configure_firewall(int(config.value(k.PORT)))
            self.deploy()
            backup.commit()

    def configure_firewall(self, port: int) -> None:
        print_header("Configuring Firewall")
        ssh_port = self.settings.ssh_port or 22
        self.firewall.open_port(ssh_port, "tcp")
        print_status(f"Allowed SSH port {ssh_port}")
        self.firewall.open_port(port, "tcp")
        self.firewall.open_port(port, "udp")
        print_status(f"Allowed Mumble port {port} (TCP/UDP)")
        self.firewall.enable()
        self.firewall.reload()
        print_status("Firewall configured successfully")

    def deploy(self) -> None:
        print_header("Deploying Mumble Service")
        if not self.service.is_available():
            raise PreconditionError("docker compose is not available")
        print_status("Starting Mumble server...")
        self.service.restart()
        for _ in range(STARTUP_CHECKS):
            self._sleep(STARTUP_INTERVAL)
            if self.service.is_active():
                print_status("Mumble container is running")
                return
        raise ServiceError(f"{self.service.container_name} container failed to start")

    def report(self, config: ConfigurationSet) -> None:
        print_status("Waiting for SuperUser password generation...")
        secret = self.service.wait_for_secret(
            attempts=self.settings.secret_attempts or 30,
            interval=self.settings.secret_interval or 2.0,
            sleep=self._sleep,
            on_attempt=lambda _attempt: console.print(".", end=""),
        )
        console.print()
        if secret is None:
            name = self.service.container_name
            print_warning("Could not retrieve SuperUser password automatically.")
            print_warning(
                f"You can find it in the container logs with: "
                f"docker logs {name} | grep -i SuperUser"
            )
        report_compose_completion(
            config,
            secret,
            self.service.container_name,
            firewall_status=self.firewall.status(),
        )

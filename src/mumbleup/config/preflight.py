"""Preflight checks to validate environment."""

from __future__ import annotations

import shutil
import socket
from pathlib import Path

import docker
from docker.errors import DockerException

from mumbleup.command import is_root, run_command
from mumbleup.console import console
from mumbleup.errors import PreconditionError

REQUIRED_TOOLS = ("apt-get", "dpkg-query", "systemctl")


def check_privileges() -> bool:
    """Validate root or passwordless-capable sudo."""
    if is_root():
        console.print("[green]✓[/green] Running as root")
        return True
    if shutil.which("sudo") is None:
        console.print("[red]✗[/red] Not root and sudo is not installed")
        return False
    result = run_command(["sudo", "-n", "true"], check=False)
    if result.returncode == 0:
        console.print("[green]✓[/green] sudo access available")
    else:
        console.print("[yellow]⚠[/yellow] sudo will ask for a password")
    return True


def ensure_sudo() -> None:
    """Make sure sudo credentials are cached before installing anything."""
    if run_command(["sudo", "-n", "true"], check=False).returncode == 0:
        return
    console.print("[dim]Checking sudo access...[/dim]")
    if run_command(["sudo", "-v"], check=False, capture=False).returncode != 0:
        raise PreconditionError(
            "This installer requires sudo privileges to install Docker "
            "and configure the firewall."
        )


def check_tools(tools: tuple[str, ...] = REQUIRED_TOOLS) -> bool:
    """Check the system tools the installer drives."""
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        console.print(f"[red]✗[/red] Missing tools: {', '.join(missing)}")
        return False
    console.print("[green]✓[/green] Package and service tools found")
    return True


def check_docker() -> bool:
    """Validate Docker daemon is running and accessible."""
    try:
        client = docker.from_env()
        client.ping()
        console.print("[green]✓[/green] Docker daemon is running")
    except DockerException as e:
        console.print(f"[red]✗[/red] Cannot connect to Docker: {e}")
        return False

    try:
        version = client.version()
        console.print(f"[green]✓[/green] Docker version: {version['Version']}")
    except DockerException as e:
        console.print(f"[red]✗[/red] Cannot get Docker version: {e}")
        return False

    return True


def check_compose_file(path: Path) -> bool:
    """Check that the compose file to rewrite exists."""
    if path.is_file():
        console.print(f"[green]✓[/green] Compose file found: {path}")
        return True
    console.print(f"[red]✗[/red] Compose file not found: {path}")
    console.print("[dim]Run 'mumbleup init' to write the default one.[/dim]")
    return False


def check_internet(host: str = "google.com", port: int = 443, timeout: float = 3.0) -> bool:
    """Check outbound connectivity."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError:
        console.print("[yellow]⚠[/yellow] Could not verify internet connection")
        return False
    console.print("[green]✓[/green] Internet connection available")
    return True


def run_all_checks(compose_file: Path) -> bool:
    """Run all preflight checks.

    Docker is only reported; the installer can install it.
    """
    console.print("[bold]Running preflight checks...[/bold]\n")

    results = [
        check_privileges(),
        check_tools(),
        check_compose_file(compose_file),
        check_internet(),
    ]
    check_docker()
    all_passed = all(results)

    if all_passed:
        console.print("\n[bold green]All preflight checks passed![/bold green]")
    else:
        console.print("\n[bold red]Some preflight checks failed.[/bold red]")

    return all_passed

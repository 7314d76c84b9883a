"""Configuration summaries and the completion report."""

from __future__ import annotations

import socket
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mumbleup.config import fields as k
from mumbleup.config.fields import ConfigurationSet
from mumbleup.console import console, print_status, print_warning

_LABELS: dict[str, str] = {
    k.SERVER_NAME: "Server Name",
    k.WELCOME_TEXT: "Welcome Message",
    k.SERVER_PASSWORD: "Server Password",
    k.PORT: "Port",
    k.TIMEZONE: "Timezone",
    k.MAX_USERS: "Max Users",
    k.BANDWIDTH: "Bandwidth (bits/s)",
    k.CERT_REQUIRED: "Certificates Required",
    k.OBFUSCATE: "Obfuscate IPs",
    k.ALLOW_RECORDING: "Allow Recording",
    k.ALLOW_HTML: "Allow HTML",
    k.PUBLIC_LISTING: "Public Listing",
    k.REGISTER_HOSTNAME: "Register Hostname",
    k.REGISTER_NAME: "Register Name",
    k.REGISTER_PASSWORD: "Register Password",
    k.REGISTER_URL: "Register URL",
    k.REGISTER_LOCATION: "Register Location",
}

_REGISTER_KEYS = (
    k.REGISTER_HOSTNAME,
    k.REGISTER_NAME,
    k.REGISTER_PASSWORD,
    k.REGISTER_URL,
    k.REGISTER_LOCATION,
)


def summary_rows(config: ConfigurationSet) -> list[tuple[str, str]]:
    """Label/value pairs describing a collected configuration.

    Registration details are only listed for public servers.
    """
    public = config.flag(k.PUBLIC_LISTING)
    rows: list[tuple[str, str]] = []
    for key in config:
        if key in _REGISTER_KEYS and not public:
            continue
        value = config.value(key)
        if key == k.PUBLIC_LISTING:
            value = "YES" if public else "NO (Private Server)"
        elif key in (k.CERT_REQUIRED, k.OBFUSCATE, k.ALLOW_RECORDING, k.ALLOW_HTML):
            value = "Yes" if config.flag(key) else "No"
        elif not value:
            value = "[NONE]"
        rows.append((_LABELS.get(key, key), value))
    return rows


def render_summary(config: ConfigurationSet, title: str = "Configuration Summary") -> None:
    """Print the collected configuration as a table."""
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for label, value in summary_rows(config):
        table.add_row(label, escape(value))
    console.print(table)


def primary_address() -> str:
    """Best guess at the address clients should connect to."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # No packet is sent for a UDP connect; it only picks a route.
            s.connect(("192.0.2.1", 9))
            return str(s.getsockname()[0])
    except OSError:
        return "127.0.0.1"


def report_compose_completion(
    config: ConfigurationSet,
    secret: str | None,
    container_name: str,
    firewall_status: str = "",
) -> None:
    """Final report for a container deployment."""
    port = config.value(k.PORT)
    console.print(Panel.fit("[bold green]Installation Complete![/bold green]"))
    print_status("Your Mumble server is now running!")

    console.print("\n[bold]Connection Information:[/bold]")
    console.print(f"  Server Address: {primary_address()}:{port}")
    hostname = config.value(k.REGISTER_HOSTNAME)
    if hostname:
        console.print(f"  Public Hostname: {escape(hostname)}:{port}")
    console.print(f"  Server Name: {escape(config.value(k.SERVER_NAME))}")

    console.print("\n[bold]Admin Credentials:[/bold]")
    console.print("  Username: SuperUser")
    if secret:
        console.print(f"  Password: {escape(secret)}")
    else:
        console.print(f"  Password: [Check container logs: docker logs {container_name}]")

    console.print("\n[bold]Useful Commands:[/bold]")
    console.print("  View logs: docker compose logs -f")
    console.print(
        f"  Get SuperUser password: docker logs {container_name} | grep -i SuperUser"
    )
    console.print("  Stop server: docker compose down")
    console.print("  Start server: docker compose up -d")
    console.print("  Restart server: docker compose restart")

    if firewall_status:
        console.print("\n[bold]Firewall Status:[/bold]")
        console.print(firewall_status.rstrip(), markup=False)

    console.print()
    print_warning("Save the SuperUser password securely!")
    print_status("Enjoy your Mumble server!")


def report_native_completion(
    config: ConfigurationSet,
    config_file: Path,
    service_name: str,
    backup_path: Path | None = None,
) -> None:
    """Final report for a package installation."""
    console.print(Panel.fit("[bold green]Mumble Server Installation Complete![/bold green]"))
    render_summary(config)

    port = config.value(k.PORT) or "64738"
    console.print("\n[bold]Connection Information:[/bold]")
    console.print(f"  Server Address: {primary_address()}:{port} (TCP/UDP)")
    console.print(
        "  Default SuperUser: SuperUser (password set during dpkg-reconfigure)"
    )

    console.print("\n[bold]Advanced Configuration:[/bold]")
    console.print(f"  sudo nano {config_file}")

    console.print("\n[bold]Useful Commands:[/bold]")
    console.print(f"  Check status: sudo systemctl status {service_name}")
    console.print(f"  Restart:     sudo systemctl restart {service_name}")
    console.print(f"  Stop:        sudo systemctl stop {service_name}")
    console.print(f"  View logs:   sudo journalctl -u {service_name} -f")

    if backup_path is not None:
        console.print("\n[bold]Configuration Backup:[/bold]")
        console.print(f"  Original configuration saved to {backup_path}")
    console.print()

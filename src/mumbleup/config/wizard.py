"""Interactive configuration wizard."""

from __future__ import annotations

from dataclasses import dataclass

import click

from mumbleup.config import fields as k
from mumbleup.config import validators
from mumbleup.config.fields import (
    ConfigurationField,
    ConfigurationSet,
    Validator,
    to_flag,
)
from mumbleup.config.loader import (
    get_home_config_path,
    get_local_config_path,
    home_config_exists,
    load_config,
    local_config_exists,
)
from mumbleup.config.schema import InstallerConfig
from mumbleup.console import (
    console,
    print_error,
    print_header,
    print_status,
    print_warning,
)

# Murmur bandwidth presets in bits/s, keyed by menu choice.
BANDWIDTH_CHOICES: dict[str, tuple[str, str]] = {
    "1": ("72000", "Low quality (9KB/s) - Good for slow connections"),
    "2": ("288000", "Medium quality (36KB/s) - Balanced quality/bandwidth"),
    "3": ("558000", "High quality (72KB/s) - Default, good quality"),
    "4": ("1152000", "Very high quality (144KB/s) - Best quality"),
}


@dataclass(frozen=True)
class FieldDefinition:
    """How to ask the operator for one field."""

    key: str
    prompt: str
    default: str | None = None
    validator: Validator | None = None
    required: bool = False
    hide_input: bool = False


def prompt_field(definition: FieldDefinition) -> ConfigurationField:
    """Ask until the validator accepts the answer."""
    while True:
        raw: str = click.prompt(
            definition.prompt,
            default=definition.default if definition.default is not None else "",
            show_default=bool(definition.default),
            hide_input=definition.hide_input,
        )
        value = raw.strip()
        error = definition.validator(value) if definition.validator else None
        if error is None:
            return ConfigurationField(
                key=definition.key,
                value=value,
                required=definition.required,
                validator=definition.validator,
                default=definition.default,
            )
        print_error(error)


def _fixed(key: str, value: str) -> ConfigurationField:
    return ConfigurationField(key=key, value=value)


def _ask_flag(key: str, question: str, default: bool) -> ConfigurationField:
    return _fixed(key, to_flag(click.confirm(question, default=default)))


def collect_compose_settings(settings: InstallerConfig) -> ConfigurationSet:
    """Collect the docker-compose deployment settings."""
    print_header("Mumble Server Configuration")

    collected: list[ConfigurationField] = []
    server_name = prompt_field(
        FieldDefinition(
            k.SERVER_NAME,
            "Enter your Mumble server name",
            validator=validators.not_empty("Server Name"),
            required=True,
        )
    )
    collected.append(server_name)
    collected.append(
        prompt_field(
            FieldDefinition(
                k.WELCOME_TEXT,
                "Enter welcome message (HTML supported)",
                default=f"<b>Welcome to {server_name.value}!</b>",
            )
        )
    )

    print_status("SuperUser password will be auto-generated by Mumble server")
    collected.append(
        prompt_field(
            FieldDefinition(
                k.SERVER_PASSWORD,
                "Enter server password (leave empty for no password)",
                hide_input=True,
            )
        )
    )

    console.print()
    public = click.confirm(
        "Do you want to list this server in the public Mumble server list?",
        default=False,
    )
    collected.append(_fixed(k.PUBLIC_LISTING, to_flag(public)))
    if public:
        print_status("Server will be listed publicly")
        collected.extend(
            prompt_field(d)
            for d in (
                FieldDefinition(
                    k.REGISTER_HOSTNAME,
                    "Enter public registration hostname (e.g., mumble.example.com)",
                    validator=validators.not_empty("Register Hostname"),
                    required=True,
                ),
                FieldDefinition(
                    k.REGISTER_NAME,
                    "Enter public registration name",
                    default=server_name.value,
                ),
                FieldDefinition(
                    k.REGISTER_PASSWORD,
                    "Enter registration password (leave empty if not required)",
                    hide_input=True,
                ),
                FieldDefinition(k.REGISTER_URL, "Enter server website URL"),
            )
        )
    else:
        print_status("Server will be private (not listed publicly)")
        collected.extend(private_registration(server_name.value))

    collected.append(
        prompt_field(
            FieldDefinition(
                k.PORT,
                "Enter Mumble server port",
                default=str(settings.port or 64738),
                validator=validators.port,
                required=True,
            )
        )
    )
    collected.append(
        prompt_field(
            FieldDefinition(k.TIMEZONE, "Enter timezone", default=settings.timezone or "UTC")
        )
    )
    return ConfigurationSet(collected)


def private_registration(server_name: str) -> list[ConfigurationField]:
    """Registration values used when the server is not listed publicly."""
    return [
        _fixed(k.REGISTER_HOSTNAME, ""),
        _fixed(k.REGISTER_NAME, server_name),
        _fixed(k.REGISTER_PASSWORD, ""),
        _fixed(k.REGISTER_URL, ""),
    ]


def collect_native_settings(settings: InstallerConfig) -> ConfigurationSet:
    """Collect the settings written to the murmur INI file."""
    collected: list[ConfigurationField] = []

    print_header("Server Identity")
    server_name = prompt_field(
        FieldDefinition(k.SERVER_NAME, "Enter your server name", default="Mumble Server")
    )
    collected.append(server_name)
    collected.append(
        prompt_field(
            FieldDefinition(
                k.WELCOME_TEXT,
                "Enter welcome message (HTML supported)",
                default=(
                    f"<br />Welcome to <b>{server_name.value}</b>!"
                    "<br />Enjoy your stay!<br />"
                ),
            )
        )
    )

    print_header("Security Settings")
    if click.confirm("Do you want to set a server password?", default=False):
        password = prompt_field(
            FieldDefinition(k.SERVER_PASSWORD, "Enter server password", hide_input=True)
        )
    else:
        password = _fixed(k.SERVER_PASSWORD, "")
    collected.append(password)

    collected.append(
        prompt_field(
            FieldDefinition(
                k.PORT,
                "Enter Mumble server port",
                default=str(settings.port or 64738),
                validator=validators.port,
                required=True,
            )
        )
    )

    print_header("User Limits")
    collected.append(
        prompt_field(
            FieldDefinition(
                k.MAX_USERS,
                "Enter maximum concurrent users",
                default="100",
                validator=validators.number_range(1, 1000),
                required=True,
            )
        )
    )

    print_header("Audio Quality Settings")
    console.print("Bandwidth options:")
    for choice, (_, label) in BANDWIDTH_CHOICES.items():
        console.print(f"  {choice}) {label}")
    choice = prompt_field(
        FieldDefinition(
            k.BANDWIDTH,
            "Select bandwidth quality (1-4)",
            default="3",
            validator=validators.one_of(BANDWIDTH_CHOICES, "Please enter 1, 2, 3 or 4."),
            required=True,
        )
    )
    collected.append(_fixed(k.BANDWIDTH, BANDWIDTH_CHOICES[choice.value][0]))

    print_header("Advanced Settings")
    collected.append(
        _ask_flag(k.CERT_REQUIRED, "Require SSL certificates for all clients?", False)
    )
    collected.append(
        _ask_flag(k.OBFUSCATE, "Obfuscate IP addresses in logs (privacy)?", False)
    )
    collected.append(
        _ask_flag(k.ALLOW_RECORDING, "Allow clients to record conversations?", True)
    )
    collected.append(_ask_flag(k.ALLOW_HTML, "Allow HTML in text messages?", True))

    print_header("Public Server Registration")
    public = click.confirm("Register server with public Mumble server list?", default=False)
    if public and password.value:
        # Public listing and password protection are mutually exclusive.
        print_warning("Cannot register public server with password protection")
        print_warning("Remove server password to enable public registration")
        public = False

    collected.append(_fixed(k.PUBLIC_LISTING, to_flag(public)))
    if public:
        collected.extend(
            prompt_field(d)
            for d in (
                FieldDefinition(
                    k.REGISTER_URL, "Enter your website URL", default="https://example.com"
                ),
                FieldDefinition(
                    k.REGISTER_HOSTNAME,
                    "Enter your server hostname (e.g., mumble.example.com)",
                ),
                FieldDefinition(
                    k.REGISTER_LOCATION,
                    "Enter your 2-letter country code (e.g., US, GB, DE)",
                    default="US",
                ),
                FieldDefinition(
                    k.REGISTER_PASSWORD, "Enter registration password", hide_input=True
                ),
            )
        )
        print_status("Server will be registered with public server list")
    return ConfigurationSet(collected)


def show_current_config() -> None:
    """Display the current effective installer settings."""
    config = load_config()
    console.print("\n[bold]Current Effective Configuration:[/bold]")
    console.print(f"  [dim]Global: {get_home_config_path()}[/dim]")
    console.print(f"  [dim]Local: {get_local_config_path()}[/dim]")
    console.print()

    for key, value in config.to_dict().items():
        console.print(f"  {key}: {value}")

    console.print()
    if home_config_exists():
        console.print("  [green]Global config: exists[/green]")
    else:
        console.print("  [dim]Global config: not found[/dim]")

    if local_config_exists():
        console.print("  [green]Local config: exists[/green]")
    else:
        console.print("  [dim]Local config: not found[/dim]")

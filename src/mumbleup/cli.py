"""Command-line interface for mumbleup."""

import logging
from collections.abc import Callable
from pathlib import Path

import click
from docker.errors import DockerException

from mumbleup import __version__
from mumbleup.config.init import copy_compose_template
from mumbleup.config.loader import load_config
from mumbleup.config.preflight import run_all_checks
from mumbleup.config.schema import InstallerConfig
from mumbleup.config.wizard import show_current_config
from mumbleup.console import configure_logging, console, print_error, print_status, print_warning
from mumbleup.errors import Cancelled, InstallerError
from mumbleup.pipelines import ComposeInstaller, NativeInstaller
from mumbleup.service import ContainerInspector, extract_secret

logger = logging.getLogger(__name__)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"mumbleup [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


def _run_pipeline(run: Callable[[], None]) -> None:
    """Run an installer, mapping its failures to exit codes."""
    try:
        run()
    except Cancelled as e:
        print_status(str(e))
    except KeyboardInterrupt:
        console.print()
        print_error("Interrupted")
        raise SystemExit(130) from None
    except InstallerError as e:
        logger.debug("Installer failed", exc_info=True)
        print_error(str(e))
        raise SystemExit(1) from None


def _settings(**overrides: object) -> InstallerConfig:
    """Effective settings with CLI options applied on top."""
    config = load_config()
    cli = InstallerConfig.from_dict({k: v for k, v in overrides.items() if v is not None})
    return config.merge(cli)


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log external commands.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """mumbleup - install and configure a Mumble voice server."""
    configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print("[bold]mumbleup[/bold] - Mumble server installer")
        console.print("\nRun [cyan]mumbleup --help[/cyan] for available commands.")


@main.command()
@click.option(
    "--compose-file",
    "-f",
    type=click.Path(dir_okay=False, path_type=Path),
    help="docker-compose.yml to rewrite (default: ./docker-compose.yml).",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Accept default answers to confirmations.")
def install(compose_file: Path | None, assume_yes: bool) -> None:
    """Deploy the server with Docker Compose.

    Installs Docker, asks for server settings, rewrites docker-compose.yml,
    opens the firewall and starts the container. The compose file is restored
    from docker-compose.yml.backup if any step fails.
    """
    settings = _settings(compose_file=str(compose_file) if compose_file else None)
    path = Path(settings.compose_file or "docker-compose.yml")
    installer = ComposeInstaller(path.resolve(), settings=settings, assume_yes=assume_yes)
    _run_pipeline(installer.run)


@main.command()
@click.option(
    "--config-file",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Server INI file to rewrite (default: detected).",
)
def native(config_file: Path | None) -> None:
    """Install the mumble-server package and configure it.

    Must run as root. The INI file is backed up with a timestamp suffix and
    restored if any step fails.
    """
    settings = _settings(native_config_file=str(config_file) if config_file else None)
    _run_pipeline(NativeInstaller(settings=settings).run)


@main.command()
@click.option(
    "--compose-file",
    "-f",
    type=click.Path(dir_okay=False, path_type=Path),
    help="docker-compose.yml to check for.",
)
def preflight(compose_file: Path | None) -> None:
    """Validate environment is ready (privileges, tools, Docker, etc.)."""
    settings = _settings(compose_file=str(compose_file) if compose_file else None)
    if not run_all_checks(Path(settings.compose_file or "docker-compose.yml")):
        raise SystemExit(1)


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing docker-compose.yml.")
@click.option(
    "--show",
    is_flag=True,
    help="Show current effective settings and exit.",
)
def init(force: bool, show: bool) -> None:
    """Write the default docker-compose.yml into the current directory.

    Settings are read from:
      - Global: ~/.mumbleup/config.yaml (user defaults)
      - Local: ./.mumbleup/config.yaml (project overrides)
    """
    if show:
        show_current_config()
        return

    written = copy_compose_template(force=force)
    if written is None:
        console.print("[yellow]docker-compose.yml already exists.[/yellow]")
        console.print("[dim]Use --force to overwrite it.[/dim]")
        return
    console.print(f"[green]Wrote {written}[/green]")
    console.print("[dim]Run 'mumbleup install' to deploy it.[/dim]")


@main.command()
def status() -> None:
    """Show the container state and its generated SuperUser password."""
    settings = load_config()
    inspector = ContainerInspector(settings.container_name or "mumble-server")
    try:
        state = inspector.status()
        if state is None:
            print_warning(f"Container {inspector.container_name} does not exist")
            raise SystemExit(1)
        console.print(f"Container: {inspector.container_name}")
        console.print(f"State: {state}")
        secret = extract_secret(inspector.logs())
        if secret:
            console.print(f"SuperUser password: {secret}", markup=False)
        else:
            print_warning("No SuperUser password found in the container logs")
    except DockerException as e:
        print_error(f"Cannot connect to Docker: {e}")
        raise SystemExit(1) from None
    finally:
        inspector.close()

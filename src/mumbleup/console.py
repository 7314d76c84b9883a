"""Shared rich console and logging setup."""

import logging

from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler

console = Console(highlight=False)


def print_status(message: str) -> None:
    """Print an informational progress line."""
    console.print(f"[green][INFO][/green] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning line."""
    console.print(f"[yellow][WARNING][/yellow] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error line."""
    console.print(f"[red][ERROR][/red] {escape(message)}")


def print_header(title: str) -> None:
    """Print a section header."""
    console.print(f"\n[bold blue]=== {escape(title)} ===[/bold blue]")


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through rich.

    WARNING and above by default, DEBUG when verbose.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

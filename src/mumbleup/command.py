"""Running external commands with consistent logging."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path

from mumbleup.errors import CommandError

logger = logging.getLogger(__name__)


def is_root() -> bool:
    """Check whether the installer runs with root privileges."""
    return os.geteuid() == 0


def with_sudo(argv: Sequence[str], use_sudo: bool) -> list[str]:
    """Prefix `argv` with sudo when not running as root."""
    return ["sudo", *argv] if use_sudo else list(argv)


def run_command(
    argv: Sequence[str],
    *,
    use_sudo: bool = False,
    check: bool = True,
    capture: bool = True,
    input_text: str | None = None,
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, logging argv and output.

    With `capture=False` the command talks to the terminal directly, for
    installers that show their own progress or prompt the operator.
    Raises CommandError on non-zero exit when `check` is set.
    """
    full = with_sudo(argv, use_sudo)
    logger.debug("CMD %s", shlex.join(full))
    try:
        result = subprocess.run(
            full,
            input=input_text,
            capture_output=capture,
            text=True,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise CommandError(full, 127, str(e)) from e

    if capture:
        if result.stdout:
            logger.debug("STDOUT %s", result.stdout.strip())
        if result.stderr:
            logger.debug("STDERR %s", result.stderr.strip())

    if check and result.returncode != 0:
        logger.warning("Command exited %d: %s", result.returncode, shlex.join(full))
        raise CommandError(full, result.returncode, result.stderr or "")
    return result

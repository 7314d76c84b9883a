"""Initialization logic for a deployment directory."""

import shutil
from pathlib import Path

COMPOSE_TEMPLATE = "docker-compose.yml"


def get_package_templates_path() -> Path:
    """Get path to package-bundled templates."""
    return Path(__file__).parent.parent / "templates"


def copy_compose_template(target_dir: Path | None = None, force: bool = False) -> Path | None:
    """Copy the bundled docker-compose.yml into a directory.

    Args:
        target_dir: Destination directory. Defaults to the working directory.
        force: Overwrite an existing compose file.

    Returns:
        The written path, or None if a compose file already exists and
        force is not set.
    """
    target_dir = target_dir or Path.cwd()
    dest = target_dir / COMPOSE_TEMPLATE
    if dest.exists() and not force:
        return None
    target_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(get_package_templates_path() / COMPOSE_TEMPLATE, dest)
    return dest


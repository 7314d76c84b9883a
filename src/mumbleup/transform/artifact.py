"""On-disk artifacts: atomic rewrite and scoped backup/restore."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from types import TracebackType

from mumbleup.config.fields import ConfigurationSet
from mumbleup.errors import ArtifactNotFoundError, PreconditionError, TransformError
from mumbleup.transform.engine import rewrite_lines
from mumbleup.transform.rules import Dialect, Rule

logger = logging.getLogger(__name__)


def compose_backup_path(artifact: Path) -> Path:
    """Fixed sibling backup: docker-compose.yml -> docker-compose.yml.backup."""
    return artifact.with_name(f"{artifact.name}.backup")


def timestamped_backup_path(artifact: Path, now: datetime | None = None) -> Path:
    """Timestamped sibling backup: <name>.backup.YYYYMMDD_HHMMSS."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return artifact.with_name(f"{artifact.name}.backup.{stamp}")


def read_lines(path: Path) -> list[str]:
    """Read a text artifact keeping each line's own terminator."""
    if not path.is_file():
        raise ArtifactNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read().splitlines(keepends=True)
    except UnicodeDecodeError as e:
        raise TransformError(f"{path} is not valid UTF-8 text: {e}") from e
    except OSError as e:
        raise TransformError(f"Cannot read {path}: {e}") from e


def atomic_write(path: Path, content: str) -> None:
    """Replace `path` with `content` without exposing a partial file.

    The content is written to a temporary file in the same directory and
    renamed over `path`; the original keeps its permission bits.
    """
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise TransformError(f"Cannot create temporary file next to {path}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException as e:
        tmp_path.unlink(missing_ok=True)
        if isinstance(e, OSError):
            raise TransformError(f"Failed to write {path}: {e}") from e
        raise


def transform_artifact(
    path: Path,
    rules: tuple[Rule, ...],
    config: ConfigurationSet,
    dialect: Dialect,
) -> bool:
    """Rewrite `path` in place under `rules`.

    Returns True if the content changed. Raises ArtifactNotFoundError before
    touching anything if the file is missing.
    """
    config.validate()
    lines = read_lines(path)
    new_lines = rewrite_lines(lines, rules, config, dialect)
    changed = new_lines != lines
    atomic_write(path, "".join(new_lines))
    logger.debug("Rewrote %s (%s, changed=%s)", path, dialect.name, changed)
    return changed


class ArtifactBackup:
    """Scoped backup of an artifact.

    Entering copies the artifact to `backup_path`. Unless `commit()` is
    called before the block ends, the backup is moved back over the
    artifact on exit, whatever the reason for leaving the block.
    """

    def __init__(
        self,
        artifact: Path,
        backup_path: Path,
        discard_on_commit: bool = False,
    ) -> None:
        self.artifact = artifact
        self.backup_path = backup_path
        self._discard_on_commit = discard_on_commit
        self._committed = False
        self._active = False

    @property
    def committed(self) -> bool:
        return self._committed

    def __enter__(self) -> ArtifactBackup:
        if not self.artifact.is_file():
            raise ArtifactNotFoundError(f"Configuration file not found: {self.artifact}")
        try:
            shutil.copy2(self.artifact, self.backup_path)
        except OSError as e:
            raise PreconditionError(
                f"Cannot back up {self.artifact} to {self.backup_path}: {e}"
            ) from e
        self._active = True
        logger.info("Backed up %s to %s", self.artifact, self.backup_path)
        return self

    def commit(self) -> None:
        """Keep the rewritten artifact."""
        self._committed = True

    def rollback(self) -> None:
        """Move the backup back over the artifact."""
        if not self._active:
            return
        try:
            os.replace(self.backup_path, self.artifact)
        except OSError as e:
            raise TransformError(
                f"Cannot restore {self.artifact}, "
                f"the original is still at {self.backup_path}: {e}"
            ) from e
        self._active = False
        logger.warning("Restored %s from %s", self.artifact, self.backup_path)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._committed:
            if self._discard_on_commit and self._active:
                self.backup_path.unlink(missing_ok=True)
                self._active = False
            return
        if exc is None:
            self.rollback()
            return
        # The block's own error propagates; a failed restore is only logged.
        try:
            self.rollback()
        except TransformError as e:
            logger.error("%s", e)

"""Tests for atomic rewrites and artifact backups."""

import os
import stat
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from mumbleup.config import fields as k
from mumbleup.config.fields import ConfigurationField, ConfigurationSet
from mumbleup.errors import (
    ArtifactNotFoundError,
    MissingFieldError,
    PreconditionError,
    TransformError,
)
from mumbleup.transform import (
    COMPOSE,
    COMPOSE_RULES,
    INI,
    NATIVE_RULES,
    ArtifactBackup,
    atomic_write,
    compose_backup_path,
    timestamped_backup_path,
    transform_artifact,
)

ORIGINAL = "services:\n  m:\n    environment:\n      - MUMBLE_CONFIG_port=64738\n"


@pytest.fixture
def compose_file(tmp_path: Path) -> Path:
    """A minimal compose file on disk."""
    path = tmp_path / "docker-compose.yml"
    path.write_text(ORIGINAL)
    return path


class TestBackupPaths:
    """Backup naming per mode."""

    def test_compose_backup_path(self) -> None:
        """Test the fixed .backup sibling."""
        path = Path("/srv/mumble/docker-compose.yml")
        assert compose_backup_path(path) == Path("/srv/mumble/docker-compose.yml.backup")

    def test_timestamped_backup_path(self) -> None:
        """Test the .backup.YYYYMMDD_HHMMSS sibling."""
        path = Path("/etc/mumble-server.ini")
        now = datetime(2024, 1, 2, 3, 4, 5)
        assert timestamped_backup_path(path, now) == Path(
            "/etc/mumble-server.ini.backup.20240102_030405"
        )


class TestAtomicWrite:
    """Replacing files without partial writes."""

    def test_writes_content(self, tmp_path: Path) -> None:
        """Test that the new content replaces the old."""
        path = tmp_path / "f.ini"
        path.write_text("old\n")
        atomic_write(path, "new\r\n")
        assert path.read_bytes() == b"new\r\n"

    def test_preserves_permissions(self, tmp_path: Path) -> None:
        """Test that the file mode survives the rename."""
        path = tmp_path / "f.ini"
        path.write_text("old\n")
        path.chmod(0o640)
        atomic_write(path, "new\n")
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_failed_rename_leaves_original(self, tmp_path: Path) -> None:
        """Test that a failure before the rename keeps the original intact."""
        path = tmp_path / "f.ini"
        path.write_text("old\n")
        with (
            patch("mumbleup.transform.artifact.os.replace", side_effect=OSError("disk")),
            pytest.raises(TransformError),
        ):
            atomic_write(path, "new\n")

        assert path.read_text() == "old\n"
        assert os.listdir(tmp_path) == ["f.ini"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test that an unwritable location raises TransformError."""
        with pytest.raises(TransformError):
            atomic_write(tmp_path / "missing" / "f.ini", "x\n")


class TestTransformArtifact:
    """Rewriting files on disk."""

    def test_reports_change_then_no_change(self, compose_file: Path, compose_config) -> None:
        """Test that a second identical transform reports no change."""
        config = compose_config(port="12345")
        assert transform_artifact(compose_file, COMPOSE_RULES, config, COMPOSE) is True
        assert "MUMBLE_CONFIG_port=12345" in compose_file.read_text()
        assert transform_artifact(compose_file, COMPOSE_RULES, config, COMPOSE) is False

    def test_missing_file(self, tmp_path: Path, compose_config) -> None:
        """Test that a missing artifact is reported without creating it."""
        path = tmp_path / "docker-compose.yml"
        with pytest.raises(ArtifactNotFoundError):
            transform_artifact(path, COMPOSE_RULES, compose_config(), COMPOSE)
        assert not path.exists()

    def test_missing_required_field(self, compose_file: Path) -> None:
        """Test that validation fails before anything is written."""
        config = ConfigurationSet([ConfigurationField(k.SERVER_NAME, "", required=True)])
        with pytest.raises(MissingFieldError):
            transform_artifact(compose_file, COMPOSE_RULES, config, COMPOSE)
        assert compose_file.read_text() == ORIGINAL

    def test_keeps_crlf_file(self, tmp_path: Path, native_config) -> None:
        """Test that CRLF files are read and written without translation."""
        path = tmp_path / "mumble-server.ini"
        path.write_bytes(b"port=1\r\nusers=2\r\n")
        transform_artifact(path, NATIVE_RULES, native_config(port="3"), INI)
        data = path.read_bytes()
        assert data.startswith(b"port=3\r\nusers=100\r\n")
        assert b"\n" not in data.replace(b"\r\n", b"")

    def test_non_utf8_file(self, tmp_path: Path, native_config) -> None:
        """Test that an undecodable file is a transform error and stays untouched."""
        path = tmp_path / "mumble-server.ini"
        path.write_bytes(b"welcometext=\xe9t\xe9\nport=1\n")
        with pytest.raises(TransformError, match="not valid UTF-8"):
            transform_artifact(path, NATIVE_RULES, native_config(), INI)
        assert path.read_bytes() == b"welcometext=\xe9t\xe9\nport=1\n"


class TestArtifactBackup:
    """Scoped backup and restore."""

    def test_restores_on_exception(self, compose_file: Path) -> None:
        """Test that leaving the block with an error restores the original."""
        backup = compose_backup_path(compose_file)
        with pytest.raises(RuntimeError), ArtifactBackup(compose_file, backup):
            compose_file.write_text("changed\n")
            raise RuntimeError("firewall failed")

        assert compose_file.read_text() == ORIGINAL
        assert not backup.exists()

    def test_restores_on_keyboard_interrupt(self, compose_file: Path) -> None:
        """Test that an interrupt also restores the original."""
        backup = compose_backup_path(compose_file)
        with pytest.raises(KeyboardInterrupt), ArtifactBackup(compose_file, backup):
            compose_file.write_text("changed\n")
            raise KeyboardInterrupt

        assert compose_file.read_text() == ORIGINAL

    def test_restores_without_commit(self, compose_file: Path) -> None:
        """Test that a block ending without commit rolls back."""
        backup = compose_backup_path(compose_file)
        with ArtifactBackup(compose_file, backup) as guard:
            compose_file.write_text("changed\n")

        assert not guard.committed
        assert compose_file.read_text() == ORIGINAL

    def test_commit_keeps_new_content_and_backup(self, compose_file: Path) -> None:
        """Test that a committed block keeps both the new file and the backup."""
        backup = compose_backup_path(compose_file)
        with ArtifactBackup(compose_file, backup) as guard:
            compose_file.write_text("changed\n")
            guard.commit()

        assert compose_file.read_text() == "changed\n"
        assert backup.read_text() == ORIGINAL

    def test_discard_on_commit(self, compose_file: Path) -> None:
        """Test that the backup can be removed after a successful run."""
        backup = compose_backup_path(compose_file)
        with ArtifactBackup(compose_file, backup, discard_on_commit=True) as guard:
            guard.commit()
        assert not backup.exists()

    def test_backup_round_trip(self, compose_file: Path, compose_config) -> None:
        """Test that backup then restore reproduces the original bytes."""
        backup = timestamped_backup_path(compose_file)
        with ArtifactBackup(compose_file, backup):
            transform_artifact(compose_file, COMPOSE_RULES, compose_config(port="1"), COMPOSE)
        assert compose_file.read_text() == ORIGINAL

    def test_missing_artifact(self, tmp_path: Path) -> None:
        """Test that entering with no artifact raises before copying."""
        path = tmp_path / "docker-compose.yml"
        with pytest.raises(ArtifactNotFoundError), ArtifactBackup(path, tmp_path / "b"):
            pass
        assert not (tmp_path / "b").exists()

    def test_backup_copy_failure(self, compose_file: Path) -> None:
        """Test that an unwritable backup location stops before the block runs."""
        with (
            patch(
                "mumbleup.transform.artifact.shutil.copy2",
                side_effect=PermissionError("read-only file system"),
            ),
            pytest.raises(PreconditionError, match="Cannot back up"),
            ArtifactBackup(compose_file, compose_backup_path(compose_file)),
        ):
            compose_file.write_text("changed\n")

        assert compose_file.read_text() == ORIGINAL

    def test_failed_restore_keeps_original_error(
        self, compose_file: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a failed restore is logged and the block's error propagates."""
        backup = compose_backup_path(compose_file)
        with (
            pytest.raises(RuntimeError, match="firewall failed"),
            patch("mumbleup.transform.artifact.os.replace", side_effect=OSError("busy")),
            ArtifactBackup(compose_file, backup),
        ):
            compose_file.write_text("changed\n")
            raise RuntimeError("firewall failed")

        assert "Cannot restore" in caplog.text
        assert backup.read_text() == ORIGINAL

    def test_failed_restore_without_error_raises(self, compose_file: Path) -> None:
        """Test that an uncommitted block whose restore fails reports it."""
        backup = compose_backup_path(compose_file)
        with (
            pytest.raises(TransformError, match="Cannot restore"),
            patch("mumbleup.transform.artifact.os.replace", side_effect=OSError("busy")),
            ArtifactBackup(compose_file, backup),
        ):
            compose_file.write_text("changed\n")

        assert backup.read_text() == ORIGINAL

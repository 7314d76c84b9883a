"""Exception hierarchy for mumbleup."""

from collections.abc import Sequence


class InstallerError(Exception):
    """Base exception for installer failures."""


class PreconditionError(InstallerError):
    """Raised when the environment is not fit to continue."""


class TransformError(InstallerError):
    """Raised when a configuration artifact cannot be rewritten."""


class ArtifactNotFoundError(PreconditionError):
    """Raised when the configuration artifact does not exist."""


class MissingFieldError(InstallerError):
    """Raised when a required configuration field has no value."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Required field '{key}' has no value")
        self.key = key


class CommandError(InstallerError):
    """Raised when an external command exits non-zero."""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class ServiceError(InstallerError):
    """Raised when a service does not reach the running state."""


class Cancelled(InstallerError):
    """Raised when the operator stops the installer at a confirmation."""

"""Service drivers for the container and the native systemd unit."""

from mumbleup.service.compose import (
    SUPERUSER_PATTERNS,
    ComposeService,
    ContainerInspector,
    extract_secret,
)
from mumbleup.service.systemd import (
    SystemdService,
    detect_native_config_file,
    ini_path_from_unit,
)

__all__ = [
    "SUPERUSER_PATTERNS",
    "ComposeService",
    "ContainerInspector",
    "SystemdService",
    "detect_native_config_file",
    "extract_secret",
    "ini_path_from_unit",
]

"""Package, runtime, firewall and account provisioning."""

from mumbleup.provision.docker import DockerInstaller
from mumbleup.provision.firewall import UfwFirewall
from mumbleup.provision.packages import (
    AptPackageManager,
    Distro,
    essential_packages,
    read_os_release,
)
from mumbleup.provision.users import create_admin_user, user_exists

__all__ = [
    "AptPackageManager",
    "Distro",
    "DockerInstaller",
    "UfwFirewall",
    "create_admin_user",
    "essential_packages",
    "read_os_release",
    "user_exists",
]

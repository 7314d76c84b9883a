"""Installation pipelines for the container and native deployments."""

from mumbleup.pipelines.compose import ComposeInstaller
from mumbleup.pipelines.native import NativeInstaller

__all__ = ["ComposeInstaller", "NativeInstaller"]

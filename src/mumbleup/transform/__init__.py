"""Line-oriented configuration file transformation."""

from mumbleup.transform.artifact import (
    ArtifactBackup,
    atomic_write,
    compose_backup_path,
    timestamped_backup_path,
    transform_artifact,
)
from mumbleup.transform.compose import COMPOSE_RULES
from mumbleup.transform.engine import rewrite_lines, rewrite_text
from mumbleup.transform.native import NATIVE_RULES
from mumbleup.transform.rules import (
    COMPOSE,
    INI,
    Action,
    Dialect,
    Policy,
    Rule,
    apply_rules,
)

__all__ = [
    "COMPOSE",
    "COMPOSE_RULES",
    "INI",
    "NATIVE_RULES",
    "Action",
    "ArtifactBackup",
    "Dialect",
    "Policy",
    "Rule",
    "apply_rules",
    "atomic_write",
    "compose_backup_path",
    "rewrite_lines",
    "rewrite_text",
    "timestamped_backup_path",
    "transform_artifact",
]

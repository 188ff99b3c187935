"""Domain model for the mbox command core."""

from .errors import (
    ArgumentError,
    ArgumentErrorKind,
    CommandRuntimeError,
    CommanderError,
    GenericError,
    SignalError,
    UserError,
)
from .launcher import LaunchResult, LauncherItem, LauncherType
from .plugin import ManifestError, PluginPackage
from .session import Session

__all__ = [
    "ArgumentError",
    "ArgumentErrorKind",
    "CommandRuntimeError",
    "CommanderError",
    "GenericError",
    "LaunchResult",
    "LauncherItem",
    "LauncherType",
    "ManifestError",
    "PluginPackage",
    "Session",
    "SignalError",
    "UserError",
]

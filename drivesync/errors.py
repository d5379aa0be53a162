"""Error kinds raised while dispatching ``gd`` commands."""

from __future__ import annotations


class DriveError(RuntimeError):
    """Base class for every failure surfaced to the command line."""


class UnknownCommand(DriveError):
    """Raised when the first token does not name a registered command."""


class InvalidFlag(DriveError):
    """Raised when a flag is unknown or carries a malformed value."""


class ConfigError(DriveError):
    """Raised when a context configuration file cannot be parsed or is invalid."""


class ContextNotFound(DriveError):
    """Raised when no initialised context exists at or above a path."""


class InitializationError(DriveError):
    """Raised when a new context cannot be created."""


class PathResolutionError(DriveError):
    """Raised when a target path cannot be expressed relative to its context root."""


class MountResolutionError(DriveError):
    """Raised when a mounted-push source cannot be resolved."""

"""Exception types raised by cder.

Library code raises these; only the CLI turns them into exit statuses.
"""

from __future__ import annotations


class CderError(Exception):
    """Base class for every error cder raises on purpose."""


class HostUnavailableError(CderError):
    """The fuzzy-finder host cder drives is not installed."""


class CommandNotFoundError(CderError):
    """An external command could not be spawned."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not found: {command}")
        self.command = command


class UnsafePathError(CderError):
    """A directory path cannot be spliced into a shell string safely."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Cannot preview path containing a double quote: {path}")
        self.path = path


class ConfigError(CderError):
    """A configuration override is unknown or malformed."""

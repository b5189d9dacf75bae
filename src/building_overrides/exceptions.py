"""Exception hierarchy for building overrides."""

from __future__ import annotations

from pathlib import Path


class OverrideError(Exception):
    """Base exception for all building-overrides errors."""


class InvalidOverrideError(OverrideError, ValueError):
    """An override violates the store's preconditions (empty name, count < 1)."""


class OverrideFormatError(OverrideError):
    """A persisted overrides document has the wrong shape."""


class OverridePersistenceError(OverrideError):
    """Writing the overrides file failed; the edit is not durable."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class SelectionStateError(OverrideError):
    """A controller action was requested in a state that does not allow it."""


class ConfigError(OverrideError):
    """Invalid settings file."""

"""Waypoint exception hierarchy.

Shared across the registry, storage helpers, and coordinator so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when linking configuration or a route pattern is invalid.

    Surfaces at startup, while handlers are being registered.
    """


@dataclass(frozen=True, slots=True)
class StorageError(WaypointError):
    """A persistence read or write against the key-value store failed.

    Never propagated out of dispatch. Carried inside ``StorageResult`` so
    callers decide whether the failure matters.
    """

    operation: str
    key: str
    cause: BaseException | None = None

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.operation} {self.key!r} failed: {self.cause}"
        return f"{self.operation} {self.key!r} failed"

"""Recording collaborators for tests and the CLI.

Usage::

    from waypoint.testing import RecordingNavigator, RecordingSink, StaticAuth
    from waypoint.storage import MemoryStore

    nav = RecordingNavigator(ready=True)
    coordinator = build_coordinator(nav, MemoryStore(), RecordingSink(), oracle=StaticAuth(True))
    await coordinator.handle_url("bulge://premium")
    assert nav.calls[0].target == "Main"
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from waypoint.navigation import NavRoute


@dataclass(frozen=True, slots=True)
class NavCall:
    """One recorded navigator call.

    ``kind`` is ``"navigate"`` (with *target*/*params*) or ``"reset"``
    (with *routes*).
    """

    kind: str
    target: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    routes: tuple[NavRoute, ...] = ()


class RecordingNavigator:
    """Navigator that records calls instead of moving screens."""

    def __init__(self, ready: bool = True) -> None:
        self.ready = ready
        self.calls: list[NavCall] = []

    def navigate(self, target: str, params: dict[str, Any]) -> None:
        self.calls.append(NavCall("navigate", target=target, params=params))

    def reset_to(self, routes: Sequence[NavRoute]) -> None:
        self.calls.append(NavCall("reset", routes=tuple(routes)))

    def is_ready(self) -> bool:
        return self.ready

    @property
    def last(self) -> NavCall | None:
        return self.calls[-1] if self.calls else None


class RecordingSink:
    """Analytics sink that keeps every event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def record(self, event_name: str, properties: dict[str, Any]) -> None:
        self.events.append((event_name, properties))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def find(self, event_name: str) -> dict[str, Any] | None:
        """Return the properties of the last event named *event_name*."""
        for name, properties in reversed(self.events):
            if name == event_name:
                return properties
        return None


class StaticAuth:
    """Auth oracle with a fixed (mutable) answer."""

    def __init__(self, authenticated: bool = False) -> None:
        self.authenticated = authenticated

    def is_authenticated(self) -> bool:
        return self.authenticated


class FailingStore:
    """Store whose every operation raises ``OSError``."""

    def get(self, key: str) -> str | None:
        raise OSError(f"get {key} unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError(f"set {key} unavailable")

    def remove(self, key: str) -> None:
        raise OSError(f"remove {key} unavailable")


class FrozenClock:
    """Settable epoch-ms clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms

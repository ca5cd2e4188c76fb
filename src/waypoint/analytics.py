"""Analytics events for deep-link traffic.

The sink collaborator is anything with ``record(event_name, properties)``.
Delivery is best-effort: a failing sink is logged and never interrupts
navigation.
"""

import logging
from collections.abc import Awaitable
from typing import Any, Protocol

from waypoint._internal.invoke import invoke

logger = logging.getLogger("waypoint.analytics")


class AnalyticsSink(Protocol):
    """Protocol for the analytics collaborator."""

    def record(self, event_name: str, properties: dict[str, Any]) -> None | Awaitable[None]: ...


class LoggingSink:
    """Sink that writes each event to the ``waypoint.analytics`` logger."""

    __slots__ = ("_level",)

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def record(self, event_name: str, properties: dict[str, Any]) -> None:
        logger.log(self._level, "%s %s", event_name, properties)


class Tracker:
    """Best-effort front for an ``AnalyticsSink``.

    ``None`` properties are dropped so handlers can pass optional query
    parameters straight through.
    """

    __slots__ = ("_sink",)

    def __init__(self, sink: AnalyticsSink | None) -> None:
        self._sink = sink

    async def track(self, event_name: str, properties: dict[str, Any] | None = None) -> None:
        if self._sink is None:
            return
        payload = {k: v for k, v in (properties or {}).items() if v is not None}
        try:
            await invoke(self._sink.record, event_name, payload)
        except Exception:
            logger.exception("Analytics sink failed for %s", event_name)

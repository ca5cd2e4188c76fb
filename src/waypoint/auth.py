"""Authentication gate and post-login resume.

Handlers for screens that need a signed-in user call ``AuthGate.require()``.
When the user is anonymous the gate stores a ``PendingNavigation`` and
redirects to login; once the app has authenticated the user it calls
``AuthGate.resume()`` to complete the original intent.

Only one pending navigation is kept. A newer gated link overwrites the
older one, and a record older than the TTL is discarded on resume.
"""

import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from waypoint._internal.invoke import invoke
from waypoint.analytics import Tracker
from waypoint.clock import Clock, now_ms
from waypoint.config import LinkingConfig
from waypoint.navigation import Navigator, screen
from waypoint.storage import KeyValueStore, delete_key, load_json, load_text, save_json

logger = logging.getLogger("waypoint.auth")


class AuthOracle(Protocol):
    """Protocol for the authentication-status collaborator."""

    def is_authenticated(self) -> bool | Awaitable[bool]: ...


class StoredTokenOracle:
    """Authenticated iff the store holds a non-empty auth token.

    A storage failure counts as unauthenticated.
    """

    __slots__ = ("_key", "_store")

    def __init__(self, store: KeyValueStore, key: str = "auth_token") -> None:
        self._store = store
        self._key = key

    async def is_authenticated(self) -> bool:
        result = await load_text(self._store, self._key)
        if not result:
            logger.warning("Failed to check authentication: %s", result.error)
            return False
        return bool(result.value)


@dataclass(frozen=True, slots=True)
class PendingNavigation:
    """A navigation intent deferred until the user signs in."""

    screen: str
    params: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0

    def is_expired(self, now: int, ttl_ms: int) -> bool:
        """True once more than *ttl_ms* has elapsed since *timestamp*."""
        return now - self.timestamp > ttl_ms

    def to_dict(self) -> dict[str, Any]:
        return {"screen": self.screen, "params": dict(self.params), "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PendingNavigation":
        """Build from a decoded record.

        Raises ``KeyError``/``TypeError``/``ValueError`` for malformed records.
        """
        params = data.get("params") or {}
        if not isinstance(params, Mapping):
            msg = f"params must be a mapping, got {type(params).__name__}"
            raise TypeError(msg)
        return cls(
            screen=str(data["screen"]),
            params=dict(params),
            timestamp=int(data["timestamp"]),
        )


class AuthGate:
    """Intercepts gated handlers and resumes their intent after login."""

    __slots__ = ("_clock", "_config", "_navigator", "_oracle", "_store", "_tracker")

    def __init__(
        self,
        navigator: Navigator,
        store: KeyValueStore,
        oracle: AuthOracle,
        tracker: Tracker,
        *,
        config: LinkingConfig | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._navigator = navigator
        self._store = store
        self._oracle = oracle
        self._tracker = tracker
        self._config = config or LinkingConfig()
        self._clock = clock

    async def is_authenticated(self) -> bool:
        """Ask the oracle. An oracle failure counts as anonymous."""
        try:
            return bool(await invoke(self._oracle.is_authenticated))
        except Exception:
            logger.exception("Auth oracle failed")
            return False

    async def require(self, target: str, params: Mapping[str, Any]) -> bool:
        """Return True if the caller may navigate to *target*.

        When anonymous, stores the intent, redirects to login with *params*,
        and returns False.
        """
        if await self.is_authenticated():
            return True

        await self.store_pending(target, params)
        await invoke(self._navigator.navigate, "Auth", screen("Login", params))
        return False

    async def store_pending(self, target: str, params: Mapping[str, Any]) -> PendingNavigation:
        """Persist *target*/*params* as the pending navigation (overwrites)."""
        pending = PendingNavigation(screen=target, params=dict(params), timestamp=self._clock())
        result = await save_json(self._store, self._config.pending_navigation_key, pending.to_dict())
        if not result:
            logger.warning("Failed to store pending navigation: %s", result.error)
        return pending

    async def load_pending(self) -> PendingNavigation | None:
        """Return the stored pending navigation, or ``None`` if absent or unreadable."""
        key = self._config.pending_navigation_key
        result = await load_json(self._store, key)
        if not result:
            logger.warning("Failed to load pending navigation: %s", result.error)
            return None
        if result.value is None:
            return None
        try:
            return PendingNavigation.from_dict(result.value)
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed pending navigation %r", result.value)
            await self._clear()
            return None

    async def resume(self) -> PendingNavigation | None:
        """Complete the stored intent, if any and not expired.

        Returns the consumed record. Calling again afterwards is a no-op.
        """
        pending = await self.load_pending()
        if pending is None:
            return None

        if pending.is_expired(self._clock(), self._config.pending_navigation_ttl_ms):
            logger.debug("Pending navigation to %s expired", pending.screen)
            await self._clear()
            return None

        await invoke(self._navigator.navigate, "Main", screen(pending.screen, pending.params))
        await self._clear()
        await self._tracker.track("pending_navigation_processed", {"screen": pending.screen})
        return pending

    async def _clear(self) -> None:
        result = await delete_key(self._store, self._config.pending_navigation_key)
        if not result:
            logger.warning("Failed to clear pending navigation: %s", result.error)

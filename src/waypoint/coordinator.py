"""Dispatch coordinator — turns incoming URIs into navigation.

State machine::

    UNINITIALIZED --ready signal--> READY   (permanent)

While ``UNINITIALIZED`` every parsed link goes to the pending-link slot
(newest wins). The ready signal replays the held link once, then every
later link is dispatched immediately.

Dispatch resolves the path, runs the matched handler, and falls back to
a reset-to-home navigation when nothing matches or the handler raises.
No failure ever propagates to the caller of ``handle_url``.

All entry points share one ``anyio.Lock``, so each URI (or ready signal,
or resume) is processed to completion before the next one starts.
"""

import logging
from enum import Enum

import anyio

from waypoint._internal.invoke import invoke
from waypoint.analytics import AnalyticsSink, Tracker
from waypoint.attribution import AttributionRecorder
from waypoint.auth import AuthGate, AuthOracle, PendingNavigation, StoredTokenOracle
from waypoint.clock import Clock, now_ms
from waypoint.config import LinkingConfig
from waypoint.handlers import LinkHandlers, register_default_handlers
from waypoint.navigation import Navigator, navigate_to_default
from waypoint.parsing import ParsedLink, parse_url
from waypoint.pending import PendingLinkSlot
from waypoint.routing.registry import RouteRegistry
from waypoint.storage import KeyValueStore

logger = logging.getLogger("waypoint.dispatch")


class CoordinatorState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class Outcome(Enum):
    """What happened to an incoming URI."""

    DROPPED = "dropped"  # unparseable
    BUFFERED = "buffered"  # held until navigation is ready
    DISPATCHED = "dispatched"  # a handler ran to completion
    FALLBACK = "fallback"  # no handler, or the handler raised
    FAILED = "failed"  # even the fallback failed


class DispatchCoordinator:
    """Receives raw URIs and turns them into navigation actions.

    Usage::

        coordinator = build_coordinator(navigator, store, sink)
        await coordinator.start(launch_url)
        ...
        await coordinator.mark_ready()          # navigation container mounted
        await coordinator.handle_url(url)       # every later URI delivery
        await coordinator.resume_pending_navigation()  # after sign-in
    """

    __slots__ = (
        "_gate",
        "_lock",
        "_navigator",
        "_recorder",
        "_registry",
        "_slot",
        "_state",
        "_tracker",
    )

    def __init__(
        self,
        navigator: Navigator,
        registry: RouteRegistry,
        *,
        gate: AuthGate,
        recorder: AttributionRecorder,
        tracker: Tracker,
    ) -> None:
        self._navigator = navigator
        self._registry = registry
        self._gate = gate
        self._recorder = recorder
        self._tracker = tracker
        self._slot = PendingLinkSlot()
        self._state = CoordinatorState.UNINITIALIZED
        self._lock = anyio.Lock()

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def pending(self) -> PendingLinkSlot:
        return self._slot

    @property
    def registry(self) -> RouteRegistry:
        return self._registry

    # -- Entry points -----------------------------------------------------

    async def start(self, initial_url: str | None) -> Outcome | None:
        """Process the URI the app was launched with, if any."""
        if not initial_url:
            return None
        logger.info("App opened with URL: %s", initial_url)
        return await self.handle_url(initial_url)

    async def handle_url(self, url: str | None) -> Outcome:
        """Parse *url* and buffer or dispatch it. Never raises."""
        async with self._lock:
            try:
                return await self._handle(url)
            except Exception:
                logger.exception("Failed to handle URL %r", url)
                return Outcome.FAILED

    async def mark_ready(self) -> Outcome | None:
        """Signal that navigation is ready; replay the held link, if any.

        Returns the outcome of the replayed link, or ``None`` if the slot
        was empty or the coordinator was already ready.
        """
        async with self._lock:
            if self._state is CoordinatorState.READY:
                return None
            try:
                return await self._become_ready()
            except Exception:
                logger.exception("Failed to process pending link")
                return Outcome.FAILED

    async def resume_pending_navigation(self) -> PendingNavigation | None:
        """Complete a navigation deferred by the auth gate. Never raises."""
        async with self._lock:
            try:
                return await self._gate.resume()
            except Exception:
                logger.exception("Failed to process pending navigation")
                return None

    # -- Internals --------------------------------------------------------

    async def _handle(self, url: str | None) -> Outcome:
        link = parse_url(url)
        if link is None:
            return Outcome.DROPPED

        await self._tracker.track(
            "deep_link_opened",
            {
                "url": link.original_url,
                "path": link.path,
                "params": dict(link.params),
                "source": link.source,
            },
        )
        await self._recorder.record_referral(link.params)

        if not await self._target_ready():
            replaced = self._slot.hold(link)
            if replaced is not None:
                logger.info("Pending link %s replaced by %s", replaced.original_url, url)
            return Outcome.BUFFERED

        return await self._dispatch(link)

    async def _target_ready(self) -> bool:
        if self._state is CoordinatorState.READY:
            return True
        try:
            ready = bool(await invoke(self._navigator.is_ready))
        except Exception:
            logger.exception("Readiness check failed")
            ready = False
        if ready:
            try:
                await self._become_ready()
            except Exception:
                logger.exception("Failed to process pending link")
        return ready

    async def _become_ready(self) -> Outcome | None:
        link = self._slot.take()
        try:
            if link is None:
                return None
            return await self._dispatch(link)
        finally:
            self._state = CoordinatorState.READY

    async def _dispatch(self, link: ParsedLink) -> Outcome:
        match = self._registry.resolve(link.path)
        if match is None:
            logger.info("No handler found for path: %s", link.path)
            await navigate_to_default(
                self._navigator, self._tracker, link.params, reason="no_handler", path=link.path
            )
            return Outcome.FALLBACK

        try:
            await invoke(match.route.handler, link.params, link.path)
        except Exception:
            logger.exception("Handler %s failed for %s", match.route.pattern, link.path)
            await navigate_to_default(
                self._navigator, self._tracker, link.params, reason="handler_error", path=link.path
            )
            return Outcome.FALLBACK
        return Outcome.DISPATCHED


def build_coordinator(
    navigator: Navigator,
    store: KeyValueStore,
    sink: AnalyticsSink | None = None,
    *,
    oracle: AuthOracle | None = None,
    config: LinkingConfig | None = None,
    clock: Clock = now_ms,
) -> DispatchCoordinator:
    """Wire the default route table and collaborators into a coordinator.

    Without an explicit *oracle*, authentication is read from the auth
    token key in *store*.
    """
    cfg = config or LinkingConfig()
    tracker = Tracker(sink)
    gate = AuthGate(
        navigator,
        store,
        oracle or StoredTokenOracle(store, cfg.auth_token_key),
        tracker,
        config=cfg,
        clock=clock,
    )
    recorder = AttributionRecorder(store, config=cfg, clock=clock)

    registry = RouteRegistry()
    register_default_handlers(registry, LinkHandlers(navigator, gate, recorder, tracker))
    registry.freeze()
    logger.debug("Deep link handlers registered: %d", len(registry))

    return DispatchCoordinator(navigator, registry, gate=gate, recorder=recorder, tracker=tracker)

"""Tests for waypoint.coordinator — readiness state machine and dispatch."""

import json

import pytest

from waypoint.analytics import Tracker
from waypoint.attribution import AttributionRecorder
from waypoint.auth import AuthGate
from waypoint.coordinator import (
    CoordinatorState,
    DispatchCoordinator,
    Outcome,
    build_coordinator,
)
from waypoint.navigation import NavRoute
from waypoint.routing.registry import RouteRegistry
from waypoint.storage import MemoryStore
from waypoint.testing import FailingStore, RecordingNavigator, RecordingSink, StaticAuth

pytestmark = pytest.mark.anyio


def _custom(registry: RouteRegistry, navigator: RecordingNavigator, sink: RecordingSink):
    store = MemoryStore()
    tracker = Tracker(sink)
    return DispatchCoordinator(
        navigator,
        registry,
        gate=AuthGate(navigator, store, StaticAuth(True), tracker),
        recorder=AttributionRecorder(store),
        tracker=tracker,
    )


class TestParseFailure:
    async def test_dropped_silently(self, coordinator, navigator, sink) -> None:
        assert await coordinator.handle_url("not a url") is Outcome.DROPPED
        assert await coordinator.handle_url("") is Outcome.DROPPED
        assert await coordinator.handle_url(None) is Outcome.DROPPED
        assert navigator.calls == []
        assert sink.events == []


class TestDispatch:
    async def test_opened_event(self, coordinator, sink) -> None:
        await coordinator.handle_url("bulge://help/faq?source=email")
        assert sink.events[0] == (
            "deep_link_opened",
            {
                "url": "bulge://help/faq?source=email",
                "path": "/help/faq",
                "params": {"source": "email"},
                "source": "email",
            },
        )

    async def test_dispatches_matching_handler(self, coordinator, navigator) -> None:
        assert await coordinator.handle_url("bulge://support") is Outcome.DISPATCHED
        assert navigator.last is not None
        assert navigator.last.target == "Help"
        assert navigator.last.params == {"screen": "Support", "params": {}}

    async def test_no_handler_falls_back(self, coordinator, navigator, sink) -> None:
        outcome = await coordinator.handle_url("bulge://nowhere?x=1")
        assert outcome is Outcome.FALLBACK
        assert navigator.last is not None
        assert navigator.last.kind == "reset"
        assert navigator.last.routes == (NavRoute("Main", {"x": "1"}),)
        assert sink.find("deep_link_fallback") == {
            "params": {"x": "1"},
            "path": "/nowhere",
            "reason": "no_handler",
        }

    async def test_handler_failure_falls_back(self, navigator, sink) -> None:
        registry = RouteRegistry()

        async def explode(params, path) -> None:
            raise RuntimeError("boom")

        registry.register("/boom", explode)
        coordinator = _custom(registry, navigator, sink)

        assert await coordinator.handle_url("bulge://boom?a=b") is Outcome.FALLBACK
        assert navigator.last is not None
        assert navigator.last.routes == (NavRoute("Main", {"a": "b"}),)
        fallback = sink.find("deep_link_fallback")
        assert fallback is not None
        assert fallback["reason"] == "handler_error"

    async def test_sync_handler(self, navigator, sink) -> None:
        seen: list[tuple[dict, str]] = []
        registry = RouteRegistry()
        registry.register("/x/:id", lambda params, path: seen.append((dict(params), path)))
        coordinator = _custom(registry, navigator, sink)

        assert await coordinator.handle_url("bulge://x/1?k=v") is Outcome.DISPATCHED
        assert seen == [({"k": "v"}, "/x/1")]

    async def test_navigator_failure_never_propagates(self, sink) -> None:
        class BrokenNavigator(RecordingNavigator):
            def reset_to(self, routes) -> None:
                raise RuntimeError("navigation gone")

        coordinator = _custom(RouteRegistry(), BrokenNavigator(), sink)
        assert await coordinator.handle_url("bulge://anything") is Outcome.FAILED

    async def test_storage_failure_never_blocks(self, navigator, sink) -> None:
        coordinator = build_coordinator(navigator, FailingStore(), sink)
        assert await coordinator.handle_url("bulge://premium?ref=u1") is Outcome.DISPATCHED
        assert navigator.last is not None
        assert navigator.last.params == {"screen": "Login", "params": {"ref": "u1"}}


class TestReferral:
    async def test_recorded_regardless_of_routing(self, coordinator, store) -> None:
        await coordinator.handle_url("bulge://nowhere?ref=u7&source=sms")
        data = json.loads(store.get("referral_data") or "")
        assert data["referrer"] == "u7"
        assert data["source"] == "sms"

    async def test_recorded_while_buffered(self, coordinator, navigator, store) -> None:
        navigator.ready = False
        await coordinator.handle_url("bulge://premium?referrer=u8")
        assert json.loads(store.get("referral_data") or "")["referrer"] == "u8"


class TestReadiness:
    async def test_buffers_until_ready(self, coordinator, navigator) -> None:
        navigator.ready = False
        assert await coordinator.handle_url("bulge://support") is Outcome.BUFFERED
        assert navigator.calls == []
        assert coordinator.state is CoordinatorState.UNINITIALIZED

        assert await coordinator.mark_ready() is Outcome.DISPATCHED
        assert coordinator.state is CoordinatorState.READY
        assert coordinator.pending.is_empty
        assert len(navigator.calls) == 1

    async def test_newest_pending_wins(self, coordinator, navigator) -> None:
        navigator.ready = False
        await coordinator.handle_url("bulge://help/a")
        await coordinator.handle_url("bulge://help/b")
        await coordinator.mark_ready()

        assert len(navigator.calls) == 1
        assert navigator.calls[0].params["params"]["path"] == "b"

    async def test_held_link_dispatched_once(self, coordinator, navigator) -> None:
        navigator.ready = False
        await coordinator.handle_url("bulge://support")
        await coordinator.mark_ready()
        assert await coordinator.mark_ready() is None
        assert len(navigator.calls) == 1

    async def test_ready_with_empty_slot(self, coordinator) -> None:
        assert await coordinator.mark_ready() is None
        assert coordinator.state is CoordinatorState.READY

    async def test_ready_navigator_counts_as_signal(self, coordinator, navigator) -> None:
        navigator.ready = False
        await coordinator.handle_url("bulge://help/first")
        navigator.ready = True
        await coordinator.handle_url("bulge://help/second")

        assert coordinator.state is CoordinatorState.READY
        paths = [call.params["params"]["path"] for call in navigator.calls]
        assert paths == ["first", "second"]

    async def test_ready_state_is_permanent(self, coordinator, navigator) -> None:
        await coordinator.mark_ready()
        navigator.ready = False
        assert await coordinator.handle_url("bulge://support") is Outcome.DISPATCHED

    async def test_failing_readiness_check_buffers(self, sink) -> None:
        class Flaky(RecordingNavigator):
            def is_ready(self) -> bool:
                raise RuntimeError("not mounted")

        coordinator = _custom(RouteRegistry(), Flaky(), sink)
        assert await coordinator.handle_url("bulge://support") is Outcome.BUFFERED

    async def test_failed_replay_still_becomes_ready(self, sink) -> None:
        class BrokenReset(RecordingNavigator):
            def reset_to(self, routes) -> None:
                raise RuntimeError("stack unmounted")

        navigator = BrokenReset(ready=False)
        coordinator = _custom(RouteRegistry(), navigator, sink)
        assert await coordinator.handle_url("bulge://nowhere") is Outcome.BUFFERED

        assert await coordinator.mark_ready() is Outcome.FAILED
        assert coordinator.state is CoordinatorState.READY
        assert coordinator.pending.is_empty

    async def test_failed_implicit_replay_does_not_block_later_links(self, sink) -> None:
        class BrokenReset(RecordingNavigator):
            def reset_to(self, routes) -> None:
                raise RuntimeError("stack unmounted")

        seen: list[str] = []
        registry = RouteRegistry()
        registry.register("/support", lambda params, path: seen.append(path))
        navigator = BrokenReset(ready=False)
        coordinator = _custom(registry, navigator, sink)
        await coordinator.handle_url("bulge://nowhere")

        navigator.ready = True
        assert await coordinator.handle_url("bulge://support") is Outcome.DISPATCHED
        assert coordinator.state is CoordinatorState.READY
        assert seen == ["/support"]


class TestStart:
    async def test_no_initial_url(self, coordinator) -> None:
        assert await coordinator.start(None) is None

    async def test_initial_url_buffered_before_ready(self, coordinator, navigator) -> None:
        navigator.ready = False
        assert await coordinator.start("bulge://support") is Outcome.BUFFERED
        assert await coordinator.mark_ready() is Outcome.DISPATCHED


class TestAuthFlow:
    async def test_achievement_gated_then_resumed(self, coordinator, navigator, store, auth) -> None:
        outcome = await coordinator.handle_url("bulge://achievement/7?source=push")
        assert outcome is Outcome.DISPATCHED

        stored = json.loads(store.get("pending_navigation") or "")
        assert stored["screen"] == "Achievement"
        assert stored["params"] == {"achievementId": "7", "source": "push"}
        assert navigator.last is not None
        assert navigator.last.target == "Auth"
        assert navigator.last.params["screen"] == "Login"

        auth.authenticated = True
        pending = await coordinator.resume_pending_navigation()
        assert pending is not None
        assert navigator.last.target == "Main"
        assert navigator.last.params == {
            "screen": "Achievement",
            "params": {"achievementId": "7", "source": "push"},
        }
        assert await coordinator.resume_pending_navigation() is None

    async def test_resume_never_raises(self, sink) -> None:
        class BrokenNavigator(RecordingNavigator):
            def navigate(self, target, params) -> None:
                raise RuntimeError("gone")

        navigator = BrokenNavigator()
        store = MemoryStore()
        tracker = Tracker(sink)
        gate = AuthGate(navigator, store, StaticAuth(False), tracker)
        await gate.store_pending("Premium", {})
        coordinator = DispatchCoordinator(
            navigator,
            RouteRegistry(),
            gate=gate,
            recorder=AttributionRecorder(store),
            tracker=tracker,
        )
        assert await coordinator.resume_pending_navigation() is None

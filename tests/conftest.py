"""Shared fixtures: recording collaborators and a wired coordinator."""

import pytest

from waypoint.coordinator import DispatchCoordinator, build_coordinator
from waypoint.storage import MemoryStore
from waypoint.testing import FrozenClock, RecordingNavigator, RecordingSink, StaticAuth


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator(ready=True)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def auth() -> StaticAuth:
    return StaticAuth(authenticated=False)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def coordinator(
    navigator: RecordingNavigator,
    store: MemoryStore,
    sink: RecordingSink,
    auth: StaticAuth,
    clock: FrozenClock,
) -> DispatchCoordinator:
    return build_coordinator(navigator, store, sink, oracle=auth, clock=clock)

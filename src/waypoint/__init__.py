"""Waypoint — deep-link resolution and navigation routing.

Turns incoming app-scheme (``bulge://...``) and universal
(``https://bulgeapp.com/...``) links into in-app navigation, buffering
links until navigation is ready and deferring gated screens until the
user has signed in.

Basic usage::

    from waypoint import MemoryStore, build_coordinator

    coordinator = build_coordinator(navigator, MemoryStore(), analytics)
    await coordinator.start(launch_url)
    await coordinator.mark_ready()
    await coordinator.handle_url("bulge://workout/42?source=push")

Share links::

    from waypoint import generate_share_link
    generate_share_link("workout", "42", {"sharedBy": "u1"})
"""

__version__ = "0.1.0"
__all__ = [
    "AuthGate",
    "ConfigurationError",
    "DispatchCoordinator",
    "LinkingConfig",
    "MemoryStore",
    "NavRoute",
    "Outcome",
    "ParsedLink",
    "PendingNavigation",
    "RouteRegistry",
    "SqliteStore",
    "WaypointError",
    "build_coordinator",
    "generate_share_link",
    "linking_config",
    "parse_url",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name in ("DispatchCoordinator", "Outcome", "build_coordinator"):
        from waypoint import coordinator as _coord

        return getattr(_coord, name)

    if name in ("AuthGate", "PendingNavigation"):
        from waypoint import auth as _auth

        return getattr(_auth, name)

    if name == "LinkingConfig":
        from waypoint.config import LinkingConfig

        return LinkingConfig

    if name in ("MemoryStore", "SqliteStore"):
        from waypoint import storage as _storage

        return getattr(_storage, name)

    if name == "NavRoute":
        from waypoint.navigation import NavRoute

        return NavRoute

    if name in ("ParsedLink", "parse_url"):
        from waypoint import parsing as _parsing

        return getattr(_parsing, name)

    if name == "RouteRegistry":
        from waypoint.routing.registry import RouteRegistry

        return RouteRegistry

    if name in ("generate_share_link", "linking_config"):
        from waypoint import linking as _linking

        return getattr(_linking, name)

    if name in ("ConfigurationError", "WaypointError"):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

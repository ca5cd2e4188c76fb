"""Navigation target protocol and the default fallback action.

The navigation collaborator performs the actual screen transitions.
Waypoint only needs three operations from it::

    navigator.navigate("Main", {"screen": "WorkoutDetail", "params": {...}})
    navigator.reset_to([NavRoute("Main", {...})])
    navigator.is_ready()
"""

from collections.abc import Awaitable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from waypoint._internal.invoke import invoke
from waypoint.analytics import Tracker


@dataclass(frozen=True, slots=True)
class NavRoute:
    """One entry of a ``reset_to`` route list.

    ``state`` holds a nested stack, e.g. ``NavRoute("Auth", state=(NavRoute("Login"),))``.
    """

    name: str
    params: dict[str, Any] = field(default_factory=dict)
    state: "tuple[NavRoute, ...]" = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.params:
            data["params"] = dict(self.params)
        if self.state:
            data["state"] = {"routes": [r.to_dict() for r in self.state]}
        return data


class Navigator(Protocol):
    """Protocol for the navigation collaborator.

    Methods may be plain or ``async``; waypoint awaits either.
    """

    def navigate(self, target: str, params: dict[str, Any]) -> None | Awaitable[None]: ...

    def reset_to(self, routes: Sequence[NavRoute]) -> None | Awaitable[None]: ...

    def is_ready(self) -> bool | Awaitable[bool]: ...


def screen(name: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the params for navigating to a nested screen.

    >>> screen("Login")
    {'screen': 'Login'}
    """
    if params is None:
        return {"screen": name}
    return {"screen": name, "params": dict(params)}


async def navigate_to_default(
    navigator: Navigator,
    tracker: Tracker,
    params: Mapping[str, Any] | None = None,
    *,
    reason: str = "no_handler",
    path: str | None = None,
) -> None:
    """Reset the stack to the home route, carrying *params*.

    Records a ``deep_link_fallback`` event before navigating.
    """
    carried = dict(params or {})
    await tracker.track("deep_link_fallback", {"params": carried, "path": path, "reason": reason})
    await invoke(navigator.reset_to, [NavRoute("Main", carried)])

"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TypeAlias

# A link handler receives the decoded query params and the matched path.
RouteHandler: TypeAlias = Callable[[Mapping[str, str], str], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:   ``/workout``  (is_param=False)
    Param:    ``/:id``      (is_param=True, param_name="id")
    Wildcard: ``/*``        (is_wildcard=True)
    """

    value: str
    is_param: bool = False
    is_wildcard: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A registered pattern and its handler.

    ``name`` defaults to the handler's ``__name__`` for introspection.
    """

    pattern: str
    handler: RouteHandler
    name: str | None = None

    @property
    def is_exact(self) -> bool:
        """True when the pattern has no ``:name`` or ``*`` parts."""
        return ":" not in self.pattern and "*" not in self.pattern


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful resolution."""

    route: Route
    path: str
    path_params: dict[str, str]

"""Ordered route registry with exact-first resolution.

Resolution order:

1. Exact match against a pattern with no ``:name`` or ``*`` (dict lookup).
2. Parameterized and wildcard patterns, in registration order; first match wins.
3. No match — ``resolve()`` returns ``None`` and the caller falls back.
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import unquote

from waypoint.errors import ConfigurationError
from waypoint.routing.pattern import compile_pattern
from waypoint.routing.route import Route, RouteHandler, RouteMatch

logger = logging.getLogger("waypoint.routing")


@dataclass(slots=True)
class _CompiledRoute:
    route: Route
    regex: re.Pattern[str] | None


class RouteRegistry:
    """Pattern → handler table. Registration order is observable.

    Usage::

        registry = RouteRegistry()
        registry.register("/premium", handle_premium)
        registry.register("/workout/:id", handle_workout)
        match = registry.resolve("/workout/42")
        match.path_params  # {"id": "42"}
    """

    __slots__ = ("_entries", "_exact", "_frozen")

    def __init__(self) -> None:
        self._entries: list[_CompiledRoute] = []
        self._exact: dict[str, Route] = {}
        self._frozen = False

    def register(self, pattern: str, handler: RouteHandler, *, name: str | None = None) -> Route:
        """Bind *handler* to *pattern*.

        Re-registering a pattern replaces its handler but keeps its
        original position in the table.
        """
        if self._frozen:
            msg = "Cannot register handlers after the registry is frozen."
            raise ConfigurationError(msg)

        route = Route(
            pattern=pattern,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
        )
        regex = None if route.is_exact else compile_pattern(pattern)
        if route.is_exact and not pattern.startswith("/"):
            msg = f"Route pattern must start with '/': {pattern!r}"
            raise ConfigurationError(msg)

        entry = _CompiledRoute(route=route, regex=regex)
        for i, existing in enumerate(self._entries):
            if existing.route.pattern == pattern:
                logger.debug("Replacing handler for %s", pattern)
                self._entries[i] = entry
                break
        else:
            self._entries.append(entry)

        if route.is_exact:
            self._exact[pattern] = route
        return route

    def route(self, pattern: str, *, name: str | None = None):
        """Decorator form of ``register()``::

            @registry.route("/support")
            async def support(params, path): ...
        """

        def decorator(func: RouteHandler) -> RouteHandler:
            self.register(pattern, func, name=name)
            return func

        return decorator

    def freeze(self) -> None:
        """Freeze the registry. No more handlers can be registered."""
        self._frozen = True

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return [entry.route for entry in self._entries]

    def resolve(self, path: str) -> RouteMatch | None:
        """Resolve *path* to exactly one route, or ``None``."""
        exact = self._exact.get(path)
        if exact is not None:
            return RouteMatch(route=exact, path=path, path_params={})

        for entry in self._entries:
            if entry.regex is None:
                continue
            m = entry.regex.match(path)
            if m is not None:
                params = {name: unquote(value) for name, value in m.groupdict().items()}
                return RouteMatch(route=entry.route, path=path, path_params=params)

        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pattern: object) -> bool:
        return any(entry.route.pattern == pattern for entry in self._entries)

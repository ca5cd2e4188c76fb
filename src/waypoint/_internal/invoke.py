"""Invoke helpers — call sync or async collaborators uniformly.

Navigators, stores, analytics sinks, auth oracles, and link handlers can
be plain functions or coroutine functions. Any code that calls one must
handle both cases. This module keeps the sync/async check in one place.

Usage::

    from waypoint._internal.invoke import invoke

    ready = await invoke(navigator.is_ready)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def is_ready():
            return stack_mounted

        # async: returns a coroutine, awaited automatically
        async def is_ready():
            return await container.wait_mounted()
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result

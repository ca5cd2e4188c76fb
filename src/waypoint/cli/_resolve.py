"""``waypoint resolve`` — trace how a link would be dispatched.

Runs the full dispatch path against recording collaborators and prints
the parsed link, matched route, navigation calls, stored state, and
analytics events.
"""

import argparse
import json
import sys
from functools import partial

import anyio

from waypoint.coordinator import Outcome, build_coordinator
from waypoint.parsing import parse_url
from waypoint.storage import MemoryStore
from waypoint.testing import RecordingNavigator, RecordingSink, StaticAuth


async def _trace(url: str, *, authenticated: bool, ready: bool) -> int:
    link = parse_url(url)
    if link is None:
        print(f"Error: could not parse {url!r}", file=sys.stderr)
        return 1

    navigator = RecordingNavigator(ready=ready)
    store = MemoryStore()
    sink = RecordingSink()
    coordinator = build_coordinator(
        navigator, store, sink, oracle=StaticAuth(authenticated)
    )

    match = coordinator.registry.resolve(link.path)
    print(f"path:     {link.path}")
    print(f"params:   {json.dumps(dict(link.params))}")
    print(f"route:    {match.route.pattern if match else '(none)'}")

    outcome = await coordinator.handle_url(url)
    print(f"outcome:  {outcome.value}")

    for call in navigator.calls:
        if call.kind == "navigate":
            print(f"navigate: {call.target} {json.dumps(call.params, default=str)}")
        else:
            routes = [r.to_dict() for r in call.routes]
            print(f"reset:    {json.dumps(routes, default=str)}")

    for key in store.keys():
        print(f"stored:   {key} = {store.get(key)}")

    for name, properties in sink.events:
        print(f"event:    {name} {json.dumps(properties, default=str)}")

    return 0 if outcome is not Outcome.FAILED else 1


def run_resolve(args: argparse.Namespace) -> None:
    code = anyio.run(
        partial(_trace, args.url, authenticated=args.authenticated, ready=not args.not_ready)
    )
    if code:
        raise SystemExit(code)

"""``waypoint routes`` — list the default route table.

Builds a coordinator against recording collaborators and prints every
pattern with its handler, in the order resolution tries them.
"""

import argparse

from waypoint.coordinator import build_coordinator
from waypoint.storage import MemoryStore
from waypoint.testing import RecordingNavigator


def run_routes(args: argparse.Namespace) -> None:
    coordinator = build_coordinator(RecordingNavigator(), MemoryStore())
    routes = coordinator.registry.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [
        ("exact" if route.is_exact else "pattern", route.pattern, route.name or "?")
        for route in routes
    ]
    max_kind = max(max(len(r[0]) for r in rows), 4)  # "KIND" header
    max_pattern = max(max(len(r[1]) for r in rows), 7)  # "PATTERN" header

    fmt = f"{{:<{max_kind}}}  {{:<{max_pattern}}}  {{}}"
    print(fmt.format("KIND", "PATTERN", "HANDLER"))
    sep_len = max_kind + max_pattern + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for kind, pattern, handler_name in rows:
        print(fmt.format(kind, pattern, handler_name))

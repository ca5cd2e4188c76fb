"""``waypoint share`` — print a share link."""

import argparse
import sys

from waypoint.linking import generate_share_link


def run_share(args: argparse.Namespace) -> None:
    params: dict[str, str] = {}
    for item in args.params:
        key, sep, value = item.partition("=")
        if not sep or not key:
            print(f"Error: expected KEY=VALUE, got {item!r}", file=sys.stderr)
            raise SystemExit(2)
        params[key] = value
    print(generate_share_link(args.kind, args.id, params))

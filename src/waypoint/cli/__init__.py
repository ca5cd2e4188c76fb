"""Waypoint CLI — inspect the route table, trace link dispatch, build share links.

Entry point registered as ``waypoint`` in ``pyproject.toml``::

    [project.scripts]
    waypoint = "waypoint.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypoint`` command."""
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Waypoint — deep-link resolution and navigation routing.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # -- waypoint routes --------------------------------------------------
    subparsers.add_parser("routes", help="List the route table in resolution order")

    # -- waypoint resolve -------------------------------------------------
    resolve_parser = subparsers.add_parser("resolve", help="Trace how a link is dispatched")
    resolve_parser.add_argument("url", help="Link to resolve (e.g. bulge://workout/42)")
    resolve_parser.add_argument(
        "--authenticated",
        action="store_true",
        help="Dispatch as a signed-in user",
    )
    resolve_parser.add_argument(
        "--not-ready",
        action="store_true",
        help="Dispatch before navigation reports ready (link is buffered)",
    )

    # -- waypoint share ---------------------------------------------------
    share_parser = subparsers.add_parser("share", help="Generate a share link")
    share_parser.add_argument("kind", help="workout, achievement, invite, premium, ...")
    share_parser.add_argument("id", nargs="?", default=None, help="Content id")
    share_parser.add_argument(
        "params",
        nargs="*",
        metavar="KEY=VALUE",
        help="Extra query parameters",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from waypoint.cli._routes import run_routes

        run_routes(args)
    elif args.command == "resolve":
        from waypoint.cli._resolve import run_resolve

        run_resolve(args)
    elif args.command == "share":
        from waypoint.cli._share import run_share

        run_share(args)

"""``contractmock serve`` and ``contractmock routes``.

Both build the server from environment + flags; configuration errors
(bad env values, contract/custom state conflicts) are printed and exit
with status 1 before any socket is bound.
"""

import argparse
import logging
import sys

from contractmock.app import MockServer
from contractmock.config import MockConfig
from contractmock.errors import ConfigurationError


def _build_server(args: argparse.Namespace, **overrides: object) -> MockServer:
    try:
        config = MockConfig.from_env(
            env_file=args.env_file,
            pacts_dir=args.pacts_dir,
            custom_routes=args.custom_routes,
            log_level=args.log_level,
            **overrides,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    server = MockServer(config)
    try:
        server.freeze()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return server


def serve(args: argparse.Namespace) -> None:
    """Load contracts, print the banner, and serve until interrupted."""
    server = _build_server(
        args,
        host=args.host,
        port=args.port,
        workers=args.workers,
        banner=False if args.no_banner else None,
    )
    try:
        server.run()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def show_routes(args: argparse.Namespace) -> None:
    """Print the route table and known states, then exit."""
    from contractmock.server.banner import format_route_listing

    server = _build_server(args)
    if not len(server.table):
        print("No routes loaded.")
    print(format_route_listing(server.table, server.registry))

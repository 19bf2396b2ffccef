"""contractmock CLI: serve contracts, inspect routes, organize contract files.

Entry point registered as ``contractmock`` in ``pyproject.toml``::

    [project.scripts]
    contractmock = "contractmock.cli:main"
"""

import argparse
import sys


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--pacts-dir", default=None, help="Contracts directory (provider/consumer.json)")
    parser.add_argument("--custom-routes", default=None, help="JSON file of custom interactions")
    parser.add_argument("--env-file", default=".env", help="dotenv file to load (default: .env)")
    parser.add_argument("--log-level", default=None, help="Logging level (debug, info, warning, ...)")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``contractmock`` command."""
    parser = argparse.ArgumentParser(
        prog="contractmock",
        description="contractmock: a contract-driven mock HTTP server.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- contractmock serve -----------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Load contracts and start the mock server")
    _add_config_arguments(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument("--workers", type=int, default=None, help="Worker thread count")
    serve_parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Skip the startup route and state listing",
    )

    # -- contractmock routes ----------------------------------------------
    routes_parser = subparsers.add_parser(
        "routes", help="Build the route table, list routes and states, and exit"
    )
    _add_config_arguments(routes_parser)

    # -- contractmock organize --------------------------------------------
    organize_parser = subparsers.add_parser(
        "organize", help="Move flat consumer-provider.json files into provider/consumer.json"
    )
    organize_parser.add_argument("directory", nargs="?", default="pacts", help="Contracts directory")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from contractmock.cli._serve import serve

        serve(args)
    elif args.command == "routes":
        from contractmock.cli._serve import show_routes

        show_routes(args)
    elif args.command == "organize":
        from contractmock.cli._organize import organize

        organize(args)

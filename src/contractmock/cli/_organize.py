"""``contractmock organize``: restructure flat contract files in place."""

import argparse
import logging
import sys

from contractmock.contracts.organize import organize_contracts


def organize(args: argparse.Namespace) -> None:
    """Reorganize ``args.directory``; exit 1 if any file could not be placed."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    result = organize_contracts(args.directory)

    for source, target in result.moved:
        print(f"{source.name} -> {target.parent.name}/{target.name}")
    for path in result.unresolved:
        print(f"Could not reorganize {path.name}", file=sys.stderr)

    if not result.moved and not result.unresolved:
        print("No contract files found to reorganize")
    if not result.ok:
        raise SystemExit(1)

"""Contract loader: reads a provider/consumer directory tree.

Layout::

    pacts/
      wms_order_management/      <- one directory per provider
        wms_ui.json              <- one contract file per consumer
      wms_inventory_management/
        wms_ui.json

Loading is forgiving: an unreadable provider directory or a broken
contract file is logged and skipped, and a missing root directory
yields no contracts, so a server with only custom routes still starts.
Directories and files are visited in sorted order so route
registration order is reproducible across machines.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from contractmock.contracts.interaction import Contract, Interaction, parse_interaction
from contractmock.errors import LoadError

logger = logging.getLogger("contractmock.contracts")


def load_contracts(directory: str | Path) -> list[Contract]:
    """Load every ``<provider>/<consumer>.json`` contract under *directory*."""
    root = Path(directory)
    if not root.is_dir():
        logger.warning("Contracts directory not found: %s", root)
        return []

    try:
        provider_dirs = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as exc:
        logger.error("Error reading contracts directory %s: %s", root, exc)
        return []

    contracts: list[Contract] = []
    for provider_dir in provider_dirs:
        try:
            files = sorted(
                p for p in provider_dir.iterdir() if p.suffix == ".json" and p.is_file()
            )
        except OSError as exc:
            logger.error("%s", LoadError(provider_dir, f"cannot read provider directory: {exc}"))
            continue

        for path in files:
            try:
                contract = load_contract_file(path, provider=provider_dir.name)
            except LoadError as exc:
                logger.error("Error parsing contract %s", exc)
                continue
            contracts.append(contract)
            logger.info("Loaded contract: %s/%s", provider_dir.name, path.name)

    return contracts


def load_contract_file(path: Path, *, provider: str | None = None) -> Contract:
    """Parse one contract file.

    Raises ``LoadError`` if the file cannot be read or is not a JSON
    object. Individual malformed interactions are logged and dropped;
    the rest of the file still loads.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise LoadError(path, str(exc)) from exc

    if not isinstance(data, Mapping):
        raise LoadError(path, "contract must be a JSON object")

    raw_interactions = data.get("interactions")
    if raw_interactions is None:
        raw_interactions = []
    if not isinstance(raw_interactions, list):
        raise LoadError(path, "'interactions' must be a list")

    return Contract(
        provider=provider or _participant_name(data, "provider") or path.parent.name,
        consumer=_participant_name(data, "consumer") or path.stem,
        source=path,
        interactions=tuple(parse_interactions(raw_interactions, path)),
    )


def parse_interactions(raw_interactions: list[object], source: object) -> list[Interaction]:
    """Parse a list of raw interactions, dropping (and logging) malformed ones."""
    interactions: list[Interaction] = []
    for index, raw in enumerate(raw_interactions):
        try:
            interactions.append(parse_interaction(raw, f"{source}#{index}"))
        except LoadError as exc:
            logger.error("Skipping interaction %s", exc)
    return interactions


def load_interactions(directory: str | Path) -> list[Interaction]:
    """All interactions under *directory*, in contract then file order."""
    return [
        interaction
        for contract in load_contracts(directory)
        for interaction in contract.interactions
    ]


def _participant_name(data: Mapping[str, object], role: str) -> str | None:
    participant = data.get(role)
    if isinstance(participant, Mapping):
        name = participant.get("name")
        if isinstance(name, str) and name:
            return name
    return None

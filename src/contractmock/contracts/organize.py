"""Reorganize flat contract files into the provider/consumer layout.

Contract test runs write one flat file per pair::

    pacts/wms_ui-wms_inventory_management.json

The loader expects one directory per provider and one file per consumer::

    pacts/wms_inventory_management/wms_ui.json

Names come from the file's ``consumer.name`` / ``provider.name`` fields,
falling back to a ``<consumer>-<provider>.json`` filename. File bytes
are copied exactly. Files whose names cannot be determined stay where
they are and are reported.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("contractmock.contracts")

_FILENAME_RE = re.compile(r"^([^-]+)-([^.]+)\.json$")


@dataclass(slots=True)
class OrganizeResult:
    """What ``organize_contracts()`` did."""

    moved: list[tuple[Path, Path]] = field(default_factory=list)
    unresolved: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.unresolved


def participants_from_content(raw: bytes) -> tuple[str, str] | None:
    """``(consumer, provider)`` from the contract body, if both are named."""
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    consumer = _name_of(data.get("consumer"))
    provider = _name_of(data.get("provider"))
    if consumer and provider:
        return consumer, provider
    return None


def _name_of(participant: object) -> str | None:
    if isinstance(participant, dict):
        name = participant.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def participants_from_filename(filename: str) -> tuple[str, str] | None:
    """``(consumer, provider)`` from a ``consumer-provider.json`` filename."""
    match = _FILENAME_RE.match(filename)
    if match is None:
        return None
    return match.group(1), match.group(2)


def is_safe_name(name: str) -> bool:
    """Whether *name* can be used as a single path component under the root."""
    return name not in ("", ".", "..") and "/" not in name and "\\" not in name


def organize_contracts(directory: str | Path) -> OrganizeResult:
    """Move every flat ``*.json`` file in *directory* into ``provider/consumer.json``.

    A missing *directory* is created and left empty. A file that cannot
    be read, named, or written is reported as unresolved and the run
    continues with the next one.
    """
    root = Path(directory)
    result = OrganizeResult()
    if not root.is_dir():
        root.mkdir(parents=True)
        logger.info("Created contracts directory %s", root)
        return result

    for path in sorted(p for p in root.iterdir() if p.is_file() and p.suffix == ".json"):
        try:
            target = _organize_file(root, path)
        except OSError as exc:
            logger.error("Error processing %s: %s", path.name, exc)
            target = None
        if target is None:
            result.unresolved.append(path)
        else:
            result.moved.append((path, target))

    return result


def _organize_file(root: Path, path: Path) -> Path | None:
    raw = path.read_bytes()
    names = participants_from_content(raw)
    if names is None:
        names = participants_from_filename(path.name)
        if names is not None:
            logger.info("Using filename for names: %s", path.name)
    if names is None:
        logger.error("Could not determine provider/consumer for %s", path.name)
        return None

    consumer, provider = names
    if not (is_safe_name(consumer) and is_safe_name(provider)):
        logger.error(
            "Refusing unsafe provider/consumer names for %s: %r, %r",
            path.name,
            provider,
            consumer,
        )
        return None

    target = root / provider / f"{consumer}.json"
    target.parent.mkdir(exist_ok=True)
    target.write_bytes(raw)
    path.unlink()
    logger.info("Restructured contract: %s/%s.json", provider, consumer)
    return target

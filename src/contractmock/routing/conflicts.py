"""Startup check: contract and custom routes must not share a state on one key."""

from collections.abc import Mapping

from contractmock.errors import ConfigurationConflictError
from contractmock.routing.route import Origin, RouteKey, RouteVariant


def find_conflicts(
    table: Mapping[RouteKey, tuple[RouteVariant, ...]],
) -> dict[RouteKey, tuple[str, ...]]:
    """State names declared on both sides of each mixed-origin key.

    Keys with a single origin never conflict; neither do no-state
    variants, since default selection orders origins explicitly.
    """
    conflicts: dict[RouteKey, tuple[str, ...]] = {}
    for key, variants in table.items():
        contract_states = {s for v in variants if v.origin is Origin.CONTRACT for s in v.states}
        custom_states = {s for v in variants if v.origin is Origin.CUSTOM for s in v.states}
        overlap = contract_states & custom_states
        if overlap:
            conflicts[key] = tuple(sorted(overlap))
    return conflicts


def validate_no_conflicts(table: Mapping[RouteKey, tuple[RouteVariant, ...]]) -> None:
    """Raise ``ConfigurationConflictError`` naming every conflicting key."""
    conflicts = find_conflicts(table)
    if conflicts:
        raise ConfigurationConflictError(conflicts)

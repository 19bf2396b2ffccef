"""Matching engine: picks exactly one recorded response for a route key.

Selection order:

1. Unknown key: no match.
2. Active states that are scoped to a path prefix the key's path does
   not start with are ignored for this lookup.
3. Active states, in priority order: the first variant (registration
   order) declaring the highest-priority matching state wins.
4. Default: no-state variants if any exist, else all variants; contract
   variants are tried before custom ones; the first 2xx wins, else the
   first candidate.
"""

from collections.abc import Sequence

from contractmock.routing.route import Origin, RouteKey, RouteVariant
from contractmock.routing.table import RouteTable
from contractmock.state import StateSnapshot

_EMPTY = StateSnapshot()


def select_variant(
    table: RouteTable,
    key: RouteKey,
    snapshot: StateSnapshot = _EMPTY,
) -> RouteVariant | None:
    """Select the variant to serve for *key*, or ``None`` if the key is unknown."""
    variants = table.variants(key)
    if not variants:
        return None

    if snapshot.applies_to(key.path):
        for state in snapshot.active_states:
            for variant in variants:
                if variant.declares(state):
                    return variant

    return default_variant(variants)


def default_variant(variants: Sequence[RouteVariant]) -> RouteVariant:
    """The variant served when no active state selects one.

    *variants* must be non-empty.
    """
    candidates = [v for v in variants if v.is_stateless] or list(variants)
    ordered = [v for v in candidates if v.origin is Origin.CONTRACT] + [
        v for v in candidates if v.origin is Origin.CUSTOM
    ]
    for variant in ordered:
        if variant.is_success:
            return variant
    return ordered[0]

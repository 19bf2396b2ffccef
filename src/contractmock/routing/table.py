"""Route table builder.

Routes are registered during startup and frozen into an immutable
``RouteTable`` before the listener opens. Within one key, variants keep
their registration order exactly; it is the tie-break of last resort.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from contractmock.contracts.interaction import Interaction
from contractmock.routing.conflicts import validate_no_conflicts
from contractmock.routing.route import Origin, RouteKey, RouteVariant
from contractmock.state import StateRegistry

logger = logging.getLogger("contractmock.routing")


class RouteTable(Mapping[RouteKey, tuple[RouteVariant, ...]]):
    """Read-only map of route key to its ordered, non-empty variant list."""

    __slots__ = ("_routes",)

    def __init__(self, routes: Mapping[RouteKey, tuple[RouteVariant, ...]]) -> None:
        self._routes = MappingProxyType(dict(routes))

    def __getitem__(self, key: RouteKey) -> tuple[RouteVariant, ...]:
        return self._routes[key]

    def __iter__(self) -> Iterator[RouteKey]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({len(self)} routes)"

    def variants(self, key: RouteKey) -> tuple[RouteVariant, ...]:
        """Variants for *key*, or an empty tuple when the key is unknown."""
        return self._routes.get(key, ())

    @property
    def variant_count(self) -> int:
        return sum(len(v) for v in self._routes.values())


class RouteTableBuilder:
    """Collects interactions into route variants. Single use.

    Usage::

        builder = RouteTableBuilder(registry)
        for interaction in contract_interactions:
            builder.add(interaction, Origin.CONTRACT)
        table = builder.build()
    """

    __slots__ = ("_built", "_registry", "_routes")

    def __init__(self, registry: StateRegistry) -> None:
        self._registry = registry
        self._routes: dict[RouteKey, list[RouteVariant]] = {}
        self._built = False

    def add(self, interaction: Interaction, origin: Origin) -> RouteVariant:
        """Append *interaction* as a variant of its route key."""
        if self._built:
            msg = "Cannot add routes after the table is built."
            raise RuntimeError(msg)

        key = interaction.route_key
        variant = RouteVariant(
            states=interaction.states,
            response=interaction.response,
            origin=origin,
            description=interaction.description,
        )
        self._routes.setdefault(key, []).append(variant)
        for name in variant.states:
            self._registry.register(name, origin)

        if variant.states:
            logger.info(
                "Added %s route: %s [%s]", origin.value, key, ", ".join(variant.states)
            )
        else:
            logger.info("Added %s route: %s", origin.value, key)
        return variant

    def add_all(self, interactions: Iterable[Interaction], origin: Origin) -> None:
        for interaction in interactions:
            self.add(interaction, origin)

    def build(self) -> RouteTable:
        """Freeze the collected routes. No more routes can be added."""
        self._built = True
        return RouteTable({key: tuple(variants) for key, variants in self._routes.items()})


def build_route_table(
    contract_interactions: Iterable[Interaction],
    custom_interactions: Iterable[Interaction],
    registry: StateRegistry,
) -> RouteTable:
    """Build and validate the table: contract routes first, then custom ones.

    Raises ``ConfigurationConflictError`` if a contract and a custom
    route claim the same state on one key.
    """
    builder = RouteTableBuilder(registry)
    builder.add_all(contract_interactions, Origin.CONTRACT)
    builder.add_all(custom_interactions, Origin.CUSTOM)
    table = builder.build()
    validate_no_conflicts(table)
    logger.info("Created %d routes (%d variants)", len(table), table.variant_count)
    return table

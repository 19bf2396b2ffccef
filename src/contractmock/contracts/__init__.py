"""Recorded interactions and the loaders that read them."""

from contractmock.contracts.interaction import (
    Contract,
    Interaction,
    ResponseDescriptor,
    normalize_states,
    parse_interaction,
)
from contractmock.contracts.loader import load_contracts, load_interactions

__all__ = [
    "Contract",
    "Interaction",
    "ResponseDescriptor",
    "load_contracts",
    "load_interactions",
    "normalize_states",
    "parse_interaction",
]

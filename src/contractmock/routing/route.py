"""Route table value types.

A ``RouteKey`` is the exact (method, path) pair a recorded interaction
answers; a ``RouteVariant`` is one recorded response for that key.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from http import HTTPMethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contractmock.contracts.interaction import ResponseDescriptor


class Origin(Enum):
    """Where a route variant was declared."""

    CONTRACT = "contract"
    CUSTOM = "custom"


def parse_method(value: str) -> HTTPMethod:
    """Parse an HTTP method name, case-insensitively.

    Raises ``ValueError`` for names outside the standard method set.
    """
    try:
        return HTTPMethod(value.strip().upper())
    except ValueError:
        msg = f"Unsupported HTTP method {value!r}"
        raise ValueError(msg) from None


@dataclass(frozen=True, slots=True)
class RouteKey:
    """Exact-match lookup key: uppercase method plus the literal request target.

    ``path`` includes ``?query`` when the recorded request had one.
    No templating: ``/orders/42`` matches only ``/orders/42``.
    """

    method: HTTPMethod
    path: str

    @classmethod
    def of(cls, method: str | HTTPMethod, path: str) -> RouteKey:
        """Build a key from a method name (any case) and a path."""
        if not isinstance(method, HTTPMethod):
            method = parse_method(method)
        return cls(method=method, path=path)

    def __str__(self) -> str:
        return f"{self.method.value} {self.path}"


@dataclass(frozen=True, slots=True)
class RouteVariant:
    """One recorded response available under a route key.

    ``states`` keeps declaration order for display; membership checks
    go through ``declares()``. An empty ``states`` marks a no-state
    (default) variant.
    """

    states: tuple[str, ...]
    response: ResponseDescriptor
    origin: Origin
    description: str = ""

    @property
    def is_stateless(self) -> bool:
        return not self.states

    @property
    def is_success(self) -> bool:
        return 200 <= self.response.status < 300

    def declares(self, state: str) -> bool:
        return state in self.states

"""Provider state registry.

Holds every known provider-state name, the operator's active selection,
and an optional path scope. One registry is owned per ``MockServer``
and handed to the dispatcher; there is no module-level singleton.

Thread safety:
    ``set_states()``, ``reset()``, and ``snapshot()`` take the same lock,
    so a request being matched on one worker thread never observes a
    half-applied (states, scope) pair written by another.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from contractmock.routing.route import Origin

logger = logging.getLogger("contractmock.state")

UNKNOWN_STATE_WARNING = "{name} not found in contracts or custom routes"


@dataclass(frozen=True, slots=True)
class StateSnapshot:
    """A consistent view of the active selection for one lookup."""

    active_states: tuple[str, ...] = ()
    scope_path: str | None = None

    def applies_to(self, path: str) -> bool:
        """Whether the active states take part in matching *path*."""
        if not self.active_states:
            return False
        if self.scope_path is None:
            return True
        return path.startswith(self.scope_path)


@dataclass(frozen=True, slots=True)
class StateChange:
    """Outcome of ``set_states()``: what was accepted and what was not."""

    valid_states: tuple[str, ...]
    warnings: tuple[str, ...]
    scope_path: str | None = None

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class StateRegistry:
    """Known provider states plus the current selection.

    Usage::

        registry = StateRegistry()
        registry.register("orders exist", Origin.CONTRACT)
        change = registry.set_states(["orders exist"], scope_path="/api/v1/orders")
        registry.reset()
    """

    __slots__ = ("_active", "_by_origin", "_known", "_lock", "_scope")

    def __init__(self) -> None:
        # dict keys double as an insertion-ordered set
        self._known: dict[str, None] = {}
        self._by_origin: dict[Origin, dict[str, None]] = {origin: {} for origin in Origin}
        self._active: tuple[str, ...] = ()
        self._scope: str | None = None
        self._lock = threading.Lock()

    # -- Registration (startup only) --

    def register(self, name: str, origin: Origin) -> None:
        """Record *name* as declared by a route of the given origin."""
        with self._lock:
            self._known.setdefault(name, None)
            self._by_origin[origin].setdefault(name, None)

    def states_for(self, origin: Origin) -> frozenset[str]:
        """Names declared by routes of *origin*."""
        with self._lock:
            return frozenset(self._by_origin[origin])

    def is_known(self, name: str) -> bool:
        with self._lock:
            return name in self._known

    # -- Selection --

    def set_states(self, names: Iterable[str], scope_path: str | None = None) -> StateChange:
        """Replace the active selection with the known subset of *names*.

        Unknown names are reported as warnings, never stored. The scope
        is replaced by *scope_path* verbatim, or cleared when omitted.
        """
        valid: list[str] = []
        warnings: list[str] = []
        with self._lock:
            for name in dict.fromkeys(names):
                if name in self._known:
                    valid.append(name)
                else:
                    warnings.append(UNKNOWN_STATE_WARNING.format(name=name))
            self._active = tuple(valid)
            self._scope = scope_path

        logger.info("Provider states set: %s", ", ".join(valid) or "(none)")
        if scope_path is not None:
            logger.info("Limited to path: %s", scope_path)
        if warnings:
            logger.warning("Warnings: %s", ", ".join(warnings))

        return StateChange(
            valid_states=tuple(valid),
            warnings=tuple(warnings),
            scope_path=scope_path,
        )

    def reset(self) -> None:
        """Clear the selection and scope. Idempotent."""
        with self._lock:
            self._active = ()
            self._scope = None
        logger.info("Provider states reset to default behavior")

    def snapshot(self) -> StateSnapshot:
        """Read the (states, scope) pair atomically."""
        with self._lock:
            return StateSnapshot(active_states=self._active, scope_path=self._scope)

    def list_available(self) -> tuple[str, ...]:
        """Every known state name, in discovery order."""
        with self._lock:
            return tuple(self._known)

    @property
    def active_states(self) -> tuple[str, ...]:
        return self.snapshot().active_states

    @property
    def scope_path(self) -> str | None:
        return self.snapshot().scope_path

    def __len__(self) -> int:
        with self._lock:
            return len(self._known)

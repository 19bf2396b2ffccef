"""contractmock exception hierarchy.

Shared across the loader, route table, state registry, and dispatcher
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class MockServerError(Exception):
    """Base for all contractmock-specific errors."""


class ConfigurationError(MockServerError):
    """Raised when server configuration is invalid.

    Typically caught during ``MockServer.freeze()`` at startup.
    """


class ConfigurationConflictError(ConfigurationError):
    """A custom route and a contract claim the same provider state on one route.

    Fatal at startup: serving such a table would make the response for
    that state depend on registration order instead of operator intent.
    """

    def __init__(self, conflicts: dict[object, tuple[str, ...]]) -> None:
        self.conflicts = conflicts
        first_key, first_states = next(iter(conflicts.items()))
        self.route_key = first_key
        self.states = first_states
        lines = [
            f"{key}: {', '.join(repr(s) for s in states)}"
            for key, states in conflicts.items()
        ]
        msg = (
            "Provider state declared by both a contract and a custom route: "
            + "; ".join(lines)
        )
        super().__init__(msg)


class LoadError(MockServerError):
    """A contract file or provider directory could not be loaded.

    Recovered by the loader: the offending unit is logged and skipped.
    """

    def __init__(self, source: object, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class RequestFormatError(MockServerError):
    """A control-endpoint request body has the wrong shape."""


@dataclass(frozen=True, slots=True)
class HTTPError(MockServerError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher; the ASGI handler catches these and renders
    a JSON ``{"error": detail}`` payload.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no recorded route matches the request."""

    def __init__(self, detail: str = "Not found in Pact contracts or custom routes") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: a control path was requested with the wrong verb."""

    def __init__(self, allowed: frozenset[str], detail: str = "Method not allowed") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail,
            headers=(("Allow", allow_value),),
        )

"""contractmock: a contract-driven mock HTTP server.

Serves recorded Pact-style interactions and lets tests pick which
recorded response a route answers with by activating provider states.

Basic usage::

    from contractmock import MockConfig, MockServer

    server = MockServer(MockConfig(pacts_dir="pacts", port=30080))
    server.run()

Then, from a test::

    POST /api/mock-server/state  {"state": "orders exist"}
    GET  /api/v1/orders          -> the "orders exist" recording
    POST /api/mock-server/reset
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationConflictError",
    "ConfigurationError",
    "Interaction",
    "LoadError",
    "MockConfig",
    "MockServer",
    "MockServerError",
    "RouteKey",
    "StateRegistry",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import contractmock`` fast while providing a clean top-level API.
    """
    if name == "MockServer":
        from contractmock.app import MockServer

        return MockServer

    if name == "MockConfig":
        from contractmock.config import MockConfig

        return MockConfig

    if name == "Interaction":
        from contractmock.contracts.interaction import Interaction

        return Interaction

    if name == "RouteKey":
        from contractmock.routing.route import RouteKey

        return RouteKey

    if name == "StateRegistry":
        from contractmock.state import StateRegistry

        return StateRegistry

    if name in (
        "ConfigurationConflictError",
        "ConfigurationError",
        "LoadError",
        "MockServerError",
    ):
        from contractmock import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

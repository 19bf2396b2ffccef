"""Serve a MockServer with pounce.

Pounce's ``run()`` takes an import string, but the mock server is a
live object whose route table was built at startup, so
``pounce.Server`` is driven directly with the ASGI callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from contractmock.errors import ConfigurationError

if TYPE_CHECKING:
    from contractmock.app import MockServer


def run_server(server: MockServer, host: str, port: int, *, workers: int = 1) -> None:
    """Start pounce with the given (already frozen) MockServer.

    Args:
        server: ASGI callable.
        host: Bind host address.
        port: Bind port number.
        workers: Worker threads; the state registry is shared and locked.

    Raises:
        ConfigurationError: If pounce is not installed
            (``pip install contractmock[serve]``).
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = (
            "Serving requires the pounce ASGI server. "
            "Install it with: pip install contractmock[serve]"
        )
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        reload=False,
    )
    Server(config, server).run()

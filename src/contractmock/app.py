"""The mock server application.

Mutable during setup (custom route declarations). Frozen at startup:
``freeze()`` loads contracts, builds and validates the route table, and
from then on only the state registry changes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from contractmock._internal.asgi import Receive, Scope, Send
from contractmock.config import MockConfig
from contractmock.contracts.custom import custom_interaction, load_custom_routes
from contractmock.contracts.interaction import Interaction
from contractmock.contracts.loader import load_interactions
from contractmock.errors import ConfigurationError
from contractmock.routing.table import RouteTable, build_route_table
from contractmock.server.cors import CORSPolicy
from contractmock.server.handler import handle_request
from contractmock.state import StateRegistry

logger = logging.getLogger("contractmock.server")


class MockServer:
    """A contract-driven mock HTTP server (an ASGI 3.0 application).

    Usage::

        server = MockServer(MockConfig(pacts_dir="pacts"))
        server.custom("GET", "/api/v1/health", body={"status": "ok"})
        server.run()

    Thread safety:
        Setup is single-threaded. ``freeze()`` uses a Lock + double-check
        so exactly one thread builds the table even if several workers
        receive their first request at once. After that the table is
        read-only and the registry serializes its own mutations.
    """

    __slots__ = (
        "_custom",
        "_freeze_lock",
        "_frozen",
        "_interactions",
        "_table",
        "config",
        "cors",
        "registry",
    )

    def __init__(
        self,
        config: MockConfig | None = None,
        *,
        interactions: list[Interaction] | None = None,
        cors: CORSPolicy | None = None,
    ) -> None:
        self.config: MockConfig = config or MockConfig()
        self.cors: CORSPolicy = cors or CORSPolicy()
        self.registry = StateRegistry()
        # Contract interactions supplied directly skip the directory scan
        self._interactions = interactions
        self._custom: list[Interaction] = []
        self._table: RouteTable | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Setup --

    def custom(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        states: tuple[str, ...] | list[str] | str = (),
        description: str = "",
    ) -> Interaction:
        """Declare a custom route variant served alongside the contracts."""
        self._check_not_frozen()
        interaction = custom_interaction(
            method,
            path,
            status=status,
            body=body,
            headers=headers,
            states=states,
            description=description,
        )
        self._custom.append(interaction)
        return interaction

    def route(
        self,
        path: str,
        *,
        method: str = "GET",
        status: int = 200,
        states: tuple[str, ...] | list[str] | str = (),
    ) -> Callable[[Callable[[], Any]], Callable[[], Any]]:
        """Decorator form of ``custom()``: the function returns the body.

        The function is called once, at declaration time::

            @server.route("/api/v1/health")
            def health():
                return {"status": "ok"}
        """

        def decorator(func: Callable[[], Any]) -> Callable[[], Any]:
            self.custom(
                method,
                path,
                status=status,
                body=func(),
                states=states,
                description=func.__doc__ or func.__name__,
            )
            return func

        return decorator

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the mock server after it has started serving. "
                "Declare all custom routes before calling run() or serving requests."
            )
            raise RuntimeError(msg)

    # -- Startup --

    @property
    def table(self) -> RouteTable:
        """The frozen route table (builds it on first access)."""
        self.freeze()
        assert self._table is not None
        return self._table

    def freeze(self) -> None:
        """Load contracts, build and validate the route table. Runs once.

        Raises ``ConfigurationError`` (including
        ``ConfigurationConflictError``) if the routes cannot be served
        unambiguously.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._table = self._build()
            self._frozen = True

    def _build(self) -> RouteTable:
        cfg = self.config
        if self._interactions is not None:
            contract_interactions = list(self._interactions)
        else:
            logger.info("Looking for contracts in: %s", Path(cfg.pacts_dir))
            contract_interactions = load_interactions(cfg.pacts_dir)
        logger.info("Loaded %d contract interactions", len(contract_interactions))

        custom_interactions = list(self._custom)
        if cfg.custom_routes is not None:
            custom_interactions.extend(load_custom_routes(cfg.custom_routes))

        table = build_route_table(contract_interactions, custom_interactions, self.registry)
        if not len(table):
            logger.warning("No routes loaded; only the control endpoints will answer")
        return table

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Build the route table, print the banner, and serve with pounce.

        Any configuration error surfaces here, before a socket is bound.
        """
        self.freeze()

        _host = host or self.config.host
        _port = port or self.config.port

        if self.config.banner:
            from contractmock.server.banner import print_banner

            print_banner(self.config.with_overrides(host=host, port=port), self.table, self.registry)

        from contractmock.server.run import run_server

        run_server(self, _host, _port, workers=self.config.workers)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly (building the table at
        startup), then delegates HTTP scopes to the request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            table=self.table,
            registry=self.registry,
            cors=self.cors,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        A configuration error fails startup so the server never answers
        from an ambiguous table.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.freeze()
                except ConfigurationError as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

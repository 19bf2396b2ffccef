"""Immutable HTTP request.

Frozen metadata with async body access. The body is the only part that
arrives later, so it is read on demand and cached.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from contractmock._internal.asgi import Receive, Scope


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, raw headers, query string) is frozen at creation.
    ``path`` is the request path exactly as sent, percent-encoding intact.
    Body is accessed asynchronously via ``.body()``.
    """

    method: str
    path: str
    query_string: str
    headers: tuple[tuple[bytes, bytes], ...]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for the body
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def target(self) -> str:
        """Request target as recorded in contracts: path plus ``?query`` if any."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or ``None``."""
        wanted = name.lower().encode("latin-1")
        for key, value in self.headers:
            if key.lower() == wanted:
                return value.decode("latin-1")
        return None

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached. The ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable.

        The path comes from ``raw_path`` when the server provides it,
        since ``path`` has already been percent-decoded.
        """
        raw_path = scope.get("raw_path")
        if raw_path:
            path = bytes(raw_path).decode("latin-1").partition("?")[0]
        else:
            path = scope["path"]
        return cls(
            method=scope["method"].upper(),
            path=path,
            query_string=scope.get("query_string", b"").decode("latin-1"),
            headers=tuple((bytes(k), bytes(v)) for k, v in scope.get("headers", ())),
            _receive=receive,
        )

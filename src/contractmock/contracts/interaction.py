"""Recorded interaction model.

An interaction is one request/response example taken from a Pact-style
contract file::

    {
      "description": "a request for all orders",
      "providerState": "orders exist",
      "request": {"method": "GET", "path": "/api/v1/orders"},
      "response": {"status": 200, "headers": {...}, "body": [...]}
    }

Provider states arrive either as the single ``providerState`` field or
as a ``providerStates`` list of ``{"name": ...}`` objects. Both shapes
are normalized by ``normalize_states()`` into one ordered tuple.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from contractmock.errors import LoadError
from contractmock.routing.route import RouteKey, parse_method

DEFAULT_HEADERS: tuple[tuple[str, str], ...] = (("Content-Type", "application/json"),)


@dataclass(frozen=True, slots=True)
class ResponseDescriptor:
    """A recorded response: status, headers, and JSON body payload.

    ``has_body`` distinguishes a recorded ``"body": null`` (sent as
    ``null``) from no body at all (sent empty).
    """

    status: int = 200
    headers: tuple[tuple[str, str], ...] = DEFAULT_HEADERS
    body: Any = None
    has_body: bool = False

    @property
    def body_bytes(self) -> bytes:
        """The body serialized the way it is served: JSON, or empty."""
        if not self.has_body:
            return b""
        return json_module.dumps(self.body).encode("utf-8")


@dataclass(frozen=True, slots=True)
class Interaction:
    """One recorded request/response example. Immutable."""

    method: str
    path: str
    states: tuple[str, ...]
    response: ResponseDescriptor
    description: str = ""
    source: str = ""

    @property
    def route_key(self) -> RouteKey:
        return RouteKey.of(self.method, self.path)


@dataclass(frozen=True, slots=True)
class Contract:
    """A contract file: one consumer's interactions with one provider."""

    provider: str
    consumer: str
    source: Path
    interactions: tuple[Interaction, ...] = field(default=())


def normalize_states(raw: Mapping[str, Any]) -> tuple[str, ...]:
    """Collect provider-state names from both declaration shapes.

    ``providerState`` (a single name) comes first, followed by the
    ``name`` of each ``providerStates`` entry. Blank and non-string
    names are ignored; duplicates keep their first position.

    >>> normalize_states({"providerState": "a", "providerStates": [{"name": "b"}]})
    ('a', 'b')
    """
    names: list[str] = []

    single = raw.get("providerState")
    if isinstance(single, str) and single.strip():
        names.append(single)

    entries = raw.get("providerStates")
    if isinstance(entries, list):
        for entry in entries:
            if isinstance(entry, Mapping):
                name = entry.get("name")
            elif isinstance(entry, str):
                name = entry
            else:
                continue
            if isinstance(name, str) and name.strip():
                names.append(name)

    return tuple(dict.fromkeys(names))


def _format_query(query: Any) -> str:
    """Render a recorded query (v2 string or v3 mapping of lists) as a query string."""
    if query is None or query == "":
        return ""
    if isinstance(query, str):
        return query.lstrip("?")
    if isinstance(query, Mapping):
        return urlencode(list(query.items()), doseq=True)
    msg = f"query must be a string or an object, got {type(query).__name__}"
    raise TypeError(msg)


def parse_headers(headers: Any) -> tuple[tuple[str, str], ...]:
    """Recorded response headers as ordered pairs.

    Raises ``TypeError`` for a non-object and ``ValueError`` for a name
    or value that cannot be sent on the wire (HTTP headers are latin-1).
    """
    if headers is None:
        return DEFAULT_HEADERS
    if not isinstance(headers, Mapping):
        msg = f"response.headers must be an object, got {type(headers).__name__}"
        raise TypeError(msg)
    pairs = tuple((str(name), str(value)) for name, value in headers.items())
    for name, value in pairs:
        try:
            name.encode("latin-1")
            value.encode("latin-1")
        except UnicodeEncodeError:
            msg = f"header {name!r} is not latin-1 encodable: {value!r}"
            raise ValueError(msg) from None
    return pairs


def parse_interaction(raw: Any, source: object = "<inline>") -> Interaction:
    """Build an ``Interaction`` from its decoded JSON object.

    Raises ``LoadError`` when the object is missing its request method
    or path, or carries fields of the wrong type.
    """
    if not isinstance(raw, Mapping):
        raise LoadError(source, f"interaction must be an object, got {type(raw).__name__}")

    request = raw.get("request")
    response = raw.get("response") or {}
    if not isinstance(request, Mapping):
        raise LoadError(source, "interaction has no 'request' object")
    if not isinstance(response, Mapping):
        raise LoadError(source, "interaction 'response' must be an object")

    method = request.get("method")
    path = request.get("path")
    if not isinstance(method, str) or not method:
        raise LoadError(source, "request.method is missing")
    if not isinstance(path, str) or not path.startswith("/"):
        raise LoadError(source, f"request.path must start with '/', got {path!r}")

    try:
        parse_method(method)
        query = _format_query(request.get("query"))
        headers = parse_headers(response.get("headers"))
        status = int(response.get("status") or 200)
    except (TypeError, ValueError) as exc:
        raise LoadError(source, str(exc)) from exc

    return Interaction(
        method=method.upper(),
        path=f"{path}?{query}" if query else path,
        states=normalize_states(raw),
        response=ResponseDescriptor(
            status=status,
            headers=headers,
            body=response.get("body"),
            has_body="body" in response,
        ),
        description=str(raw.get("description") or ""),
        source=str(source),
    )

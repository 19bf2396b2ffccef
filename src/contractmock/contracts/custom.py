"""Custom routes: interactions declared outside the contract tree.

Custom interactions fill gaps the recorded contracts do not cover
(extra error responses, endpoints not yet under contract). They use the
same JSON shape as a contract file::

    {"interactions": [
        {"providerState": "orders service down",
         "request": {"method": "GET", "path": "/api/v1/orders"},
         "response": {"status": 503, "body": {"error": "unavailable"}}}
    ]}

or are declared in Python with ``MockServer.custom()``.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from contractmock.contracts.interaction import (
    Interaction,
    ResponseDescriptor,
    parse_headers,
)
from contractmock.contracts.loader import parse_interactions
from contractmock.errors import ConfigurationError
from contractmock.routing.route import RouteKey


def load_custom_routes(path: str | Path) -> list[Interaction]:
    """Read a custom-routes JSON file.

    Unlike contract files, a broken custom-routes file is a configuration
    error: the operator named it explicitly.
    """
    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        msg = f"Cannot load custom routes from {file_path}: {exc}"
        raise ConfigurationError(msg) from exc

    if isinstance(data, list):
        raw = data
    elif isinstance(data, Mapping) and isinstance(data.get("interactions"), list):
        raw = data["interactions"]
    else:
        msg = f"Custom routes file {file_path} must be a list or have an 'interactions' list"
        raise ConfigurationError(msg)

    return parse_interactions(raw, file_path)


def custom_interaction(
    method: str,
    path: str,
    *,
    status: int = 200,
    body: Any = None,
    headers: Mapping[str, str] | None = None,
    states: tuple[str, ...] | list[str] | str = (),
    description: str = "",
) -> Interaction:
    """Build a custom interaction in Python.

    Raises ``ConfigurationError`` for an unknown method, a path that
    does not start with ``/``, or a header that is not latin-1.
    """
    if isinstance(states, str):
        states = (states,)
    if not path.startswith("/"):
        msg = f"Custom route path must start with '/', got {path!r}"
        raise ConfigurationError(msg)
    try:
        key = RouteKey.of(method, path)
        response_headers = parse_headers(headers)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(str(exc)) from exc

    return Interaction(
        method=key.method.value,
        path=path,
        states=tuple(dict.fromkeys(s for s in states if s)),
        response=ResponseDescriptor(
            status=status,
            headers=response_headers,
            body=body,
            has_body=body is not None,
        ),
        description=description,
        source="<custom>",
    )

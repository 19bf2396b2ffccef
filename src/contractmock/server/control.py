"""Provider-state control endpoints.

``POST /api/mock-server/state`` selects provider states::

    {"state": "orders exist"}
    {"states": ["orders exist", "products exist"], "path": "/api/v1/orders"}

``POST /api/mock-server/reset`` returns to default selection. Both are
administrative: they never reach the route table.
"""

import json
from collections.abc import Mapping
from typing import Any

from contractmock.errors import MethodNotAllowed, RequestFormatError
from contractmock.http.request import Request
from contractmock.http.response import Response
from contractmock.state import StateRegistry

STATE_PATH = "/api/mock-server/state"
RESET_PATH = "/api/mock-server/reset"
CONTROL_PATHS = frozenset({STATE_PATH, RESET_PATH})

INVALID_FORMAT = (
    'Invalid request format. Expected {"state": "name"} or {"states": ["name1", "name2"]}'
)


def is_control_request(request: Request) -> bool:
    return request.path in CONTROL_PATHS


async def handle_control(request: Request, registry: StateRegistry) -> Response:
    """Dispatch a control request. Raises ``MethodNotAllowed`` for non-POST verbs."""
    if request.method != "POST":
        raise MethodNotAllowed(frozenset({"POST"}))
    if request.path == STATE_PATH:
        return await set_state(request, registry)
    return reset_state(registry)


async def set_state(request: Request, registry: StateRegistry) -> Response:
    """Apply a state selection; malformed bodies get a 400 and change nothing."""
    try:
        names, scope_path = parse_state_request(await request.body())
    except RequestFormatError as exc:
        return Response.json(
            {"error": str(exc), "availableStates": list(registry.list_available())},
            status=400,
        )

    change = registry.set_states(names, scope_path)

    payload: dict[str, Any] = {
        "message": (
            "Provider state(s) set with warnings"
            if change.has_warnings
            else "Provider state(s) set successfully"
        ),
        "validStates": list(change.valid_states),
    }
    if change.has_warnings:
        payload["warnings"] = list(change.warnings)
        payload["availableStates"] = list(registry.list_available())
    return Response.json(payload)


def reset_state(registry: StateRegistry) -> Response:
    registry.reset()
    return Response.json({"message": "Provider states reset to default behavior"})


def parse_state_request(raw: bytes) -> tuple[list[str], str | None]:
    """Extract ``(state names, scope path)`` from a state-request body.

    ``state`` wins over ``states`` when both are present. Raises
    ``RequestFormatError`` for invalid JSON, a non-object body, or a
    body naming no states.
    """
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        msg = f"Invalid JSON: {exc}"
        raise RequestFormatError(msg) from exc

    if not isinstance(data, Mapping):
        raise RequestFormatError(INVALID_FORMAT)

    state = data.get("state")
    states = data.get("states")
    if isinstance(state, str) and state:
        names = [state]
    elif (
        isinstance(states, list)
        and states
        and all(isinstance(name, str) for name in states)
    ):
        names = list(states)
    else:
        raise RequestFormatError(INVALID_FORMAT)

    scope_path = data.get("path")
    if scope_path is not None and not isinstance(scope_path, str):
        raise RequestFormatError(INVALID_FORMAT)

    return names, scope_path or None

"""ASGI handler: translates ASGI scope/messages to contractmock types.

The only component that touches raw ASGI directly. Builds a Request,
routes it to a preflight answer, a control endpoint, or the matching
engine, applies CORS, and sends the Response back through ``send()``.
"""

import logging

from contractmock._internal.asgi import Receive, Scope, Send
from contractmock.errors import HTTPError, NotFound
from contractmock.http.request import Request
from contractmock.http.response import Response
from contractmock.routing.matching import select_variant
from contractmock.routing.route import RouteKey, RouteVariant
from contractmock.routing.table import RouteTable
from contractmock.server.control import handle_control, is_control_request
from contractmock.server.cors import CORSPolicy
from contractmock.server.sender import send_response
from contractmock.state import StateRegistry

logger = logging.getLogger("contractmock.server")

_DEFAULT_CORS = CORSPolicy()


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RouteTable,
    registry: StateRegistry,
    cors: CORSPolicy = _DEFAULT_CORS,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:
        response = await dispatch(request, table=table, registry=registry, cors=cors)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception:
        logger.exception("500 %s %s", request.method, request.target)
        response = Response.json({"error": "Internal Server Error"}, status=500)

    await send_response(cors.apply(response), send)


async def dispatch(
    request: Request,
    *,
    table: RouteTable,
    registry: StateRegistry,
    cors: CORSPolicy = _DEFAULT_CORS,
) -> Response:
    """Route one request. Raises ``HTTPError`` subclasses for 404/405."""
    if request.method == "OPTIONS":
        return cors.preflight()

    if is_control_request(request):
        return await handle_control(request, registry)

    try:
        key = RouteKey.of(request.method, request.target)
    except ValueError:
        raise NotFound() from None

    variant = select_variant(table, key, registry.snapshot())
    if variant is None:
        raise NotFound()

    logger.info("%s %s -> %d", request.method, request.target, variant.response.status)
    return serve_variant(variant)


def serve_variant(variant: RouteVariant) -> Response:
    """The recorded status, headers, and body, unchanged."""
    descriptor = variant.response
    return Response(
        body=descriptor.body_bytes,
        status=descriptor.status,
        headers=descriptor.headers,
    )


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to its JSON error payload."""
    if isinstance(exc, NotFound):
        logger.warning("Route not found: %s %s", request.method, request.target)
    else:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.target, exc.detail)

    response = Response.json({"error": exc.detail or f"Error {exc.status}"}, status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response

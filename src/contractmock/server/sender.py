"""ASGI response sending: translates a Response to ASGI messages."""

from contractmock._internal.asgi import Send
from contractmock.http.response import Response

# Recomputed from the body actually sent
_FRAMING_HEADERS = frozenset({b"content-length", b"transfer-encoding"})


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls.

    Headers go out in the order given; any recorded framing headers are
    replaced with a ``content-length`` matching the body sent.
    """
    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in response.headers:
        raw_name = name.lower().encode("latin-1")
        if raw_name in _FRAMING_HEADERS:
            continue
        raw_headers.append((raw_name, value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )

"""Cross-origin headers.

The mock server is called from browser apps on other origins, so every
response (data, control, and error alike) carries permissive CORS
headers, and every ``OPTIONS`` request is answered as a preflight.
"""

from dataclasses import dataclass

from contractmock.http.response import Response


@dataclass(frozen=True, slots=True)
class CORSPolicy:
    """Cross-origin headers attached to every response.

    Defaults allow any origin, the usual REST verbs, and ``Content-Type``::

        CORSPolicy(allow_origin="http://localhost:5173")
    """

    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type",)

    def headers(self) -> tuple[tuple[str, str], ...]:
        return (
            ("Access-Control-Allow-Origin", self.allow_origin),
            ("Access-Control-Allow-Methods", ", ".join(self.allow_methods)),
            ("Access-Control-Allow-Headers", ", ".join(self.allow_headers)),
        )

    def apply(self, response: Response) -> Response:
        """Return *response* with the CORS headers added.

        Recorded responses may already carry their own CORS headers;
        those are replaced so the policy is the single source.
        """
        names = {name.lower() for name, _ in self.headers()}
        kept = tuple((k, v) for k, v in response.headers if k.lower() not in names)
        return Response(
            body=response.body,
            status=response.status,
            headers=(*self.headers(), *kept),
        )

    def preflight(self) -> Response:
        """The fixed answer to any ``OPTIONS`` request: 204, no body."""
        return self.apply(Response(body=b"", status=204))

"""End-to-end tests for MockServer through the ASGI test client."""

from pathlib import Path

import pytest

from conftest import interaction, write_contract
from contractmock.app import MockServer
from contractmock.config import MockConfig
from contractmock.errors import ConfigurationConflictError
from contractmock.testing import TestClient


class TestScenarios:
    @pytest.mark.asyncio
    async def test_fresh_start_serves_no_state_variant(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.get("/api/v1/orders")
            assert response.status == 200
            assert response.json_body() == []

    @pytest.mark.asyncio
    async def test_set_single_state(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.post("/api/mock-server/state", json={"state": "orders exist"})
            assert response.status == 200
            assert response.json_body() == {
                "message": "Provider state(s) set successfully",
                "validStates": ["orders exist"],
            }

            orders = await client.get("/api/v1/orders")
            assert orders.json_body() == [{"id": 1, "status": "PENDING"}]

    @pytest.mark.asyncio
    async def test_unknown_state_warns(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.post(
                "/api/mock-server/state", json={"state": "nonexistent state"}
            )
            assert response.status == 200
            payload = response.json_body()
            assert payload["message"] == "Provider state(s) set with warnings"
            assert payload["validStates"] == []
            assert payload["warnings"] == [
                "nonexistent state not found in contracts or custom routes"
            ]
            assert "orders exist" in payload["availableStates"]

            orders = await client.get("/api/v1/orders")
            assert orders.json_body() == []

    @pytest.mark.asyncio
    async def test_invalid_format(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            await client.set_state("orders exist")
            response = await client.post("/api/mock-server/state", json={"invalidField": "x"})
            assert response.status == 400
            assert "Invalid request format" in response.json_body()["error"]

            # Registry untouched
            orders = await client.get("/api/v1/orders")
            assert orders.json_body() == [{"id": 1, "status": "PENDING"}]

    @pytest.mark.asyncio
    async def test_multiple_states(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.post(
                "/api/mock-server/state",
                json={"states": ["orders exist", "products exist"]},
            )
            assert len(response.json_body()["validStates"]) == 2

            orders = await client.get("/api/v1/orders")
            products = await client.get("/api/v1/products")
            assert orders.json_body() == [{"id": 1, "status": "PENDING"}]
            assert products.json_body() == [{"id": "p1"}]

    @pytest.mark.asyncio
    async def test_list_shaped_state_declaration(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            await client.set_state("server error")
            response = await client.get("/api/v1/orders")
            assert response.status == 500
            assert response.json_body() == {"error": "boom"}

    @pytest.mark.asyncio
    async def test_state_persists_until_reset(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            await client.set_state("orders exist")
            for _ in range(3):
                response = await client.get("/api/v1/orders")
                assert response.json_body() == [{"id": 1, "status": "PENDING"}]

            reset = await client.reset()
            assert reset.status == 200
            assert reset.json_body() == {"message": "Provider states reset to default behavior"}
            assert (await client.get("/api/v1/orders")).json_body() == []

    @pytest.mark.asyncio
    async def test_scoped_state(self, tmp_path: Path) -> None:
        write_contract(
            tmp_path,
            "svc",
            "ui",
            [
                interaction("GET", "/api/v1/orders", body="orders default"),
                interaction("GET", "/api/v1/orders", body="orders s1", state="s1"),
                interaction("GET", "/api/v1/products", body="products default"),
                interaction("GET", "/api/v1/products", body="products s1", state="s1"),
            ],
        )
        server = MockServer(MockConfig(pacts_dir=tmp_path))
        async with TestClient(server) as client:
            await client.set_state("s1", path="/api/v1/orders")
            assert (await client.get("/api/v1/orders")).json_body() == "orders s1"
            assert (await client.get("/api/v1/products")).json_body() == "products default"

            # Omitting the path clears the scope
            await client.set_state("s1")
            assert (await client.get("/api/v1/products")).json_body() == "products s1"


class TestDataPath:
    @pytest.mark.asyncio
    async def test_recorded_headers_and_status(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.post("/api/v1/orders", json={"productId": "p1"})
            assert response.status == 201
            assert response.header("Content-Type") == "application/json"
            assert response.json_body() == {"id": 2}

    @pytest.mark.asyncio
    async def test_literal_path_only(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            assert (await client.get("/api/v1/orders/999")).status == 404
            assert (await client.get("/api/v1/orders/998")).json_body() == {
                "error": "Not found in Pact contracts or custom routes"
            }

    @pytest.mark.asyncio
    async def test_stateful_only_route_defaults_to_its_variant(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.get("/api/v1/orders/1")
            assert response.status == 200
            assert response.json_body() == {"id": 1}

    @pytest.mark.asyncio
    async def test_unmatched_method(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.delete("/api/v1/products")
            assert response.status == 404

    @pytest.mark.asyncio
    async def test_unknown_verb_is_not_found(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.request("BREW", "/api/v1/orders")
            assert response.status == 404

    @pytest.mark.asyncio
    async def test_no_body_recorded(self, tmp_path: Path) -> None:
        write_contract(
            tmp_path,
            "svc",
            "ui",
            [{"request": {"method": "DELETE", "path": "/api/v1/orders/1"}, "response": {"status": 204}}],
        )
        async with TestClient(MockServer(MockConfig(pacts_dir=tmp_path))) as client:
            response = await client.delete("/api/v1/orders/1")
            assert response.status == 204
            assert response.body == b""
            assert response.header("content-length") == "0"

    @pytest.mark.asyncio
    async def test_percent_encoded_path_matches_recording(self, tmp_path: Path) -> None:
        write_contract(
            tmp_path,
            "svc",
            "ui",
            [interaction("GET", "/api/v1/products/hello%20world", body={"name": "hello world"})],
        )
        server = MockServer(MockConfig(pacts_dir=tmp_path))
        sent: list[dict] = []

        async def receive() -> dict:
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message: dict) -> None:
            sent.append(message)

        scope = {
            "type": "http",
            "method": "GET",
            "path": "/api/v1/products/hello world",
            "raw_path": b"/api/v1/products/hello%20world",
            "query_string": b"",
            "headers": [],
        }
        await server(scope, receive, send)

        assert sent[0]["status"] == 200
        assert sent[1]["body"] == b'{"name": "hello world"}'

    @pytest.mark.asyncio
    async def test_unsendable_recorded_header_skips_interaction(self, tmp_path: Path) -> None:
        write_contract(
            tmp_path,
            "svc",
            "ui",
            [
                {
                    "request": {"method": "GET", "path": "/api/v1/notes"},
                    "response": {"headers": {"X-Note": "café → ok"}, "body": []},
                },
                interaction("GET", "/api/v1/orders", body=[]),
            ],
        )
        async with TestClient(MockServer(MockConfig(pacts_dir=tmp_path))) as client:
            skipped = await client.get("/api/v1/notes")
            assert skipped.status == 404
            assert skipped.header("Access-Control-Allow-Origin") == "*"
            assert (await client.get("/api/v1/orders")).status == 200

    @pytest.mark.asyncio
    async def test_query_string_is_part_of_the_route(self, tmp_path: Path) -> None:
        write_contract(
            tmp_path,
            "svc",
            "ui",
            [
                {
                    "request": {"method": "GET", "path": "/api/v1/orders", "query": "status=open"},
                    "response": {"status": 200, "body": ["open"]},
                }
            ],
        )
        async with TestClient(MockServer(MockConfig(pacts_dir=tmp_path))) as client:
            assert (await client.get("/api/v1/orders?status=open")).json_body() == ["open"]
            assert (await client.get("/api/v1/orders")).status == 404


class TestControlEndpoints:
    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    @pytest.mark.parametrize("path", ["/api/mock-server/state", "/api/mock-server/reset"])
    @pytest.mark.asyncio
    async def test_wrong_verb(self, server: MockServer, method: str, path: str) -> None:
        async with TestClient(server) as client:
            response = await client.request(method, path)
            assert response.status == 405
            assert response.json_body() == {"error": "Method not allowed"}
            assert response.header("Allow") == "POST"

    @pytest.mark.asyncio
    async def test_invalid_json(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.post("/api/mock-server/state", body=b"{oops")
            assert response.status == 400
            payload = response.json_body()
            assert payload["error"].startswith("Invalid JSON: ")
            assert "orders exist" in payload["availableStates"]

    @pytest.mark.asyncio
    async def test_empty_body(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.post("/api/mock-server/state")
            assert response.status == 400

    @pytest.mark.asyncio
    async def test_reset_twice(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            await client.set_state("orders exist")
            await client.reset()
            await client.reset()
            assert server.registry.active_states == ()
            assert (await client.get("/api/v1/orders")).json_body() == []

    @pytest.mark.asyncio
    async def test_control_paths_shadow_recorded_routes(self, tmp_path: Path) -> None:
        write_contract(
            tmp_path,
            "svc",
            "ui",
            [interaction("POST", "/api/mock-server/reset", body="recorded")],
        )
        async with TestClient(MockServer(MockConfig(pacts_dir=tmp_path))) as client:
            response = await client.reset()
            assert response.json_body() == {"message": "Provider states reset to default behavior"}


class TestCORS:
    @pytest.mark.asyncio
    async def test_preflight(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            response = await client.options(
                "/api/v1/orders",
                headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
            )
            assert response.status == 204
            assert response.body == b""
            assert response.header("Access-Control-Allow-Origin") == "*"

    @pytest.mark.asyncio
    async def test_preflight_on_unknown_path(self, server: MockServer) -> None:
        async with TestClient(server) as client:
            assert (await client.options("/nowhere")).status == 204

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/api/v1/orders"),
            ("GET", "/missing"),
            ("GET", "/api/mock-server/state"),
            ("POST", "/api/mock-server/reset"),
        ],
    )
    @pytest.mark.asyncio
    async def test_every_response_has_cors_headers(
        self, server: MockServer, method: str, path: str
    ) -> None:
        async with TestClient(server) as client:
            response = await client.request(method, path)
            assert response.header("Access-Control-Allow-Origin") == "*"
            assert response.header("Access-Control-Allow-Methods") == "GET, POST, PUT, DELETE, OPTIONS"
            assert response.header("Access-Control-Allow-Headers") == "Content-Type"


class TestCustomRoutes:
    @pytest.mark.asyncio
    async def test_custom_route_served(self, server: MockServer) -> None:
        server.custom("GET", "/api/v1/health", body={"status": "ok"})
        async with TestClient(server) as client:
            assert (await client.get("/api/v1/health")).json_body() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_custom_state_is_known(self, server: MockServer) -> None:
        server.custom("GET", "/api/v1/orders", status=503, body="maintenance", states="maintenance")
        async with TestClient(server) as client:
            response = await client.set_state("maintenance")
            assert response.json_body()["validStates"] == ["maintenance"]
            orders = await client.get("/api/v1/orders")
            assert orders.status == 503

    @pytest.mark.asyncio
    async def test_route_decorator(self, server: MockServer) -> None:
        @server.route("/api/v1/version")
        def version() -> dict[str, str]:
            return {"version": "1.2.3"}

        async with TestClient(server) as client:
            assert (await client.get("/api/v1/version")).json_body() == {"version": "1.2.3"}

    @pytest.mark.asyncio
    async def test_custom_routes_file(self, pacts_dir: Path, tmp_path: Path) -> None:
        custom = tmp_path / "custom.json"
        custom.write_text(
            '{"interactions": [{"request": {"method": "GET", "path": "/api/v1/ping"},'
            ' "response": {"body": "pong"}}]}',
            encoding="utf-8",
        )
        server = MockServer(MockConfig(pacts_dir=pacts_dir, custom_routes=custom))
        async with TestClient(server) as client:
            assert (await client.get("/api/v1/ping")).json_body() == "pong"

    @pytest.mark.asyncio
    async def test_conflict_aborts_startup(self, server: MockServer) -> None:
        server.custom("GET", "/api/v1/orders", body="dup", states="orders exist")
        with pytest.raises(ConfigurationConflictError):
            async with TestClient(server):
                pass

    def test_no_custom_routes_after_freeze(self, server: MockServer) -> None:
        server.freeze()
        with pytest.raises(RuntimeError):
            server.custom("GET", "/late")


class TestStartup:
    @pytest.mark.asyncio
    async def test_empty_contract_directory_still_serves_custom(self, tmp_path: Path) -> None:
        server = MockServer(MockConfig(pacts_dir=tmp_path / "missing"))
        server.custom("GET", "/only", body="custom")
        async with TestClient(server) as client:
            assert (await client.get("/only")).json_body() == "custom"
            assert (await client.get("/api/v1/orders")).status == 404

    @pytest.mark.asyncio
    async def test_interactions_supplied_directly(self) -> None:
        from contractmock.contracts.custom import custom_interaction

        server = MockServer(interactions=[custom_interaction("GET", "/direct", body=1)])
        async with TestClient(server) as client:
            assert (await client.get("/direct")).json_body() == 1

    def test_freeze_is_idempotent(self, server: MockServer) -> None:
        server.freeze()
        table = server.table
        server.freeze()
        assert server.table is table

    @pytest.mark.asyncio
    async def test_lifespan_startup_and_shutdown(self, server: MockServer) -> None:
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive() -> dict:
            return next(messages)

        async def send(message: dict) -> None:
            sent.append(message)

        await server({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    @pytest.mark.asyncio
    async def test_lifespan_startup_fails_on_conflict(self, server: MockServer) -> None:
        server.custom("GET", "/api/v1/orders", states="orders exist")
        sent: list[dict] = []

        async def receive() -> dict:
            return {"type": "lifespan.startup"}

        async def send(message: dict) -> None:
            sent.append(message)

        await server({"type": "lifespan"}, receive, send)
        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "orders exist" in sent[0]["message"]

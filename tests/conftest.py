"""Shared fixtures: contract trees written to ``tmp_path``."""

import json
from pathlib import Path
from typing import Any

import pytest

from contractmock.app import MockServer
from contractmock.config import MockConfig


def interaction(
    method: str,
    path: str,
    *,
    status: int = 200,
    body: Any = None,
    state: str | None = None,
    states: list[str] | None = None,
    description: str = "",
) -> dict[str, Any]:
    """A raw Pact interaction object."""
    raw: dict[str, Any] = {
        "description": description or f"{method} {path}",
        "request": {"method": method, "path": path},
        "response": {
            "status": status,
            "headers": {"Content-Type": "application/json"},
            "body": body,
        },
    }
    if state is not None:
        raw["providerState"] = state
    if states is not None:
        raw["providerStates"] = [{"name": name} for name in states]
    return raw


def write_contract(
    root: Path,
    provider: str,
    consumer: str,
    interactions: list[dict[str, Any]],
) -> Path:
    path = root / provider / f"{consumer}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "consumer": {"name": consumer},
                "provider": {"name": provider},
                "interactions": interactions,
            }
        ),
        encoding="utf-8",
    )
    return path


ORDERS = [
    interaction("GET", "/api/v1/orders", body=[]),
    interaction("GET", "/api/v1/orders", body=[{"id": 1, "status": "PENDING"}], state="orders exist"),
    interaction("GET", "/api/v1/orders", status=500, body={"error": "boom"}, states=["server error"]),
    interaction("GET", "/api/v1/orders/1", body={"id": 1}, state="orders exist"),
    interaction("GET", "/api/v1/orders/999", status=404, body={"error": "Order not found"}),
    interaction("POST", "/api/v1/orders", status=201, body={"id": 2}),
    interaction("POST", "/api/v1/orders", status=400, body={"error": "invalid"}, state="invalid order"),
]

PRODUCTS = [
    interaction("GET", "/api/v1/products", body=[]),
    interaction("GET", "/api/v1/products", body=[{"id": "p1"}], state="products exist"),
]


@pytest.fixture
def pacts_dir(tmp_path: Path) -> Path:
    root = tmp_path / "pacts"
    write_contract(root, "wms_order_management", "wms_ui", ORDERS)
    write_contract(root, "wms_inventory_management", "wms_ui", PRODUCTS)
    return root


@pytest.fixture
def server(pacts_dir: Path) -> MockServer:
    return MockServer(MockConfig(pacts_dir=pacts_dir, banner=False))

"""
Integration tests for the orders HTTP API.

The application runs its real lifespan against an in-memory SQLite database.
"""

import io
from unittest.mock import AsyncMock, MagicMock

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from app.api.v1.endpoints.orders import import_orders as import_orders_endpoint
from app.core.config import get_settings
from app.main import create_application
from app.utils.error_handler import InvalidImportFileException

IMPORT_HEADERS = [
    "Nome de usuário (comprador)",
    "ID do pedido",
    "Status",
    "Nome do Produto",
    "Observação do comprador",
    "Quantidade",
]


@pytest.fixture
def client():
    with TestClient(create_application()) as test_client:
        yield test_client


def order_payload(order_number="240101AAA", **overrides):
    payload = {
        "client_name": "Ana",
        "order_number": order_number,
        "status": "pending",
        "items": [{"color": "black", "type": "Roblox", "quantity": 1, "name_to_print": "ANA"}],
    }
    payload.update(overrides)
    return payload


def xlsx_upload(rows):
    buffer = io.BytesIO()
    pd.DataFrame(rows, columns=IMPORT_HEADERS).to_excel(buffer, index=False, engine="openpyxl")
    return {
        "file": (
            "orders.xlsx",
            buffer.getvalue(),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    }


class TestRootEndpoints:
    def test_ping(self, client):
        response = client.get("/ping")

        assert response.status_code == 200
        assert response.json()["message"] == "pong"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["services"]["database"] == "up"

    def test_request_id_header(self, client):
        response = client.get("/ping", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert "X-Process-Time" in response.headers


class TestOrderCrud:
    def test_create_and_get(self, client):
        response = client.post("/api/v1/orders/", json=order_payload())

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        order = body["data"]
        assert order["order_number"] == "240101AAA"
        assert order["items"][0]["name_to_print"] == "ANA"
        assert order["shipping_deadline"] is not None

        fetched = client.get(f"/api/v1/orders/{order['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["data"]["id"] == order["id"]

    def test_status_defaults_to_pending(self, client):
        payload = order_payload()
        del payload["status"]

        response = client.post("/api/v1/orders/", json=payload)

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "pending"

    def test_invalid_order_is_rejected(self, client):
        response = client.post("/api/v1/orders/", json=order_payload(items=[]))

        assert response.status_code == 422
        body = response.json()
        assert body["error_type"] == "validation_error"
        assert body["field"] == "items"

    def test_zero_quantity_is_rejected(self, client):
        items = [{"color": "black", "type": "Roblox", "quantity": 0}]

        response = client.post("/api/v1/orders/", json=order_payload(items=items))

        assert response.status_code == 422
        assert response.json()["field"] == "items[0].quantity"

    def test_duplicate_order_number(self, client):
        client.post("/api/v1/orders/", json=order_payload())

        response = client.post("/api/v1/orders/", json=order_payload(client_name="Other"))

        assert response.status_code == 409
        assert response.json()["constraint"] == "order_number"

    def test_get_unknown_order(self, client):
        response = client.get("/api/v1/orders/does-not-exist")

        assert response.status_code == 404
        assert response.json()["order_id"] == "does-not-exist"

    def test_partial_update(self, client):
        created = client.post("/api/v1/orders/", json=order_payload()).json()["data"]

        response = client.put(f"/api/v1/orders/{created['id']}", json={"status": "ready"})

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["status"] == "ready"
        assert updated["client_name"] == "Ana"
        assert updated["items"] == created["items"]

    def test_update_unknown_order(self, client):
        response = client.put("/api/v1/orders/missing", json={"status": "ready"})

        assert response.status_code == 404

    def test_delete(self, client):
        created = client.post("/api/v1/orders/", json=order_payload()).json()["data"]

        response = client.delete(f"/api/v1/orders/{created['id']}")

        assert response.status_code == 200
        assert response.json()["data"]["deleted"] is True
        assert client.delete(f"/api/v1/orders/{created['id']}").status_code == 404


class TestListOrders:
    def test_pagination_flags(self, client):
        for i in range(15):
            client.post("/api/v1/orders/", json=order_payload(order_number=f"N{i:02d}"))

        response = client.get("/api/v1/orders/", params={"page": 2, "page_size": 10})

        data = response.json()["data"]
        assert data["total"] == 15
        assert len(data["orders"]) == 5
        assert data["has_next_page"] is False
        assert data["has_previous_page"] is True

    def test_filters(self, client):
        client.post("/api/v1/orders/", json=order_payload(order_number="A1", status="to_do"))
        client.post("/api/v1/orders/", json=order_payload(order_number="B2"))

        response = client.get("/api/v1/orders/", params={"status": "to_do"})

        data = response.json()["data"]
        assert data["total"] == 1
        assert data["orders"][0]["order_number"] == "A1"

    def test_empty_filters_list_everything(self, client):
        client.post("/api/v1/orders/", json=order_payload(order_number="A1"))

        response = client.get("/api/v1/orders/", params={"order_number": "", "status": ""})

        assert response.status_code == 200
        assert response.json()["data"]["total"] == 1

    def test_invalid_page(self, client):
        response = client.get("/api/v1/orders/", params={"page": 0})

        assert response.status_code == 422
        assert response.json()["field"] == "page"

    def test_unparseable_page(self, client):
        response = client.get("/api/v1/orders/", params={"page": "two"})

        assert response.status_code == 422

    def test_status_counts(self, client):
        client.post("/api/v1/orders/", json=order_payload(order_number="A1"))
        client.post("/api/v1/orders/", json=order_payload(order_number="B2", status="ready"))

        response = client.get("/api/v1/orders/status-counts")

        assert response.status_code == 200
        assert response.json()["data"] == {"pending": 1, "to_do": 0, "design_done": 0, "ready": 1}


class TestImport:
    def test_import_groups_rows_and_reports_duplicates(self, client):
        client.post("/api/v1/orders/", json=order_payload(order_number="EXISTING"))
        rows = [
            ["ana_b", "A1", "A enviar", "Camiseta Roblox", "Ana", 1],
            ["ana_b", "A1", "A enviar", "Caneca Barbie", "", 2],
            ["bia_c", "EXISTING", "A enviar", "Caneca", "", 1],
            ["caio_d", "C3", "A enviar", "Chaveiro", "", 3],
        ]

        response = client.post("/api/v1/orders/import", files=xlsx_upload(rows))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["inserted_count"] == 2
        assert data["failed_count"] == 1
        assert data["failed"][0]["index"] == 1
        assert data["failed"][0]["order_number"] == "EXISTING"

        first = data["inserted"][0]
        assert first["order_number"] == "A1"
        assert first["status"] == "to_do"
        assert [item["type"] for item in first["items"]] == ["Roblox", "Barbie"]

    def test_invalid_rows_abort_import(self, client):
        rows = [
            ["ana_b", "A1", "A enviar", "Camiseta Roblox", "", 1],
            ["bia_c", "B2", "A enviar", "Caneca", "", 0],
        ]

        response = client.post("/api/v1/orders/import", files=xlsx_upload(rows))

        assert response.status_code == 422
        listing = client.get("/api/v1/orders/").json()["data"]
        assert listing["total"] == 0

    def test_wrong_extension(self, client):
        files = {"file": ("orders.csv", b"a,b\n1,2\n", "text/csv")}

        response = client.post("/api/v1/orders/import", files=files)

        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_import_file"

    def test_oversized_file_is_rejected(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "IMPORT_MAX_FILE_SIZE_MB", 1)
        files = {"file": ("orders.xlsx", b"0" * (1024 * 1024 + 1), "application/octet-stream")}

        response = client.post("/api/v1/orders/import", files=files)

        assert response.status_code == 400
        assert "1 MB limit" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_declared_size_is_checked_before_reading(self):
        upload = MagicMock(filename="orders.xlsx", size=get_settings().import_max_file_size_bytes + 1)
        upload.read = AsyncMock(return_value=b"")
        service = MagicMock()

        with pytest.raises(InvalidImportFileException):
            await import_orders_endpoint(file=upload, service=service)

        upload.read.assert_not_awaited()
        service.import_orders.assert_not_called()

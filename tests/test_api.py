"""Tests for FastAPI endpoints."""

import io
from uuid import uuid4

import pytest
from httpx import Client
from openpyxl import load_workbook  # type: ignore[import-untyped]

from invoice_manager.api.app import create_app
from invoice_manager.api.routes import get_app_container
from invoice_manager.container import Container
from invoice_manager.repositories.sqlite import SQLiteDatabase


@pytest.fixture
def test_container() -> Container:
    """Create a container over an in-memory database shared across threads."""
    return Container(database=SQLiteDatabase(":memory:", check_same_thread=False))


@pytest.fixture
def test_client(test_container: Container) -> Client:
    """Create a test client with the test container."""
    from starlette.testclient import TestClient

    app = create_app()
    app.dependency_overrides[get_app_container] = lambda: test_container

    return TestClient(app)


def invoice_payload(**overrides) -> dict:
    payload = {
        "invoice_number": "INV-001",
        "issuer_name": "Your Business Name LLC",
        "issuer_address": "123 Business Ave, New York, NY 10001",
        "client_name": "Acme Corp",
        "issue_date": "2025-03-14",
        "due_date": "2025-04-13",
        "items": [
            {
                "product_name": "Consulting",
                "quantity": "2",
                "unit_price": "100",
                "taxes": [{"tax_name": "VAT", "tax_rate": "20"}],
            }
        ],
    }
    payload.update(overrides)
    return payload


def receipt_payload(**overrides) -> dict:
    payload = {
        "receipt_number": "RCP-001",
        "issuer_name": "Your Business Name LLC",
        "issue_date": "2025-03-14",
        "payment_method": "card",
        "items": [
            {
                "product_name": "Coffee Beans",
                "quantity": "3",
                "unit_price": "12.50",
                "taxes": [
                    {"tax_name": "Sales Tax", "tax_rate": "8.5"},
                    {"tax_name": "City Tax", "tax_rate": "2.5"},
                ],
            }
        ],
    }
    payload.update(overrides)
    return payload


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_check_returns_ok(self, test_client: Client) -> None:
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_request_id_is_echoed(self, test_client: Client) -> None:
        response = test_client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    def test_request_id_is_generated(self, test_client: Client) -> None:
        response = test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8


class TestProductEndpoints:
    """Tests for /products endpoints."""

    def test_create_product_returns_201(self, test_client: Client) -> None:
        payload = {
            "name": "Web Development",
            "default_price": "1500",
            "taxes": [
                {"tax_name": "VAT", "tax_rate": "20", "is_default": True},
                {"tax_name": "City Tax", "tax_rate": "2.5"},
            ],
        }
        response = test_client.post("/products", json=payload)
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Web Development"
        assert data["default_price"] == "1500"
        assert [t["tax_rate"] for t in data["taxes"]] == ["20", "2.5"]

    def test_two_default_taxes_returns_422(self, test_client: Client) -> None:
        payload = {
            "name": "Widget",
            "taxes": [
                {"tax_name": "VAT", "tax_rate": "20", "is_default": True},
                {"tax_name": "GST", "tax_rate": "15", "is_default": True},
            ],
        }
        response = test_client.post("/products", json=payload)
        assert response.status_code == 422
        assert response.json()["error"] == "MULTIPLE_DEFAULT_TAXES"

    def test_list_update_delete(self, test_client: Client) -> None:
        product_id = test_client.post("/products", json={"name": "Widget"}).json()["id"]

        response = test_client.put(
            f"/products/{product_id}", json={"name": "Gadget", "default_price": "5"}
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Gadget"

        names = [p["name"] for p in test_client.get("/products").json()]
        assert names == ["Gadget"]

        assert test_client.delete(f"/products/{product_id}").status_code == 204
        assert test_client.get(f"/products/{product_id}").status_code == 404

    def test_get_missing_product_returns_404(self, test_client: Client) -> None:
        response = test_client.get(f"/products/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "PRODUCT_NOT_FOUND"

    def test_prefilled_line_item(self, test_client: Client) -> None:
        payload = {
            "name": "Consulting",
            "default_price": "100",
            "taxes": [{"tax_name": "VAT", "tax_rate": "20", "is_default": True}],
        }
        product_id = test_client.post("/products", json=payload).json()["id"]

        response = test_client.get(
            f"/products/{product_id}/line-item", params={"quantity": "2"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["product_id"] == product_id
        assert data["subtotal"] == "200"
        assert data["tax_amount"] == "40"
        assert data["line_total"] == "240"


class TestInvoiceEndpoints:
    """Tests for /invoices endpoints."""

    def test_create_invoice_returns_201(self, test_client: Client) -> None:
        response = test_client.post("/invoices", json=invoice_payload())
        assert response.status_code == 201
        data = response.json()
        assert data["invoice_number"] == "INV-001"
        assert data["status"] == "draft"
        assert data["subtotal"] == "200"
        assert data["total_tax"] == "40"
        assert data["total"] == "240"
        item = data["items"][0]
        assert item["line_total"] == "240"
        assert item["taxes"][0]["tax_rate"] == "20"
        assert item["taxes"][0]["tax_amount"] == "40"

    def test_client_supplied_totals_are_ignored(self, test_client: Client) -> None:
        payload = invoice_payload()
        payload["total"] = "99999"
        payload["items"][0]["line_total"] = "1"

        response = test_client.post("/invoices", json=payload)
        assert response.status_code == 201
        assert response.json()["total"] == "240"

    def test_duplicate_number_returns_409(self, test_client: Client) -> None:
        test_client.post("/invoices", json=invoice_payload())

        response = test_client.post(
            "/invoices", json=invoice_payload(client_name="Other Client")
        )
        assert response.status_code == 409
        data = response.json()
        assert data["error"] == "DUPLICATE_DOCUMENT_NUMBER"
        assert data["retryable"] is True

        invoices = test_client.get("/invoices").json()
        assert len(invoices) == 1
        assert invoices[0]["client_name"] == "Acme Corp"

    def test_empty_items_returns_422(self, test_client: Client) -> None:
        response = test_client.post("/invoices", json=invoice_payload(items=[]))
        assert response.status_code == 422
        assert response.json()["error"] == "EMPTY_DOCUMENT"
        assert test_client.get("/invoices").json() == []

    def test_zero_quantity_returns_422(self, test_client: Client) -> None:
        payload = invoice_payload()
        payload["items"][0]["quantity"] = "0"

        response = test_client.post("/invoices", json=payload)
        assert response.status_code == 422
        assert response.json()["error"] == "INVALID_LINE_ITEM"

    def test_unknown_product_returns_422(self, test_client: Client) -> None:
        product_id = str(uuid4())
        payload = invoice_payload()
        payload["items"][0]["product_id"] = product_id

        response = test_client.post("/invoices", json=payload)
        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "UNKNOWN_PRODUCT"
        assert data["context"]["product_id"] == product_id
        assert test_client.get("/invoices").json() == []

    def test_invalid_status_returns_422(self, test_client: Client) -> None:
        response = test_client.post("/invoices", json=invoice_payload(status="void"))
        assert response.status_code == 422

    def test_next_number(self, test_client: Client) -> None:
        assert test_client.get("/invoices/next-number").json() == {
            "next_number": "INV-001"
        }

        test_client.post("/invoices", json=invoice_payload(invoice_number="INV-041"))

        assert test_client.get("/invoices/next-number").json() == {
            "next_number": "INV-042"
        }

    def test_update_replaces_items(self, test_client: Client) -> None:
        invoice_id = test_client.post("/invoices", json=invoice_payload()).json()["id"]
        payload = invoice_payload(
            items=[
                {"product_name": "A", "quantity": "1", "unit_price": "10"},
                {"product_name": "B", "quantity": "1", "unit_price": "5"},
            ]
        )

        response = test_client.put(f"/invoices/{invoice_id}", json=payload)
        assert response.status_code == 200

        data = test_client.get(f"/invoices/{invoice_id}").json()
        assert [item["product_name"] for item in data["items"]] == ["A", "B"]
        assert data["total"] == "15"

    def test_update_missing_returns_404(self, test_client: Client) -> None:
        response = test_client.put(f"/invoices/{uuid4()}", json=invoice_payload())
        assert response.status_code == 404

    def test_set_status(self, test_client: Client) -> None:
        invoice_id = test_client.post("/invoices", json=invoice_payload()).json()["id"]

        response = test_client.patch(
            f"/invoices/{invoice_id}/status", json={"status": "paid"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        assert response.json()["total"] == "240"

    def test_delete_invoice(self, test_client: Client, test_container: Container) -> None:
        invoice_id = test_client.post("/invoices", json=invoice_payload()).json()["id"]

        assert test_client.delete(f"/invoices/{invoice_id}").status_code == 204
        assert test_client.get(f"/invoices/{invoice_id}").status_code == 404
        assert test_container.database.count_rows("invoice_items") == 0
        assert test_container.database.count_rows("invoice_item_taxes") == 0

    def test_export_pdf(self, test_client: Client) -> None:
        invoice_id = test_client.post("/invoices", json=invoice_payload()).json()["id"]

        response = test_client.get(f"/invoices/{invoice_id}/export/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "invoice-INV-001.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_export_xlsx(self, test_client: Client) -> None:
        invoice_id = test_client.post("/invoices", json=invoice_payload()).json()["id"]

        response = test_client.get(f"/invoices/{invoice_id}/export/xlsx")
        assert response.status_code == 200
        workbook = load_workbook(io.BytesIO(response.content))
        assert workbook.sheetnames == ["Invoice Details", "Line Items"]

    def test_export_unknown_format_returns_422(self, test_client: Client) -> None:
        invoice_id = test_client.post("/invoices", json=invoice_payload()).json()["id"]

        response = test_client.get(f"/invoices/{invoice_id}/export/docx")
        assert response.status_code == 422


class TestReceiptEndpoints:
    """Tests for /receipts endpoints."""

    def test_create_receipt_with_two_taxes(self, test_client: Client) -> None:
        response = test_client.post("/receipts", json=receipt_payload())
        assert response.status_code == 201
        data = response.json()
        assert data["payment_method"] == "card"
        assert data["subtotal"] == "37.5"
        assert [t["tax_amount"] for t in data["items"][0]["taxes"]] == [
            "3.1875",
            "0.9375",
        ]
        assert data["total"] == "41.625"

    def test_default_payment_method(self, test_client: Client) -> None:
        response = test_client.post(
            "/receipts", json=receipt_payload(payment_method=None)
        )
        assert response.status_code == 201
        assert response.json()["payment_method"] == "cash"

    def test_receipt_does_not_need_client(self, test_client: Client) -> None:
        payload = receipt_payload()
        assert "client_name" not in payload

        response = test_client.post("/receipts", json=payload)
        assert response.status_code == 201

    def test_receipts_and_invoices_number_independently(
        self, test_client: Client
    ) -> None:
        test_client.post("/invoices", json=invoice_payload())

        assert test_client.get("/receipts/next-number").json()["next_number"] == (
            "RCP-001"
        )

    def test_export_receipt_pdf(self, test_client: Client) -> None:
        receipt_id = test_client.post("/receipts", json=receipt_payload()).json()["id"]

        response = test_client.get(f"/receipts/{receipt_id}/export/pdf")
        assert response.status_code == 200
        assert "receipt-RCP-001.pdf" in response.headers["content-disposition"]

    def test_delete_missing_receipt_returns_404(self, test_client: Client) -> None:
        response = test_client.delete(f"/receipts/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "DOCUMENT_NOT_FOUND"


class TestAnalyticsEndpoints:
    """Tests for /analytics endpoints."""

    def test_summary(self, test_client: Client) -> None:
        test_client.post("/invoices", json=invoice_payload())
        test_client.post("/receipts", json=receipt_payload())

        response = test_client.get("/analytics/summary")
        assert response.status_code == 200
        data = response.json()
        assert data["invoice_revenue"] == "240"
        assert data["receipt_revenue"] == "41.625"
        assert data["total_revenue"] == "281.625"
        assert data["revenue_by_month"] == {"2025-03": "281.625"}
        assert data["invoice_status_counts"]["draft"] == 1

    def test_inverted_window_returns_422(self, test_client: Client) -> None:
        response = test_client.get(
            "/analytics/summary",
            params={"start_date": "2025-03-01", "end_date": "2025-01-01"},
        )
        assert response.status_code == 422

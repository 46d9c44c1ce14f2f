"""
Tests for the HTTP API (`api/`).

Covers the endpoint wiring and the error mapping:
ValidationError -> 422, NotFoundError -> 404, InsufficientStockError -> 409,
PersistenceError -> 502.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from api.main import app
from domain.size import Size, SizeInventory


@pytest.fixture
def client(store, monkeypatch) -> TestClient:
    monkeypatch.setattr("services.sale_service.SALE_WRITE_STRATEGY", "atomic")
    return TestClient(app)


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_record_sale_endpoint(client, store) -> None:
    product = store.add_product(inventory=SizeInventory(m=3))

    response = client.post(
        "/api/v1/sales",
        json={
            "product_id": str(product.product_id),
            "size": "M",
            "quantity": 2,
            "discount": {"amount": "200"},
            "payment_mode": "UPI",
            "customer_mobile": "9876543210",
            "customer_name": "Asha Rao",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert Decimal(body["sale"]["sale_amount"]) == Decimal("1798")
    assert Decimal(body["sale"]["charity_amount"]) == Decimal("79.80")
    assert body["sale"]["product_sku"] == "TEE-001"
    assert body["product"]["size_inventory"]["M"] == 1
    assert Decimal(body["customer"]["total_spent"]) == Decimal("1798")


def test_record_sale_error_mapping(client, store) -> None:
    product = store.add_product(inventory=SizeInventory(m=3))
    payload = {"product_id": str(product.product_id), "size": "M", "quantity": 5}

    assert client.post("/api/v1/sales", json=payload).status_code == 409

    payload["quantity"] = 2
    payload["discount"] = {"amount": "2500"}
    assert client.post("/api/v1/sales", json=payload).status_code == 422

    payload["discount"] = {"amount": "10", "percentage": "5"}
    assert client.post("/api/v1/sales", json=payload).status_code == 422

    payload["discount"] = {"amount": "0.005"}
    assert client.post("/api/v1/sales", json=payload).status_code == 422

    payload["product_id"] = "00000000-0000-0000-0000-000000000099"
    payload.pop("discount")
    assert client.post("/api/v1/sales", json=payload).status_code == 404

    assert store.sales == {}


def test_unknown_size_is_rejected(client, store) -> None:
    product = store.add_product()

    response = client.post(
        "/api/v1/sales",
        json={"product_id": str(product.product_id), "size": "S", "quantity": 1},
    )

    assert response.status_code == 422


def test_persistence_failure_is_502(client, store) -> None:
    product = store.add_product()
    store.fail_on.add("record_sale_atomic")

    response = client.post(
        "/api/v1/sales",
        json={"product_id": str(product.product_id), "size": "M", "quantity": 1},
    )

    assert response.status_code == 502


def test_delete_sale_endpoint_restores_stock(client, store) -> None:
    product = store.add_product(inventory=SizeInventory(m=3))
    created = client.post(
        "/api/v1/sales",
        json={"product_id": str(product.product_id), "size": "M", "quantity": 2},
    ).json()

    response = client.delete(f"/api/v1/sales/{created['sale']['sale_id']}")

    assert response.status_code == 200
    assert response.json()["restored_quantity"] == 2
    assert store.products[product.product_id].stock_for(Size.M) == 3

    missing = client.delete(f"/api/v1/sales/{created['sale']['sale_id']}")
    assert missing.status_code == 404


def test_export_sales_csv(client, store) -> None:
    product = store.add_product(inventory=SizeInventory(m=3))
    client.post(
        "/api/v1/sales",
        json={"product_id": str(product.product_id), "size": "M", "quantity": 1},
    )
    today = next(iter(store.sales.values())).sale_date.date().isoformat()

    response = client.get(f"/api/v1/sales/export?start={today}&end={today}")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert f"sales_{today}_to_{today}.csv" in response.headers["content-disposition"]
    assert response.text.splitlines()[1].startswith('"TEE-001","Logo Tee","M","1"')


def test_export_empty_range_is_404(client, store) -> None:
    response = client.get("/api/v1/sales/export?start=2025-01-01&end=2025-01-31")

    assert response.status_code == 404
    assert response.json()["detail"] == "No sales found for the selected date range"


def test_product_endpoints(client, store) -> None:
    created = client.post(
        "/api/v1/products",
        json={
            "name": "Logo Hoodie",
            "sku": "HOOD-001",
            "category": "Hoodie",
            "cost_price": "900",
            "selling_price": "1999",
            "charity_percentage": "15",
            "size_inventory": {"M": 1, "L": 0, "XL": 0, "XXL": 0},
        },
    )
    assert created.status_code == 201
    product_id = created.json()["product_id"]

    restocked = client.post(f"/api/v1/products/{product_id}/restock", json={"additions": {"L": 4}})
    assert restocked.status_code == 200
    assert restocked.json()["size_inventory"] == {"M": 1, "L": 4, "XL": 0, "XXL": 0}

    empty_restock = client.post(f"/api/v1/products/{product_id}/restock", json={"additions": {}})
    assert empty_restock.status_code == 422

    quote = client.post(f"/api/v1/products/{product_id}/quote", json={"size": "L", "quantity": 2})
    assert quote.status_code == 200
    assert Decimal(quote.json()["breakdown"]["subtotal"]) == Decimal("3998")
    assert quote.json()["in_stock"] is True

    patched = client.patch(f"/api/v1/products/{product_id}", json={"selling_price": "2199"})
    assert Decimal(patched.json()["selling_price"]) == Decimal("2199")

    assert client.delete(f"/api/v1/products/{product_id}").status_code == 204
    listed = client.get("/api/v1/products", params={"active_only": True}).json()
    assert listed == []


def test_customer_endpoints(client, store) -> None:
    created = client.post("/api/v1/customers", json={"name": "Asha Rao", "mobile": "98765 43210"})
    assert created.status_code == 201
    assert created.json()["mobile"] == "9876543210"

    duplicate = client.post("/api/v1/customers", json={"name": "Other", "mobile": "9876543210"})
    assert duplicate.status_code == 422

    found = client.get("/api/v1/customers/lookup", params={"mobile": "9876543210"})
    assert found.json()["customer_id"] == created.json()["customer_id"]
    assert client.get("/api/v1/customers/lookup", params={"mobile": "9000000000"}).status_code == 404

    history = client.get(f"/api/v1/customers/{created.json()['customer_id']}/history")
    assert history.status_code == 200
    assert history.json()["sales_count"] == 0


def test_expense_and_report_endpoints(client, store) -> None:
    created = client.post(
        "/api/v1/expenses",
        json={"category": "Fabric", "amount": "1200", "expense_date": "2025-01-15"},
    )
    assert created.status_code == 201

    assert client.post(
        "/api/v1/expenses",
        json={"category": "Fabric", "amount": "0", "expense_date": "2025-01-15"},
    ).status_code == 422

    listed = client.get("/api/v1/expenses").json()
    assert Decimal(listed["total"]) == Decimal("1200")
    assert Decimal(listed["by_category"]["Fabric"]) == Decimal("1200")

    summary = client.get("/api/v1/reports/financial-summary").json()
    assert Decimal(summary["net_profit"]) == Decimal("-1200")

    store.add_product(inventory=SizeInventory())
    alerts = client.get("/api/v1/reports/stock-alerts").json()
    assert len(alerts["out_of_stock"]) == 1

    assert client.get("/api/v1/reports/charity").status_code == 200
    assert client.get("/api/v1/reports/inventory-lifetime").json()["lifetime_units"] == 0

    expense_id = created.json()["expense_id"]
    assert client.delete(f"/api/v1/expenses/{expense_id}").status_code == 204
    assert client.delete(f"/api/v1/expenses/{expense_id}").status_code == 404

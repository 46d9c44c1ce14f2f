"""
Tests for the Supabase glue in `repositories/`.

The module-level `supabase` client is replaced with a stub query builder that
records every builder call, so these tests check:
- `execute` turns APIError / httpx errors / response errors into PersistenceError.
- The sale Postgres function results are normalised, including JSON bodies that
  supabase-py delivers inside APIError.
- Conditional updates filter on every expected value.
- Legacy sale rows without a subtotal still parse.
"""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from typing import Any, List, Optional, Tuple
from uuid import UUID

import httpx
import pytest
from postgrest.exceptions import APIError

from domain.errors import PersistenceError
from domain.size import Size, SizeInventory
from repositories import client, customer_repository, product_repository, sale_repository

PRODUCT_ID = UUID("00000000-0000-0000-0000-000000000001")
CUSTOMER_ID = UUID("00000000-0000-0000-0000-000000000002")
SALE_ID = UUID("00000000-0000-0000-0000-000000000003")


class StubQuery:
    """Records builder calls; `execute` returns `data` or raises `error`."""

    def __init__(self, data: Any = None, error: Optional[Exception] = None) -> None:
        self.data = data
        self.error = error
        self.calls: List[Tuple[str, tuple]] = []

    def __getattr__(self, name: str):
        def method(*args, **kwargs):
            self.calls.append((name, args))
            return self

        return method

    def execute(self):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=self.data)

    def filters(self) -> List[tuple]:
        return [args for name, args in self.calls if name == "eq"]


class StubClient:
    def __init__(self, query: StubQuery) -> None:
        self.query = query
        self.tables: List[str] = []
        self.rpcs: List[Tuple[str, dict]] = []

    def table(self, name: str) -> StubQuery:
        self.tables.append(name)
        return self.query

    def rpc(self, function: str, params: dict) -> StubQuery:
        self.rpcs.append((function, params))
        return self.query


@pytest.fixture
def stub(monkeypatch):
    def install(module, data: Any = None, error: Optional[Exception] = None) -> StubClient:
        fake = StubClient(StubQuery(data=data, error=error))
        monkeypatch.setattr(module, "supabase", fake)
        return fake

    return install


def _sale_row(**overrides) -> dict:
    row = {
        "id": str(SALE_ID),
        "product_id": str(PRODUCT_ID),
        "customer_id": str(CUSTOMER_ID),
        "quantity": 2,
        "size": "M",
        "unit_price": "999.00",
        "subtotal": "1998.00",
        "discount_amount": "200.00",
        "sale_amount": "1798.00",
        "cost_amount": "1000.00",
        "profit": "798.00",
        "charity_percentage": "10.00",
        "charity_amount": "79.80",
        "payment_mode": "UPI",
        "sale_mode": "Offline",
        "sale_date": "2025-01-15T10:30:00+00:00",
        "created_at": "2025-01-15T10:30:01+00:00",
    }
    row.update(overrides)
    return row


def test_execute_wraps_api_error_with_the_database_message() -> None:
    query = StubQuery(error=APIError({"message": "duplicate key value violates unique constraint", "code": "23505"}))

    with pytest.raises(PersistenceError) as exc_info:
        client.execute(query, "record sale")

    assert str(exc_info.value) == "Failed to record sale: duplicate key value violates unique constraint"
    assert isinstance(exc_info.value.__cause__, APIError)


def test_execute_wraps_transport_errors() -> None:
    query = StubQuery(error=httpx.ConnectTimeout("timed out"))

    with pytest.raises(PersistenceError, match="Failed to list sales: timed out"):
        client.execute(query, "list sales")


def test_execute_checks_the_response_error_attribute() -> None:
    query = StubQuery()
    query.execute = lambda: SimpleNamespace(data=None, error="permission denied")  # type: ignore[method-assign]

    with pytest.raises(PersistenceError, match="permission denied"):
        client.execute(query, "get product")


def test_rows_of_normalises_single_objects() -> None:
    assert client.rows_of(SimpleNamespace(data={"id": 1})) == [{"id": 1}]
    assert client.rows_of(SimpleNamespace(data=None)) == []


def test_atomic_success_body_inside_api_error(stub) -> None:
    fake = stub(sale_repository, error=APIError({"success": True, "sale_id": str(SALE_ID)}))

    result = sale_repository.delete_sale_atomic(SALE_ID)

    assert result.success is True
    assert result.sale_id == SALE_ID
    assert fake.rpcs == [("delete_sale_atomic", {"p_sale_id": str(SALE_ID)})]


def test_atomic_error_body_inside_api_error(stub) -> None:
    stub(
        sale_repository,
        error=APIError(
            {"success": False, "error": "INSUFFICIENT_STOCK", "message": "Insufficient stock for size M", "available": 1}
        ),
    )

    result = sale_repository.delete_sale_atomic(SALE_ID)

    assert result.success is False
    assert result.error_code == "INSUFFICIENT_STOCK"
    assert result.available == 1


def test_atomic_database_error_keeps_postgres_code(stub) -> None:
    stub(sale_repository, error=APIError({"code": "23514", "message": "violates check constraint"}))

    result = sale_repository.delete_sale_atomic(SALE_ID)

    assert result.success is False
    assert result.error_code == "23514"
    assert result.error_message == "violates check constraint"


def test_atomic_transport_error_is_rpc_error(stub) -> None:
    stub(sale_repository, error=httpx.ReadTimeout("read timed out"))

    result = sale_repository.delete_sale_atomic(SALE_ID)

    assert result.error_code == "RPC_ERROR"
    assert "read timed out" in result.error_message


def test_atomic_plain_and_list_bodies(stub) -> None:
    stub(sale_repository, data={"success": False, "error": "SALE_NOT_FOUND", "message": "Sale not found"})
    assert sale_repository.delete_sale_atomic(SALE_ID).error_code == "SALE_NOT_FOUND"

    stub(sale_repository, data=[{"success": True, "sale_id": str(SALE_ID)}])
    assert sale_repository.delete_sale_atomic(SALE_ID).sale_id == SALE_ID


def test_record_sale_atomic_prefixes_every_parameter(stub) -> None:
    fake = stub(sale_repository, data={"success": True, "sale_id": str(SALE_ID)})
    sale = sale_repository._row_to_sale(_sale_row())

    sale_repository.record_sale_atomic(sale)

    function, params = fake.rpcs[0]
    assert function == "record_sale_atomic"
    assert all(key.startswith("p_") for key in params)
    assert params["p_size"] == "M"
    assert params["p_sale_amount"] == "1798.00"


def test_sale_row_without_subtotal_is_derived(stub) -> None:
    legacy = _sale_row(subtotal=None)
    no_discount = _sale_row(subtotal=None, discount_amount=None, sale_amount="1998.00", profit="998.00")

    assert sale_repository._row_to_sale(legacy).subtotal == Decimal("1998.00")
    stub(sale_repository, data=[no_discount])
    sale = sale_repository.get_sale_by_id(SALE_ID)
    assert sale.subtotal == Decimal("1998.00")
    assert sale.discount_amount == Decimal("0")


def test_get_sale_by_id_missing_returns_none(stub) -> None:
    stub(sale_repository, data=[])

    assert sale_repository.get_sale_by_id(SALE_ID) is None


def test_compare_and_set_inventory_filters_every_size(stub) -> None:
    fake = stub(product_repository, data=[{"id": str(PRODUCT_ID)}])

    updated = product_repository.compare_and_set_inventory(
        PRODUCT_ID, SizeInventory(m=3, l=5, xl=2), SizeInventory(m=1, l=5, xl=2)
    )

    assert updated is True
    assert fake.query.filters() == [
        ("id", str(PRODUCT_ID)),
        ("size_inventory->>M", "3"),
        ("size_inventory->>L", "5"),
        ("size_inventory->>XL", "2"),
        ("size_inventory->>XXL", "0"),
    ]
    payload = next(args[0] for name, args in fake.query.calls if name == "update")
    assert payload["size_inventory"] == {"M": 1, "L": 5, "XL": 2, "XXL": 0}
    assert len(fake.query.filters()) == 1 + len(Size)


def test_compare_and_set_inventory_conflict(stub) -> None:
    stub(product_repository, data=[])

    assert product_repository.compare_and_set_inventory(PRODUCT_ID, SizeInventory(), SizeInventory(m=1)) is False


def test_compare_and_set_totals_filters_expected_totals(stub) -> None:
    fake = stub(customer_repository, data=[])

    updated = customer_repository.compare_and_set_totals(
        CUSTOMER_ID,
        expected_spent=Decimal("1798.00"),
        expected_charity=Decimal("79.80"),
        total_spent=Decimal("0.00"),
        total_charity=Decimal("0.00"),
    )

    assert updated is False
    assert fake.query.filters() == [
        ("id", str(CUSTOMER_ID)),
        ("total_spent", "1798.00"),
        ("total_charity", "79.80"),
    ]


def test_repository_failure_surfaces_as_persistence_error(stub) -> None:
    stub(product_repository, error=APIError({"message": "relation \"products\" does not exist"}))

    with pytest.raises(PersistenceError, match="does not exist"):
        product_repository.get_product_by_id(PRODUCT_ID)

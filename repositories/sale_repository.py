"""
Sale repository (persistence).

This module provides persistence operations for the SaleRecord domain entity:
plain inserts/fetches/deletes used by the stepwise sale writer and reports, and
the wrappers around the `record_sale_atomic` / `delete_sale_atomic` Postgres
functions (migrations/002_sale_functions.sql) used by the atomic writer.

It does not compute prices or enforce stock rules; those live in domain/ and
services/sale_service.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping, Optional
from uuid import UUID

import httpx
from postgrest.exceptions import APIError

from domain.sale import PaymentMode, SaleMode, SaleRecord
from domain.size import Size
from domain.time import parse_optional_utc_datetime, parse_utc_datetime, to_iso_utc
from repositories.client import execute, rows_of, supabase

logger = logging.getLogger(__name__)

# Supabase table name for sale records.
# Keep this aligned with your database schema.
_SALES_TABLE: str = "sales"

_DETAILS_SELECT: str = "*, customer:customers(name), product:products(name, sku)"


@dataclass(frozen=True, slots=True)
class SaleWithDetails:
    """A sale joined with the display fields of its product and customer."""

    sale: SaleRecord
    product_name: Optional[str]
    product_sku: Optional[str]
    customer_name: Optional[str]


@dataclass(frozen=True, slots=True)
class AtomicSaleResult:
    """Result from the record_sale_atomic / delete_sale_atomic Postgres functions."""

    success: bool
    sale_id: Optional[UUID]
    error_code: Optional[str]
    error_message: Optional[str]
    available: Optional[int] = None


def _money(value: Any) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _row_to_sale(row: Mapping[str, Any]) -> SaleRecord:
    """Convert a Supabase row into a SaleRecord."""

    customer_id = row.get("customer_id")
    sale_amount = _money(row["sale_amount"])
    # Rows written before discounts existed carry no subtotal/discount columns.
    discount_amount = _money(row.get("discount_amount"))
    subtotal = _money(row["subtotal"]) if row.get("subtotal") is not None else sale_amount + discount_amount

    return SaleRecord(
        sale_id=UUID(str(row["id"])),
        product_id=UUID(str(row["product_id"])),
        customer_id=UUID(str(customer_id)) if customer_id else None,
        quantity=int(row["quantity"]),
        size=Size.parse(row["size"]),
        unit_price=_money(row["unit_price"]),
        subtotal=subtotal,
        discount_amount=discount_amount,
        sale_amount=sale_amount,
        cost_amount=_money(row["cost_amount"]),
        profit=_money(row["profit"]),
        charity_percentage=_money(row.get("charity_percentage")),
        charity_amount=_money(row.get("charity_amount")),
        payment_mode=PaymentMode(str(row["payment_mode"])),
        sale_mode=SaleMode(str(row.get("sale_mode") or SaleMode.OFFLINE.value)),
        sale_date=parse_utc_datetime(row["sale_date"]),
        customer_email=row.get("customer_email"),
        created_by=row.get("created_by"),
        created_at=parse_optional_utc_datetime(row.get("created_at")),
    )


def _row_to_details(row: Mapping[str, Any]) -> SaleWithDetails:
    product = row.get("product") or {}
    customer = row.get("customer") or {}
    return SaleWithDetails(
        sale=_row_to_sale(row),
        product_name=product.get("name"),
        product_sku=product.get("sku"),
        customer_name=customer.get("name"),
    )


def _sale_payload(sale: SaleRecord) -> dict[str, Any]:
    return {
        "id": str(sale.sale_id),
        "product_id": str(sale.product_id),
        "customer_id": str(sale.customer_id) if sale.customer_id else None,
        "quantity": sale.quantity,
        "size": sale.size.value,
        "unit_price": str(sale.unit_price),
        "subtotal": str(sale.subtotal),
        "discount_amount": str(sale.discount_amount),
        "sale_amount": str(sale.sale_amount),
        "cost_amount": str(sale.cost_amount),
        "profit": str(sale.profit),
        "charity_percentage": str(sale.charity_percentage),
        "charity_amount": str(sale.charity_amount),
        "payment_mode": sale.payment_mode.value,
        "sale_mode": sale.sale_mode.value,
        "customer_email": sale.customer_email,
        "created_by": sale.created_by,
        "sale_date": to_iso_utc(sale.sale_date, name="sale_date"),
    }


def insert_sale(sale: SaleRecord) -> SaleRecord:
    """
    Insert a sale row exactly as computed.

    Returns:
        SaleRecord as stored (created_at filled in)
    """

    now = datetime.now(timezone.utc)
    payload = _sale_payload(sale)
    payload["created_at"] = now.isoformat()

    response = execute(supabase.table(_SALES_TABLE).insert(payload), "record sale")
    rows = rows_of(response)
    if rows:
        return _row_to_sale(rows[0])
    return _row_to_sale(payload)


def delete_sale_row(sale_id: UUID) -> bool:
    """
    Delete a sale row.

    Returns:
        True if a row was deleted, False if it did not exist.
    """

    response = execute(
        supabase.table(_SALES_TABLE).delete().eq("id", str(sale_id)),
        "delete sale",
    )
    return bool(rows_of(response))


def get_sale_by_id(sale_id: UUID) -> Optional[SaleRecord]:
    """
    Retrieve a single sale record by its ID.

    Returns:
        SaleRecord or None if not found
    """

    response = execute(
        supabase.table(_SALES_TABLE).select("*").eq("id", str(sale_id)).limit(1),
        "get sale",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_sale(rows[0])


def list_recent_sales(limit: int = 50) -> List[SaleWithDetails]:
    """Most recent sales first, joined with product and customer names."""

    response = execute(
        supabase.table(_SALES_TABLE)
        .select(_DETAILS_SELECT)
        .order("sale_date", desc=True)
        .limit(limit),
        "list sales",
    )
    return [_row_to_details(row) for row in rows_of(response)]


def list_sales_between(start: datetime, end: datetime) -> List[SaleWithDetails]:
    """
    Sales with start <= sale_date <= end, oldest first.

    Args:
        start: UTC lower bound (inclusive)
        end: UTC upper bound (inclusive)
    """

    response = execute(
        supabase.table(_SALES_TABLE)
        .select(_DETAILS_SELECT)
        .gte("sale_date", to_iso_utc(start, name="start"))
        .lte("sale_date", to_iso_utc(end, name="end"))
        .order("sale_date"),
        "list sales",
    )
    return [_row_to_details(row) for row in rows_of(response)]


def list_all_sales() -> List[SaleWithDetails]:
    """Every sale, joined with product and customer names (used by reports)."""

    response = execute(
        supabase.table(_SALES_TABLE).select(_DETAILS_SELECT).order("sale_date"),
        "list sales",
    )
    return [_row_to_details(row) for row in rows_of(response)]


def list_sales_by_customer(customer_id: UUID) -> List[SaleWithDetails]:
    """
    Retrieve all sales for a given customer (purchase history), newest first.
    """

    response = execute(
        supabase.table(_SALES_TABLE)
        .select(_DETAILS_SELECT)
        .eq("customer_id", str(customer_id))
        .order("sale_date", desc=True),
        "list sales",
    )
    return [_row_to_details(row) for row in rows_of(response)]


def _parse_atomic_result(data: Mapping[str, Any]) -> AtomicSaleResult:
    if data.get("success"):
        sale_id = data.get("sale_id")
        return AtomicSaleResult(
            success=True,
            sale_id=UUID(str(sale_id)) if sale_id else None,
            error_code=None,
            error_message=None,
        )
    available = data.get("available")
    return AtomicSaleResult(
        success=False,
        sale_id=None,
        error_code=data.get("error"),
        error_message=data.get("message"),
        available=int(available) if available is not None else None,
    )


def _call_atomic(function: str, params: dict[str, Any]) -> AtomicSaleResult:
    """
    Call a sale Postgres function and normalise its JSON status.

    Transport and database failures are reported as RPC_ERROR / API_ERROR
    results; business failures carry the function's own error code
    (PRODUCT_NOT_FOUND, INSUFFICIENT_STOCK, SALE_NOT_FOUND, ...).
    """

    try:
        response = supabase.rpc(function, params).execute()
    except APIError as e:
        # Supabase-py raises APIError when the function's JSON body does not look
        # like a PostgREST payload, for success and error bodies alike.
        error_data = e.json() if callable(getattr(e, "json", None)) else {}
        if not isinstance(error_data, dict):
            error_data = {}
        if "success" in error_data:
            return _parse_atomic_result(error_data)
        return AtomicSaleResult(
            success=False,
            sale_id=None,
            error_code=error_data.get("code") or "API_ERROR",
            error_message=error_data.get("message") or str(e),
        )
    except httpx.HTTPError as e:
        logger.error(f"{function} call failed", extra={"function": function, "error": str(e)})
        return AtomicSaleResult(
            success=False,
            sale_id=None,
            error_code="RPC_ERROR",
            error_message=str(e),
        )

    error = getattr(response, "error", None)
    if error:
        return AtomicSaleResult(
            success=False,
            sale_id=None,
            error_code="RPC_ERROR",
            error_message=str(error),
        )

    data = getattr(response, "data", None) or {}
    if isinstance(data, list):
        data = data[0] if data else {}
    return _parse_atomic_result(data)


def record_sale_atomic(sale: SaleRecord) -> AtomicSaleResult:
    """
    Execute the whole sale write via the record_sale_atomic() Postgres function.

    The function, in a single transaction:
    - Locks the product row (FOR UPDATE)
    - Checks size_inventory[size] >= quantity and decrements it
    - Inserts the sale row
    - Adds sale_amount / charity_amount to the customer's totals
    """

    payload = _sale_payload(sale)
    params = {f"p_{key}": value for key, value in payload.items()}
    return _call_atomic("record_sale_atomic", params)


def delete_sale_atomic(sale_id: UUID) -> AtomicSaleResult:
    """
    Reverse a sale via the delete_sale_atomic() Postgres function.

    Restores stock, subtracts the customer's totals (floored at zero) and removes
    the sale row in a single transaction.
    """

    return _call_atomic("delete_sale_atomic", {"p_sale_id": str(sale_id)})


__all__ = [
    "AtomicSaleResult",
    "SaleWithDetails",
    "insert_sale",
    "delete_sale_row",
    "get_sale_by_id",
    "list_recent_sales",
    "list_sales_between",
    "list_all_sales",
    "list_sales_by_customer",
    "record_sale_atomic",
    "delete_sale_atomic",
]

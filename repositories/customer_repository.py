"""
Customer repository for managing customer records.

Provides functions to query, create and update customers, including the
conditional update of lifetime totals used by the stepwise sale writer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.customer import Customer
from domain.errors import NotFoundError
from domain.time import parse_optional_utc_datetime
from repositories.client import execute, rows_of, supabase

_CUSTOMERS_TABLE: str = "customers"


def _row_to_customer(row: Mapping[str, Any]) -> Customer:
    return Customer(
        customer_id=UUID(str(row["id"])),
        name=str(row["name"]),
        mobile=str(row["mobile"]),
        email=row.get("email"),
        total_spent=row.get("total_spent") or 0,
        total_charity=row.get("total_charity") or 0,
        created_at=parse_optional_utc_datetime(row.get("created_at")),
        updated_at=parse_optional_utc_datetime(row.get("updated_at")),
    )


def get_customer_by_id(customer_id: UUID) -> Optional[Customer]:
    """
    Get a customer by their ID.

    Returns:
        Customer domain model or None if not found
    """
    response = execute(
        supabase.table(_CUSTOMERS_TABLE).select("*").eq("id", str(customer_id)).limit(1),
        "fetch customer",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_customer(rows[0])


def get_customer_by_mobile(mobile: str) -> Optional[Customer]:
    """
    Get a customer by mobile number (the point-of-sale lookup key).

    Example:
        customer = get_customer_by_mobile("9876543210")
    """
    response = execute(
        supabase.table(_CUSTOMERS_TABLE).select("*").eq("mobile", mobile).limit(1),
        "fetch customer",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_customer(rows[0])


def list_customers() -> List[Customer]:
    response = execute(
        supabase.table(_CUSTOMERS_TABLE).select("*").order("total_spent", desc=True),
        "list customers",
    )
    return [_row_to_customer(row) for row in rows_of(response)]


def insert_customer(name: str, mobile: str, email: Optional[str] = None) -> Customer:
    """
    Create a customer with zero totals.

    Returns:
        Created Customer domain model
    """
    customer_id = uuid4()
    now = datetime.now(timezone.utc)

    payload = {
        "id": str(customer_id),
        "name": name,
        "mobile": mobile,
        "email": email,
        "total_spent": "0",
        "total_charity": "0",
        "created_at": now.isoformat(),
        "updated_at": now.isoformat(),
    }

    response = execute(supabase.table(_CUSTOMERS_TABLE).insert(payload), "create customer")
    rows = rows_of(response)
    if rows:
        return _row_to_customer(rows[0])

    return Customer(
        customer_id=customer_id,
        name=name,
        mobile=mobile,
        email=email,
        created_at=now,
        updated_at=now,
    )


def update_customer_details(
    customer_id: UUID,
    *,
    name: str,
    mobile: str,
    email: Optional[str],
) -> Customer:
    """Edit contact details. Lifetime totals are not touched here."""

    response = execute(
        supabase.table(_CUSTOMERS_TABLE)
        .update(
            {
                "name": name,
                "mobile": mobile,
                "email": email,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        .eq("id", str(customer_id)),
        "update customer",
    )
    rows = rows_of(response)
    if not rows:
        raise NotFoundError("Customer", customer_id)
    return _row_to_customer(rows[0])


def compare_and_set_totals(
    customer_id: UUID,
    *,
    expected_spent: Decimal,
    expected_charity: Decimal,
    total_spent: Decimal,
    total_charity: Decimal,
) -> bool:
    """
    Write new lifetime totals only if the stored totals are still the expected ones.

    Returns:
        True if the row was updated, False if another writer changed the totals
        (or the customer no longer exists).
    """

    response = execute(
        supabase.table(_CUSTOMERS_TABLE)
        .update(
            {
                "total_spent": str(total_spent),
                "total_charity": str(total_charity),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        .eq("id", str(customer_id))
        .eq("total_spent", str(expected_spent))
        .eq("total_charity", str(expected_charity)),
        "update customer totals",
    )
    return bool(rows_of(response))


__all__ = [
    "get_customer_by_id",
    "get_customer_by_mobile",
    "list_customers",
    "insert_customer",
    "update_customer_details",
    "compare_and_set_totals",
]

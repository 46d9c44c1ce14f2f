"""
Customer service.

Handles:
- Point-of-sale lookup by mobile and find-or-create for new customers
- Customer creation and contact edits
- Lifetime total updates (conditional, re-validated once on conflict)
- Purchase history with per-day grouping
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from domain.customer import WALK_IN_CUSTOMER_NAME, Customer, normalize_mobile
from domain.errors import NotFoundError, PersistenceError, ValidationError
from repositories.customer_repository import (
    compare_and_set_totals,
    get_customer_by_id,
    get_customer_by_mobile,
    insert_customer,
    update_customer_details,
)
from repositories.sale_repository import SaleWithDetails, list_sales_by_customer

logger = logging.getLogger(__name__)

_MAX_ATTEMPTS = 2


@dataclass(frozen=True, slots=True)
class CustomerHistory:
    customer: Customer
    sales: List[SaleWithDetails]
    total_revenue: Decimal
    total_charity: Decimal
    sales_by_day: Dict[date, List[SaleWithDetails]]


def require_customer(customer_id: UUID) -> Customer:
    customer = get_customer_by_id(customer_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


def find_customer(mobile: str) -> Optional[Customer]:
    return get_customer_by_mobile(normalize_mobile(mobile))


def create_customer(name: str, mobile: str, email: Optional[str] = None) -> Customer:
    """
    Create a customer explicitly (outside of a sale).

    Raises:
        ValidationError: missing name, or a customer with this mobile already exists
    """
    if not name or not name.strip():
        raise ValidationError("Customer name is required")
    key = normalize_mobile(mobile)
    if get_customer_by_mobile(key) is not None:
        raise ValidationError(f"A customer with mobile {key} already exists")
    return insert_customer(name.strip(), key, email or None)


def resolve_customer(
    mobile: Optional[str],
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> Optional[Customer]:
    """
    Find the customer for a sale, creating a minimal record when needed.

    Returns None for an anonymous (walk-in) sale without contact info.
    """
    if not mobile or not mobile.strip():
        return None

    key = normalize_mobile(mobile)
    existing = get_customer_by_mobile(key)
    if existing is not None:
        return existing

    customer = insert_customer((name or "").strip() or WALK_IN_CUSTOMER_NAME, key, email or None)
    logger.info("Customer created at point of sale", extra={"customer_id": str(customer.customer_id)})
    return customer


def update_customer(
    customer_id: UUID,
    *,
    name: str,
    mobile: str,
    email: Optional[str] = None,
) -> Customer:
    if not name or not name.strip():
        raise ValidationError("Customer name is required")
    key = normalize_mobile(mobile)
    other = get_customer_by_mobile(key)
    if other is not None and other.customer_id != customer_id:
        raise ValidationError(f"A customer with mobile {key} already exists")
    return update_customer_details(customer_id, name=name.strip(), mobile=key, email=email or None)


def apply_customer_totals(customer_id: UUID, amount_delta: Decimal, charity_delta: Decimal) -> Customer:
    """
    Add signed deltas to a customer's lifetime totals (each floored at zero).

    Returns:
        Customer with its updated totals
    """
    for attempt in range(1, _MAX_ATTEMPTS + 1):
        customer = require_customer(customer_id)
        updated = customer.apply_totals_delta(amount_delta, charity_delta)
        if compare_and_set_totals(
            customer_id,
            expected_spent=customer.total_spent,
            expected_charity=customer.total_charity,
            total_spent=updated.total_spent,
            total_charity=updated.total_charity,
        ):
            return updated
        logger.warning(
            "Customer totals changed concurrently, re-reading customer",
            extra={"customer_id": str(customer_id), "attempt": attempt},
        )

    raise PersistenceError(
        f"Failed to update customer totals: customer {customer_id} kept changing concurrently, please retry"
    )


def get_customer_history(customer_id: UUID) -> CustomerHistory:
    """Customer with all their sales (newest first) and totals recomputed from them."""

    customer = require_customer(customer_id)
    sales = list_sales_by_customer(customer_id)

    by_day: Dict[date, List[SaleWithDetails]] = OrderedDict()
    for item in sales:
        by_day.setdefault(item.sale.sale_date.date(), []).append(item)

    return CustomerHistory(
        customer=customer,
        sales=sales,
        total_revenue=sum((s.sale.sale_amount for s in sales), Decimal("0")),
        total_charity=sum((s.sale.charity_amount for s in sales), Decimal("0")),
        sales_by_day=by_day,
    )


__all__ = [
    "CustomerHistory",
    "apply_customer_totals",
    "create_customer",
    "find_customer",
    "get_customer_history",
    "require_customer",
    "resolve_customer",
    "update_customer",
]

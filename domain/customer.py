"""
Domain: Customer accounts and lifetime totals.

Customers are looked up by mobile number at the point of sale and created with
a minimal record when no match exists.

Rules implemented here:
- total_spent and total_charity reflect the sum of the customer's non-deleted
  sales and never go negative.
- Ledger updates floor each total at zero and return a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from .errors import ValidationError
from .pricing import to_decimal
from .time import require_utc_timestamp

WALK_IN_CUSTOMER_NAME = "Walk-in Customer"

_ZERO = Decimal("0")


def normalize_mobile(mobile: str) -> str:
    """Strip spaces and dashes; the remaining value is the lookup key."""

    cleaned = "".join(ch for ch in str(mobile) if ch not in " -")
    if not cleaned:
        raise ValidationError("mobile is required")
    return cleaned


@dataclass(frozen=True, slots=True)
class Customer:
    """Customer with cumulative spend and charity totals."""

    customer_id: UUID
    name: str
    mobile: str
    email: Optional[str] = None
    total_spent: Decimal = _ZERO
    total_charity: Decimal = _ZERO
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        spent = to_decimal(self.total_spent, "total_spent")
        charity = to_decimal(self.total_charity, "total_charity")
        if spent < _ZERO:
            raise ValidationError("total_spent must be >= 0")
        if charity < _ZERO:
            raise ValidationError("total_charity must be >= 0")
        object.__setattr__(self, "total_spent", spent)
        object.__setattr__(self, "total_charity", charity)

        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def apply_totals_delta(self, amount_delta: Decimal, charity_delta: Decimal) -> "Customer":
        """
        Return a new Customer with the deltas applied, each floored at zero.

        Positive deltas on sale creation, negated deltas on sale deletion.
        """

        return replace(
            self,
            total_spent=max(_ZERO, self.total_spent + to_decimal(amount_delta, "amount delta")),
            total_charity=max(_ZERO, self.total_charity + to_decimal(charity_delta, "charity delta")),
        )


__all__ = ["Customer", "WALK_IN_CUSTOMER_NAME", "normalize_mobile"]

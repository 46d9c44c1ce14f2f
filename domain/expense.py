"""
Domain: business expenses.

Expenses are standalone records; they feed the financial summary
(net profit = revenue - expenses) and have no relationship to sales.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from .errors import ValidationError
from .pricing import to_decimal
from .time import require_utc_timestamp


class ExpenseCategory(str, Enum):
    FABRIC = "Fabric"
    STITCHING = "Stitching"
    MARKETING = "Marketing"
    LOGISTICS = "Logistics"
    MISC = "Misc"


@dataclass(frozen=True, slots=True)
class Expense:
    expense_id: UUID
    category: ExpenseCategory
    amount: Decimal
    expense_date: date
    notes: Optional[str] = None
    invoice_url: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount, "amount")
        if amount <= 0:
            raise ValidationError("Expense amount must be greater than 0")
        object.__setattr__(self, "amount", amount)

        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)


__all__ = ["Expense", "ExpenseCategory"]

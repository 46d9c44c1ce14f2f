"""
Expense service.

Records business expenses and summarises them by month and category for the
financial widgets.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional
from uuid import UUID, uuid4

from domain.errors import NotFoundError, ValidationError
from domain.expense import Expense, ExpenseCategory
from domain.time import parse_date
from repositories.expense_repository import (
    get_expense_by_id,
    insert_expense,
    update_expense,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExpenseSummary:
    total: Decimal
    month_total: Decimal
    by_category: Dict[str, Decimal]


def parse_expense_category(value: Any) -> ExpenseCategory:
    if isinstance(value, ExpenseCategory):
        return value
    try:
        return ExpenseCategory(str(value))
    except ValueError:
        allowed = ", ".join(c.value for c in ExpenseCategory)
        raise ValidationError(f"Invalid expense category: {value!r}. Expected one of: {allowed}") from None


def _parse_expense_date(value: Any) -> date:
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid expense date: {value!r}") from None


def require_expense(expense_id: UUID) -> Expense:
    expense = get_expense_by_id(expense_id)
    if expense is None:
        raise NotFoundError("Expense", expense_id)
    return expense


def create_expense(
    *,
    category: Any,
    amount: Decimal,
    expense_date: Any,
    notes: Optional[str] = None,
    invoice_url: Optional[str] = None,
    created_by: Optional[str] = None,
) -> Expense:
    expense = insert_expense(
        Expense(
            expense_id=uuid4(),
            category=parse_expense_category(category),
            amount=amount,
            expense_date=_parse_expense_date(expense_date),
            notes=notes or None,
            invoice_url=invoice_url or None,
            created_by=created_by,
        )
    )
    logger.info(
        "Expense recorded",
        extra={"expense_id": str(expense.expense_id), "amount": str(expense.amount)},
    )
    return expense


def update_expense_details(
    expense_id: UUID,
    *,
    category: Any,
    amount: Decimal,
    expense_date: Any,
    notes: Optional[str] = None,
    invoice_url: Optional[str] = None,
) -> Expense:
    current = require_expense(expense_id)
    return update_expense(
        Expense(
            expense_id=current.expense_id,
            category=parse_expense_category(category),
            amount=amount,
            expense_date=_parse_expense_date(expense_date),
            notes=notes or None,
            invoice_url=invoice_url or None,
            created_by=current.created_by,
            created_at=current.created_at,
        )
    )


def summarize_expenses(expenses: Iterable[Expense], as_of: date) -> ExpenseSummary:
    """Overall total, the total for the calendar month of `as_of`, and per-category totals."""

    total = Decimal("0")
    month_total = Decimal("0")
    by_category: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for expense in expenses:
        total += expense.amount
        by_category[expense.category.value] += expense.amount
        if (expense.expense_date.year, expense.expense_date.month) == (as_of.year, as_of.month):
            month_total += expense.amount
    return ExpenseSummary(total=total, month_total=month_total, by_category=dict(by_category))


__all__ = [
    "ExpenseSummary",
    "create_expense",
    "parse_expense_category",
    "require_expense",
    "summarize_expenses",
    "update_expense_details",
]

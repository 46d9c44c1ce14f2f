"""
Expense repository (persistence).

Plain CRUD over the `expenses` table.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.errors import NotFoundError
from domain.expense import Expense, ExpenseCategory
from domain.time import parse_date, parse_optional_utc_datetime
from repositories.client import execute, rows_of, supabase

_EXPENSES_TABLE: str = "expenses"


def _row_to_expense(row: Mapping[str, Any]) -> Expense:
    return Expense(
        expense_id=UUID(str(row["id"])),
        category=ExpenseCategory(str(row["category"])),
        amount=row["amount"],
        expense_date=parse_date(row["expense_date"]),
        notes=row.get("notes"),
        invoice_url=row.get("invoice_url"),
        created_by=row.get("created_by"),
        created_at=parse_optional_utc_datetime(row.get("created_at")),
        updated_at=parse_optional_utc_datetime(row.get("updated_at")),
    )


def _expense_payload(expense: Expense) -> dict[str, Any]:
    return {
        "category": expense.category.value,
        "amount": str(expense.amount),
        "expense_date": expense.expense_date.isoformat(),
        "notes": expense.notes,
        "invoice_url": expense.invoice_url,
    }


def get_expense_by_id(expense_id: UUID) -> Optional[Expense]:
    response = execute(
        supabase.table(_EXPENSES_TABLE).select("*").eq("id", str(expense_id)).limit(1),
        "fetch expense",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_expense(rows[0])


def list_expenses(start: Optional[date] = None, end: Optional[date] = None) -> List[Expense]:
    """
    List expenses, newest first, optionally within [start, end] (inclusive dates).
    """

    query = supabase.table(_EXPENSES_TABLE).select("*")
    if start is not None:
        query = query.gte("expense_date", start.isoformat())
    if end is not None:
        query = query.lte("expense_date", end.isoformat())
    response = execute(query.order("expense_date", desc=True), "list expenses")
    return [_row_to_expense(row) for row in rows_of(response)]


def insert_expense(expense: Expense) -> Expense:
    now = datetime.now(timezone.utc)
    payload = _expense_payload(expense)
    payload.update(
        {
            "id": str(uuid4()),
            "created_by": expense.created_by,
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
        }
    )
    response = execute(supabase.table(_EXPENSES_TABLE).insert(payload), "create expense")
    rows = rows_of(response)
    return _row_to_expense(rows[0] if rows else payload)


def update_expense(expense: Expense) -> Expense:
    payload = _expense_payload(expense)
    payload["updated_at"] = datetime.now(timezone.utc).isoformat()
    response = execute(
        supabase.table(_EXPENSES_TABLE).update(payload).eq("id", str(expense.expense_id)),
        "update expense",
    )
    rows = rows_of(response)
    if not rows:
        raise NotFoundError("Expense", expense.expense_id)
    return _row_to_expense(rows[0])


def delete_expense(expense_id: UUID) -> None:
    response = execute(
        supabase.table(_EXPENSES_TABLE).delete().eq("id", str(expense_id)),
        "delete expense",
    )
    if not rows_of(response):
        raise NotFoundError("Expense", expense_id)


__all__ = [
    "get_expense_by_id",
    "list_expenses",
    "insert_expense",
    "update_expense",
    "delete_expense",
]

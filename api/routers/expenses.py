"""
Expenses API Endpoints.
"""

from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Response

from api.errors import to_http_exception
from api.models import ExpenseListResponse, ExpenseRequest, ExpenseResponse
from repositories.expense_repository import delete_expense, list_expenses
from services.expense_service import (
    create_expense,
    require_expense,
    summarize_expenses,
    update_expense_details,
)

router = APIRouter()


@router.get(
    "/expenses",
    response_model=ExpenseListResponse,
    summary="List Expenses",
    description="Expenses newest first, optionally within a date range, with totals."
)
def get_expenses(start: Optional[date] = None, end: Optional[date] = None):
    try:
        expenses = list_expenses(start, end)
        summary = summarize_expenses(expenses, datetime.now(timezone.utc).date())
        return ExpenseListResponse(
            items=[ExpenseResponse.from_domain(e) for e in expenses],
            total=summary.total,
            month_total=summary.month_total,
            by_category=summary.by_category,
        )
    except Exception as e:
        raise to_http_exception(e, "list expenses") from e


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse, summary="Get Expense")
def get_expense(expense_id: UUID):
    try:
        return ExpenseResponse.from_domain(require_expense(expense_id))
    except Exception as e:
        raise to_http_exception(e, "fetch expense") from e


@router.post("/expenses", response_model=ExpenseResponse, status_code=201, summary="Record Expense")
def post_expense(request: ExpenseRequest):
    try:
        expense = create_expense(
            category=request.category,
            amount=request.amount,
            expense_date=request.expense_date,
            notes=request.notes,
            invoice_url=request.invoice_url,
            created_by=request.created_by,
        )
        return ExpenseResponse.from_domain(expense)
    except Exception as e:
        raise to_http_exception(e, "create expense") from e


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse, summary="Update Expense")
def put_expense(expense_id: UUID, request: ExpenseRequest):
    try:
        expense = update_expense_details(
            expense_id,
            category=request.category,
            amount=request.amount,
            expense_date=request.expense_date,
            notes=request.notes,
            invoice_url=request.invoice_url,
        )
        return ExpenseResponse.from_domain(expense)
    except Exception as e:
        raise to_http_exception(e, "update expense") from e


@router.delete("/expenses/{expense_id}", status_code=204, summary="Delete Expense")
def remove_expense(expense_id: UUID):
    try:
        delete_expense(expense_id)
    except Exception as e:
        raise to_http_exception(e, "delete expense") from e
    return Response(status_code=204)

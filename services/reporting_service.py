"""
Reporting service for the dashboard.

Computes charity impact, financial summary and product performance from the
stored sales, products and expenses. All figures are recomputed from the rows;
nothing here writes.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from domain.pricing import round_cents
from domain.time import month_range_utc
from repositories.expense_repository import list_expenses
from repositories.product_repository import list_products
from repositories.sale_repository import SaleWithDetails, list_all_sales

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

UNKNOWN_PRODUCT = "Unknown"


@dataclass(frozen=True, slots=True)
class ProductAmount:
    product_id: UUID
    name: str
    units: int
    amount: Decimal


@dataclass(frozen=True, slots=True)
class CharityReport:
    """
    Charity impact figures.

    share_of_profit: total_charity as a percentage of total_profit (0 when there
    is no profit). month_growth: this month vs last month, in percent (None when
    last month had no charity).
    """
    total_revenue: Decimal
    total_profit: Decimal
    total_charity: Decimal
    this_month_charity: Decimal
    last_month_charity: Decimal
    share_of_profit: Decimal
    month_growth: Optional[Decimal]
    top_products: List[ProductAmount]


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    total_revenue: Decimal
    total_profit: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    total_charity: Decimal
    sales_count: int
    expenses_by_category: Dict[str, Decimal]


@dataclass(frozen=True, slots=True)
class LifetimeStock:
    """Units currently held, units sold, and their sum (lifetime stock)."""
    current_units: int
    sold_units: int

    @property
    def lifetime_units(self) -> int:
        return self.current_units + self.sold_units


def _total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, _ZERO)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= _ZERO:
        return _ZERO
    return round_cents(part / whole * _HUNDRED)


def _in_range(item: SaleWithDetails, start: datetime, end: datetime) -> bool:
    return start <= item.sale.sale_date <= end


def rank_products(
    sales: Iterable[SaleWithDetails],
    *,
    by: str = "revenue",
    limit: int = 5,
) -> List[ProductAmount]:
    """
    Group sales by product and rank them by `by` ("revenue" or "charity").
    """
    if by not in ("revenue", "charity"):
        raise ValueError(f"Unknown ranking '{by}'")

    amounts: Dict[UUID, Decimal] = defaultdict(lambda: _ZERO)
    units: Dict[UUID, int] = defaultdict(int)
    names: Dict[UUID, str] = {}
    for item in sales:
        pid = item.sale.product_id
        amounts[pid] += item.sale.sale_amount if by == "revenue" else item.sale.charity_amount
        units[pid] += item.sale.quantity
        names.setdefault(pid, item.product_name or UNKNOWN_PRODUCT)

    ranked = sorted(amounts.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [
        ProductAmount(product_id=pid, name=names[pid], units=units[pid], amount=amount)
        for pid, amount in ranked
    ]


def build_charity_report(
    sales: List[SaleWithDetails],
    as_of: datetime,
    top: int = 5,
) -> CharityReport:
    """Pure computation of the charity report (see get_charity_report)."""

    this_start, this_end = month_range_utc(as_of)
    last_start, last_end = month_range_utc(as_of, months_back=1)

    total_profit = _total(s.sale.profit for s in sales)
    total_charity = _total(s.sale.charity_amount for s in sales)
    this_month = _total(s.sale.charity_amount for s in sales if _in_range(s, this_start, this_end))
    last_month = _total(s.sale.charity_amount for s in sales if _in_range(s, last_start, last_end))

    growth = None
    if last_month > _ZERO:
        growth = round_cents((this_month - last_month) / last_month * _HUNDRED)

    return CharityReport(
        total_revenue=_total(s.sale.sale_amount for s in sales),
        total_profit=total_profit,
        total_charity=total_charity,
        this_month_charity=this_month,
        last_month_charity=last_month,
        share_of_profit=_percentage(total_charity, total_profit),
        month_growth=growth,
        top_products=rank_products(sales, by="charity", limit=top),
    )


def get_charity_report(as_of: Optional[datetime] = None, top: int = 5) -> CharityReport:
    """
    Charity impact across all sales.

    Example:
        report = get_charity_report()
        print(f"Donated {report.total_charity} ({report.share_of_profit}% of profit)")
    """
    return build_charity_report(list_all_sales(), as_of or datetime.now(timezone.utc), top)


def get_financial_summary() -> FinancialSummary:
    """Revenue, profit, expenses and net profit (revenue - expenses) across all records."""

    sales = list_all_sales()
    expenses = list_expenses()

    by_category: Dict[str, Decimal] = defaultdict(lambda: _ZERO)
    for expense in expenses:
        by_category[expense.category.value] += expense.amount

    revenue = _total(s.sale.sale_amount for s in sales)
    profit = _total(s.sale.profit for s in sales)
    total_expenses = _total(e.amount for e in expenses)

    return FinancialSummary(
        total_revenue=revenue,
        total_profit=profit,
        total_expenses=total_expenses,
        net_profit=revenue - total_expenses,
        profit_margin=_percentage(profit, revenue),
        total_charity=_total(s.sale.charity_amount for s in sales),
        sales_count=len(sales),
        expenses_by_category=dict(by_category),
    )


def get_top_products(limit: int = 5) -> List[ProductAmount]:
    """Best selling products by revenue."""

    return rank_products(list_all_sales(), by="revenue", limit=limit)


def get_lifetime_stock() -> LifetimeStock:
    """Current units across active products plus every unit ever sold."""

    products = list_products(active_only=True)
    sales = list_all_sales()
    return LifetimeStock(
        current_units=sum(p.size_inventory.total_units for p in products),
        sold_units=sum(s.sale.quantity for s in sales),
    )


__all__ = [
    "CharityReport",
    "FinancialSummary",
    "LifetimeStock",
    "ProductAmount",
    "build_charity_report",
    "get_charity_report",
    "get_financial_summary",
    "get_lifetime_stock",
    "get_top_products",
    "rank_products",
]

"""
Reports API Endpoints.

Dashboard widgets: charity impact, financial summary, stock alerts and
lifetime stock.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from api.errors import to_http_exception
from api.models import (
    CharityReportResponse,
    FinancialSummaryResponse,
    LifetimeStockResponse,
    ProductAmountResponse,
    ProductResponse,
    StockAlertsResponse,
)
from services.inventory_service import get_stock_alerts
from services.reporting_service import (
    ProductAmount,
    get_charity_report,
    get_financial_summary,
    get_lifetime_stock,
    get_top_products,
)

router = APIRouter()


def _product_amount(item: ProductAmount) -> ProductAmountResponse:
    return ProductAmountResponse(
        product_id=item.product_id,
        name=item.name,
        units=item.units,
        amount=item.amount,
    )


@router.get(
    "/reports/charity",
    response_model=CharityReportResponse,
    summary="Charity Impact",
    description="Total charity, this month vs last month, share of profit and top products by charity."
)
def charity_report():
    try:
        report = get_charity_report()
        return CharityReportResponse(
            total_revenue=report.total_revenue,
            total_profit=report.total_profit,
            total_charity=report.total_charity,
            this_month_charity=report.this_month_charity,
            last_month_charity=report.last_month_charity,
            share_of_profit=report.share_of_profit,
            month_growth=report.month_growth,
            top_products=[_product_amount(p) for p in report.top_products],
        )
    except Exception as e:
        raise to_http_exception(e, "build charity report") from e


@router.get(
    "/reports/financial-summary",
    response_model=FinancialSummaryResponse,
    summary="Financial Summary",
    description="Revenue, profit, expenses, net profit (revenue - expenses) and profit margin."
)
def financial_summary():
    try:
        summary = get_financial_summary()
        return FinancialSummaryResponse(
            total_revenue=summary.total_revenue,
            total_profit=summary.total_profit,
            total_expenses=summary.total_expenses,
            net_profit=summary.net_profit,
            profit_margin=summary.profit_margin,
            total_charity=summary.total_charity,
            sales_count=summary.sales_count,
            expenses_by_category=summary.expenses_by_category,
        )
    except Exception as e:
        raise to_http_exception(e, "build financial summary") from e


@router.get(
    "/reports/stock-alerts",
    response_model=StockAlertsResponse,
    summary="Stock Alerts",
    description="Active products out of stock (every size at 0) or low on stock (any size at or below the threshold)."
)
def stock_alerts(threshold: Optional[int] = Query(None, ge=0)):
    try:
        alerts = get_stock_alerts(threshold)
        return StockAlertsResponse(
            threshold=alerts.threshold,
            out_of_stock=[ProductResponse.from_domain(p) for p in alerts.out_of_stock],
            low_stock=[ProductResponse.from_domain(p) for p in alerts.low_stock],
        )
    except Exception as e:
        raise to_http_exception(e, "load stock alerts") from e


@router.get(
    "/reports/inventory-lifetime",
    response_model=LifetimeStockResponse,
    summary="Lifetime Stock",
    description="Units currently held plus units ever sold."
)
def inventory_lifetime():
    try:
        stock = get_lifetime_stock()
        return LifetimeStockResponse(
            current_units=stock.current_units,
            sold_units=stock.sold_units,
            lifetime_units=stock.lifetime_units,
        )
    except Exception as e:
        raise to_http_exception(e, "load lifetime stock") from e


@router.get(
    "/reports/top-products",
    response_model=List[ProductAmountResponse],
    summary="Top Selling Products",
    description="Products ranked by revenue."
)
def top_products(limit: int = Query(5, ge=1, le=50)):
    try:
        return [_product_amount(p) for p in get_top_products(limit)]
    except Exception as e:
        raise to_http_exception(e, "load top products") from e

"""
CSV export service for sales.

Generates a CSV of the sales recorded in a date range with one row per sale:
SKU, product name, size, quantity, net sale amount, payment mode and customer.

Security:
- CSV Injection Prevention: text fields are sanitized to prevent formula execution
- Security Logging: logs when dangerous characters are stripped
"""

from __future__ import annotations

import csv
import logging
from datetime import date
from io import StringIO
from typing import List

from domain.errors import NotFoundError
from domain.time import day_range_utc
from repositories.sale_repository import SaleWithDetails, list_sales_between

logger = logging.getLogger(__name__)

CSV_HEADERS: List[str] = [
    "SKU",
    "Product Name",
    "Size",
    "Qty",
    "Sold amount after discount",
    "Mode",
    "Customer name",
]

MISSING_SKU = "N/A"
MISSING_PRODUCT = "Unknown Product"
MISSING_SIZE = "N/A"
WALK_IN = "Walk-in"


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Sanitize field to prevent CSV injection attacks with security logging.

    Strips leading characters that can trigger formula execution in Excel/Sheets:
    =, +, -, @, tab, carriage return

    If dangerous characters are found and stripped, a warning is logged for
    security monitoring.

    Example:
        sanitize_csv_field("=HYPERLINK(...)", "product_name")
        # Returns "HYPERLINK(...)" and logs warning about stripped "=" character
    """
    if value is None or value == "":
        return ""

    text = str(value).strip()
    original_text = text
    dangerous_chars = {'=', '+', '-', '@', '\t', '\r'}

    stripped_chars = []
    while text and text[0] in dangerous_chars:
        stripped_chars.append(text[0])
        text = text[1:]

    if stripped_chars:
        logger.warning(
            f"CSV injection character(s) stripped from field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": "".join(stripped_chars),
                "original_value": original_text[:100],
                "sanitized_value": text[:100],
                "modification_type": "csv_injection_prevention",
            },
        )

    return text


def sale_to_csv_row(item: SaleWithDetails) -> List[str]:
    """Convert one sale (with product/customer names) into its CSV cells."""

    sale = item.sale
    return [
        sanitize_csv_field(item.product_sku, "sku") or MISSING_SKU,
        sanitize_csv_field(item.product_name, "product_name") or MISSING_PRODUCT,
        sale.size.value if sale.size else MISSING_SIZE,
        str(sale.quantity),
        str(sale.sale_amount),
        sale.payment_mode.value,
        sanitize_csv_field(item.customer_name, "customer_name") or WALK_IN,
    ]


def render_sales_csv(sales: List[SaleWithDetails]) -> str:
    """
    Render sales as CSV text. Every field is double-quoted and embedded quotes
    are doubled.
    """
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for item in sales:
        writer.writerow(sale_to_csv_row(item))
    return output.getvalue()


def export_filename(start: date, end: date) -> str:
    return f"sales_{start.isoformat()}_to_{end.isoformat()}.csv"


def generate_sales_csv(start: date, end: date) -> str:
    """
    Generate the CSV for sales dated within [start, end] (whole days, UTC).

    Raises:
        ValidationError: end is before start
        NotFoundError: no sales in the range

    Example:
        csv_content = generate_sales_csv(date(2025, 1, 1), date(2025, 1, 31))
        with open(export_filename(date(2025, 1, 1), date(2025, 1, 31)), "w") as f:
            f.write(csv_content)
    """
    range_start, range_end = day_range_utc(start, end)
    sales = list_sales_between(range_start, range_end)
    if not sales:
        raise NotFoundError(
            "Sales",
            f"{start.isoformat()} to {end.isoformat()}",
            "No sales found for the selected date range",
        )

    logger.info(
        "Exporting sales CSV",
        extra={"start": start.isoformat(), "end": end.isoformat(), "rows": len(sales)},
    )
    return render_sales_csv(sales)


__all__ = [
    "CSV_HEADERS",
    "export_filename",
    "generate_sales_csv",
    "render_sales_csv",
    "sale_to_csv_row",
    "sanitize_csv_field",
]

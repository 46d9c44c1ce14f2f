"""
Sales API Endpoints.

Endpoints for recording and deleting sales and exporting them as CSV.
"""

from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response

from api.errors import to_http_exception
from api.models import (
    CustomerResponse,
    ProductResponse,
    SaleCreateRequest,
    SaleCreateResponse,
    SaleDeletionResponse,
    SaleResponse,
)
from domain.pricing import NoDiscount
from repositories.sale_repository import get_sale_by_id, list_recent_sales
from services.csv_export_service import export_filename, generate_sales_csv
from services.sale_service import SaleRequest, delete_sale, record_sale

router = APIRouter()


@router.get(
    "/sales",
    response_model=List[SaleResponse],
    summary="List Recent Sales",
    description="Most recent sales first, with product and customer names."
)
def get_sales(limit: int = Query(50, ge=1, le=500)):
    try:
        return [
            SaleResponse.from_domain(
                item.sale,
                product_name=item.product_name,
                product_sku=item.product_sku,
                customer_name=item.customer_name,
            )
            for item in list_recent_sales(limit)
        ]
    except Exception as e:
        raise to_http_exception(e, "list sales") from e


@router.get(
    "/sales/export",
    summary="Export Sales CSV",
    description="Download the sales dated within [start, end] (whole days, inclusive) as CSV.",
    response_class=Response
)
def export_sales_csv(start: date, end: date):
    """
    Download a CSV of the sales in a date range.

    **CSV Contents:**
    `SKU, Product Name, Size, Qty, Sold amount after discount, Mode, Customer name`

    **Security:**
    - CSV injection prevention (dangerous leading characters stripped)
    - Stripped values are logged

    **Example usage:**
    ```
    GET /api/v1/sales/export?start=2025-01-01&end=2025-01-31
    ```

    **Response:**
    CSV file download with filename: `sales_{start}_to_{end}.csv`
    """
    try:
        csv_content = generate_sales_csv(start, end)
        return Response(
            content=csv_content,
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={export_filename(start, end)}"
            }
        )
    except Exception as e:
        raise to_http_exception(e, "generate CSV") from e


@router.get(
    "/sales/{sale_id}",
    response_model=SaleResponse,
    summary="Get Sale",
)
def get_sale(sale_id: UUID):
    try:
        sale = get_sale_by_id(sale_id)
        if sale is None:
            raise HTTPException(
                status_code=404,
                detail=f"Sale not found: {sale_id}"
            )
        return SaleResponse.from_domain(sale)
    except Exception as e:
        raise to_http_exception(e, "fetch sale") from e


@router.post(
    "/sales",
    response_model=SaleCreateResponse,
    status_code=201,
    summary="Record Sale",
    description="Record a sale: decrement the size's stock and add to the customer's totals."
)
def post_sale(request: SaleCreateRequest):
    """
    Record a sale of one product line.

    **Process:**
    1. Validates the request and loads the product
    2. Prices the sale (subtotal, discount, profit, charity)
    3. Checks stock for the requested size
    4. Finds the customer by mobile, or creates one
    5. Persists the sale, decrements stock and updates the customer's totals

    **Errors:**
    - 422: invalid input (e.g. discount larger than the subtotal)
    - 404: product not found
    - 409: not enough stock for the size
    - 502: the database write failed
    """
    try:
        result = record_sale(
            SaleRequest(
                product_id=request.product_id,
                size=request.size,
                quantity=request.quantity,
                discount=request.discount.to_domain() if request.discount else NoDiscount(),
                payment_mode=request.payment_mode,
                sale_mode=request.sale_mode,
                customer_mobile=request.customer_mobile,
                customer_name=request.customer_name,
                customer_email=request.customer_email,
                created_by=request.created_by,
            )
        )
        return SaleCreateResponse(
            sale=SaleResponse.from_domain(
                result.sale,
                product_name=result.product.name,
                product_sku=result.product.sku,
                customer_name=result.customer.name if result.customer else None,
            ),
            product=ProductResponse.from_domain(result.product),
            customer=CustomerResponse.from_domain(result.customer) if result.customer else None,
        )
    except Exception as e:
        raise to_http_exception(e, "record sale") from e


@router.delete(
    "/sales/{sale_id}",
    response_model=SaleDeletionResponse,
    summary="Delete Sale",
    description="Delete a sale, restoring its stock and reducing the customer's totals."
)
def remove_sale(sale_id: UUID):
    try:
        result = delete_sale(sale_id)
        return SaleDeletionResponse(
            deleted_sale_id=result.sale.sale_id,
            restored_size=result.sale.size,
            restored_quantity=result.sale.quantity,
            product=ProductResponse.from_domain(result.product),
            customer=CustomerResponse.from_domain(result.customer) if result.customer else None,
        )
    except Exception as e:
        raise to_http_exception(e, "delete sale") from e

"""
Customers API Endpoints.

Customer lookup, creation, edits and purchase history.
"""

from decimal import Decimal
from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from api.errors import to_http_exception
from api.models import (
    CustomerHistoryDay,
    CustomerHistoryResponse,
    CustomerRequest,
    CustomerResponse,
    SaleResponse,
)
from repositories.customer_repository import list_customers
from services.customer_service import (
    create_customer,
    find_customer,
    get_customer_history,
    require_customer,
    update_customer,
)

router = APIRouter()


@router.get(
    "/customers",
    response_model=List[CustomerResponse],
    summary="List Customers",
    description="All customers, biggest spenders first."
)
def get_customers():
    try:
        return [CustomerResponse.from_domain(c) for c in list_customers()]
    except Exception as e:
        raise to_http_exception(e, "list customers") from e


@router.get(
    "/customers/lookup",
    response_model=CustomerResponse,
    summary="Find Customer By Mobile",
    description="Point-of-sale lookup. Returns 404 when no customer has this mobile."
)
def lookup_customer(mobile: str = Query(..., min_length=1)):
    try:
        customer = find_customer(mobile)
        if customer is None:
            raise HTTPException(
                status_code=404,
                detail=f"No customer with mobile {mobile}"
            )
        return CustomerResponse.from_domain(customer)
    except Exception as e:
        raise to_http_exception(e, "look up customer") from e


@router.get(
    "/customers/{customer_id}",
    response_model=CustomerResponse,
    summary="Get Customer",
)
def get_customer(customer_id: UUID):
    try:
        return CustomerResponse.from_domain(require_customer(customer_id))
    except Exception as e:
        raise to_http_exception(e, "fetch customer") from e


@router.post(
    "/customers",
    response_model=CustomerResponse,
    status_code=201,
    summary="Create Customer",
    description="Create a customer. The mobile number must be unique."
)
def post_customer(request: CustomerRequest):
    try:
        customer = create_customer(request.name, request.mobile, request.email)
        return CustomerResponse.from_domain(customer)
    except Exception as e:
        raise to_http_exception(e, "create customer") from e


@router.put(
    "/customers/{customer_id}",
    response_model=CustomerResponse,
    summary="Update Customer",
    description="Edit name, mobile and email. Totals are maintained by sales only."
)
def put_customer(customer_id: UUID, request: CustomerRequest):
    try:
        customer = update_customer(
            customer_id,
            name=request.name,
            mobile=request.mobile,
            email=request.email,
        )
        return CustomerResponse.from_domain(customer)
    except Exception as e:
        raise to_http_exception(e, "update customer") from e


@router.get(
    "/customers/{customer_id}/history",
    response_model=CustomerHistoryResponse,
    summary="Customer Purchase History",
    description="Every sale of the customer, grouped by day, newest first."
)
def get_history(customer_id: UUID):
    try:
        history = get_customer_history(customer_id)
        days = [
            CustomerHistoryDay(
                day=day,
                sales=[
                    SaleResponse.from_domain(
                        item.sale,
                        product_name=item.product_name,
                        product_sku=item.product_sku,
                        customer_name=item.customer_name,
                    )
                    for item in items
                ],
                total=sum((item.sale.sale_amount for item in items), Decimal("0")),
            )
            for day, items in history.sales_by_day.items()
        ]
        return CustomerHistoryResponse(
            customer=CustomerResponse.from_domain(history.customer),
            total_revenue=history.total_revenue,
            total_charity=history.total_charity,
            sales_count=len(history.sales),
            days=days,
        )
    except Exception as e:
        raise to_http_exception(e, "load customer history") from e

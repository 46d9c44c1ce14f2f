"""
Products API Endpoints.

Catalogue management, restocking and sale quotes.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Response

from api.errors import to_http_exception
from api.models import (
    PriceBreakdownResponse,
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
    QuoteRequest,
    QuoteResponse,
    RestockRequest,
)
from domain.pricing import NoDiscount
from repositories.product_repository import list_products
from services.inventory_service import restock
from services.pricing_service import quote_sale
from services.product_service import (
    create_product,
    deactivate_product,
    require_product,
    update_product_details,
)

router = APIRouter()


@router.get(
    "/products",
    response_model=List[ProductResponse],
    summary="List Products",
    description="List products ordered by name, optionally only active ones."
)
def get_products(active_only: bool = False):
    try:
        return [ProductResponse.from_domain(p) for p in list_products(active_only=active_only)]
    except Exception as e:
        raise to_http_exception(e, "list products") from e


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Get Product",
)
def get_product(product_id: UUID):
    try:
        return ProductResponse.from_domain(require_product(product_id))
    except Exception as e:
        raise to_http_exception(e, "fetch product") from e


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=201,
    summary="Create Product",
    description="Create a product with its opening stock per size."
)
def post_product(request: ProductCreateRequest):
    try:
        product = create_product(
            name=request.name,
            sku=request.sku,
            category=request.category,
            cost_price=request.cost_price,
            selling_price=request.selling_price,
            charity_percentage=request.charity_percentage,
            size_inventory=request.size_inventory.to_domain(),
            image_url=request.image_url,
            images=request.images,
        )
        return ProductResponse.from_domain(product)
    except Exception as e:
        raise to_http_exception(e, "create product") from e


@router.patch(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Update Product",
    description="Edit product details. Stock is changed through restock and sales only."
)
def patch_product(product_id: UUID, request: ProductUpdateRequest):
    try:
        changes = request.model_dump(exclude_unset=True)
        return ProductResponse.from_domain(update_product_details(product_id, **changes))
    except Exception as e:
        raise to_http_exception(e, "update product") from e


@router.post(
    "/products/{product_id}/restock",
    response_model=ProductResponse,
    summary="Restock Product",
    description="Add units to one or more sizes. At least one size must be non-zero."
)
def post_restock(product_id: UUID, request: RestockRequest):
    """
    Add a restock batch to a product.

    **Example request:**
    ```json
    {"additions": {"M": 5, "L": 0, "XL": 2, "XXL": 0}}
    ```
    """
    try:
        return ProductResponse.from_domain(restock(product_id, request.additions.to_domain()))
    except Exception as e:
        raise to_http_exception(e, "restock product") from e


@router.delete(
    "/products/{product_id}",
    status_code=204,
    summary="Deactivate Product",
    description="Disable a product. Products are never deleted; their sales keep referencing them."
)
def delete_product(product_id: UUID):
    try:
        deactivate_product(product_id)
    except Exception as e:
        raise to_http_exception(e, "deactivate product") from e
    return Response(status_code=204)


@router.post(
    "/products/{product_id}/quote",
    response_model=QuoteResponse,
    summary="Quote Sale",
    description="Price a sale of this product without recording it."
)
def post_quote(product_id: UUID, request: QuoteRequest):
    """
    Calculate subtotal, discount, profit and charity for a prospective sale.

    The quote also reports the stock held for the size, so the caller can
    warn before attempting the sale.
    """
    try:
        discount = request.discount.to_domain() if request.discount else NoDiscount()
        quote = quote_sale(product_id, request.size, request.quantity, discount)
        return QuoteResponse(
            product_id=quote.product.product_id,
            size=quote.size,
            available_stock=quote.available_stock,
            in_stock=quote.in_stock,
            breakdown=PriceBreakdownResponse.from_domain(quote.breakdown),
        )
    except Exception as e:
        raise to_http_exception(e, "calculate quote") from e

"""
Pricing service for sale quotes.

Loads the product being sold and runs the pricing/charity calculator against
its current prices. Quotes never write anything; the sale service uses the same
functions right before persisting a sale.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from domain.errors import NotFoundError, ValidationError
from domain.pricing import Discount, PriceBreakdown, compute_price_breakdown
from domain.product import Product
from domain.size import Size
from repositories.product_repository import get_product_by_id


@dataclass(frozen=True, slots=True)
class SaleQuote:
    """
    Priced preview of a sale line.

    Includes:
    - The product as priced (current selling/cost price and charity percentage)
    - The full monetary breakdown
    - Stock currently held for the requested size
    """

    product: Product
    size: Size
    breakdown: PriceBreakdown
    available_stock: int

    @property
    def in_stock(self) -> bool:
        return self.available_stock >= self.breakdown.quantity


def load_sellable_product(product_id: UUID) -> Product:
    """
    Fetch a product that can be sold.

    Raises:
        NotFoundError: product does not exist
        ValidationError: product is disabled
    """
    product = get_product_by_id(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    if not product.is_active:
        raise ValidationError(f"Product '{product.name}' is not active and cannot be sold")
    return product


def price_sale(product: Product, quantity: int, discount: Discount) -> PriceBreakdown:
    """
    Price `quantity` units of `product` at its current selling price.

    Example:
        breakdown = price_sale(product, 2, FlatDiscount(Decimal("200")))
        print(f"Sale: {breakdown.sale_amount}, charity: {breakdown.charity_amount}")
    """
    return compute_price_breakdown(
        unit_price=product.selling_price,
        quantity=quantity,
        discount=discount,
        cost_price=product.cost_price,
        charity_percentage=product.charity_percentage,
    )


def quote_sale(product_id: UUID, size: Size, quantity: int, discount: Discount) -> SaleQuote:
    """
    Calculate a sale quote without persisting anything.

    Raises:
        NotFoundError, ValidationError: see load_sellable_product / compute_price_breakdown
    """
    product = load_sellable_product(product_id)
    breakdown = price_sale(product, quantity, discount)
    return SaleQuote(
        product=product,
        size=size,
        breakdown=breakdown,
        available_stock=product.stock_for(size),
    )


__all__ = [
    "SaleQuote",
    "load_sellable_product",
    "price_sale",
    "quote_sale",
]

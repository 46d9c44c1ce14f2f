"""
Inventory service for per-size product stock.

Handles:
- Restocking (additive, every size at once)
- Sale decrements and sale reversals as conditional updates
- Stock alerts (out of stock / low stock)

Every stock write is a compare-and-set against the snapshot it was computed
from, so two concurrent writers can never both apply a change to the same
snapshot. On a conflict the product is re-read and the change is re-validated
once against the fresh stock.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, List
from uuid import UUID

from domain.errors import InsufficientStockError, NotFoundError, PersistenceError
from domain.product import Product
from domain.size import Size, SizeInventory
from repositories.product_repository import (
    compare_and_set_inventory,
    get_product_by_id,
    list_products,
)

logger = logging.getLogger(__name__)

# A product is low on stock when any size is at or below this quantity.
LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "0"))

_MAX_ATTEMPTS = 2


@dataclass(frozen=True, slots=True)
class StockAlerts:
    threshold: int
    out_of_stock: List[Product]
    low_stock: List[Product]


def _require_product(product_id: UUID) -> Product:
    product = get_product_by_id(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def _write_stock(
    product_id: UUID,
    compute: Callable[[Product], SizeInventory],
    action: str,
) -> Product:
    """
    Read the product, compute its new stock and write it conditionally.

    `compute` may raise (e.g. InsufficientStockError) to abort; it is re-run
    against the fresh snapshot after a conflict.
    """
    for attempt in range(1, _MAX_ATTEMPTS + 1):
        product = _require_product(product_id)
        new_inventory = compute(product)
        if compare_and_set_inventory(product_id, product.size_inventory, new_inventory):
            return product.with_inventory(new_inventory)
        logger.warning(
            "Stock changed concurrently, re-reading product",
            extra={"product_id": str(product_id), "action": action, "attempt": attempt},
        )

    raise PersistenceError(
        f"Failed to {action}: stock for product {product_id} kept changing concurrently, please retry"
    )


def apply_stock_delta(
    product_id: UUID,
    size: Size,
    delta: int,
    *,
    require_available: bool = False,
) -> Product:
    """
    Apply a signed quantity change to one size (result floored at zero).

    Args:
        product_id: Product to update
        size: Size whose stock changes
        delta: Negative for a sale, positive for a restock or sale reversal
        require_available: Reject with InsufficientStockError instead of flooring
            when the stock cannot cover a decrement (sales always set this)

    Returns:
        Product with its updated stock
    """

    def compute(product: Product) -> SizeInventory:
        available = product.stock_for(size)
        if require_available and delta < 0 and available < -delta:
            raise InsufficientStockError(product_id, size.value, -delta, available)
        return product.size_inventory.apply_delta(size, delta)

    return _write_stock(product_id, compute, "update product inventory")


def restock(product_id: UUID, additions: SizeInventory) -> Product:
    """
    Add a restock batch to a product's stock.

    Raises:
        ValidationError: every size in `additions` is zero
        NotFoundError: product does not exist

    Example:
        restock(product_id, SizeInventory(m=5, xl=2))
    """

    product = _write_stock(
        product_id,
        lambda current: current.size_inventory.restocked(additions),
        "restock product",
    )
    logger.info(
        "Product restocked",
        extra={"product_id": str(product_id), "added": additions.to_mapping()},
    )
    return product


def get_stock_alerts(threshold: int | None = None) -> StockAlerts:
    """
    Active products that are out of stock (every size at 0) or low on stock
    (any size at or below the threshold).
    """

    limit = LOW_STOCK_THRESHOLD if threshold is None else threshold
    products = list_products(active_only=True)
    return StockAlerts(
        threshold=limit,
        out_of_stock=[p for p in products if p.is_out_of_stock()],
        low_stock=[p for p in products if p.is_low_stock(limit)],
    )


__all__ = [
    "LOW_STOCK_THRESHOLD",
    "StockAlerts",
    "apply_stock_delta",
    "restock",
    "get_stock_alerts",
]

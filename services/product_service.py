"""
Product catalogue service.

Handles:
- Product creation with an opening stock per size
- Editing product details (name, SKU, category, prices, charity %, images)
- Disabling products (products are never deleted)

Stock is not editable here; it changes only through restocks and sales
(services/inventory_service.py).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID, uuid4

from domain.errors import NotFoundError, ValidationError
from domain.product import Product, ProductCategory
from domain.size import SizeInventory
from repositories.product_repository import (
    get_product_by_id,
    insert_product,
    set_product_active,
    update_product,
)

logger = logging.getLogger(__name__)


def parse_category(value: Any) -> ProductCategory:
    if isinstance(value, ProductCategory):
        return value
    try:
        return ProductCategory(str(value))
    except ValueError:
        allowed = ", ".join(c.value for c in ProductCategory)
        raise ValidationError(f"Invalid category: {value!r}. Expected one of: {allowed}") from None


def require_product(product_id: UUID) -> Product:
    product = get_product_by_id(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def create_product(
    *,
    name: str,
    sku: str,
    category: Any,
    cost_price: Decimal,
    selling_price: Decimal,
    charity_percentage: Decimal,
    size_inventory: Optional[SizeInventory] = None,
    image_url: Optional[str] = None,
    images: Optional[List[str]] = None,
) -> Product:
    """
    Create a product.

    Raises:
        ValidationError: missing name/SKU, negative prices, charity % outside 0-100

    Example:
        product = create_product(
            name="Logo Tee", sku="TEE-001", category="T-Shirt",
            cost_price=Decimal("500"), selling_price=Decimal("999"),
            charity_percentage=Decimal("10"),
            size_inventory=SizeInventory(m=3, l=5),
        )
    """
    draft = Product(
        product_id=uuid4(),
        name=(name or "").strip(),
        sku=(sku or "").strip(),
        category=parse_category(category),
        cost_price=cost_price,
        selling_price=selling_price,
        charity_percentage=charity_percentage,
        size_inventory=size_inventory or SizeInventory(),
        image_url=image_url,
        images=list(images or []),
    )
    product = insert_product(draft)
    logger.info(
        "Product created",
        extra={"product_id": str(product.product_id), "sku": product.sku},
    )
    return product


def update_product_details(product_id: UUID, **changes: Any) -> Product:
    """
    Apply edits to a product's details. Unknown fields and stock are rejected.

    Example:
        update_product_details(product_id, selling_price=Decimal("1099"))
    """
    editable = {
        "name",
        "sku",
        "category",
        "cost_price",
        "selling_price",
        "charity_percentage",
        "image_url",
        "images",
    }
    unknown = set(changes) - editable
    if unknown:
        raise ValidationError(f"Cannot edit product field(s): {', '.join(sorted(unknown))}")

    if "category" in changes:
        changes["category"] = parse_category(changes["category"])
    for key in ("name", "sku"):
        if key in changes and changes[key] is not None:
            changes[key] = str(changes[key]).strip()
    if "images" in changes:
        changes["images"] = list(changes["images"] or [])

    current = require_product(product_id)
    return update_product(replace(current, **changes))


def deactivate_product(product_id: UUID) -> None:
    require_product(product_id)
    set_product_active(product_id, False)
    logger.info("Product deactivated", extra={"product_id": str(product_id)})


__all__ = [
    "create_product",
    "deactivate_product",
    "parse_category",
    "require_product",
    "update_product_details",
]

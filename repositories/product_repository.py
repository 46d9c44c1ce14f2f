"""
Product repository (persistence).

This module provides persistence operations for the Product domain entity. It
contains no business rules about pricing or stock policy; it only enforces
simple persistence constraints (e.g., conditional stock updates).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.errors import NotFoundError
from domain.product import Product, ProductCategory
from domain.size import Size, SizeInventory
from domain.time import parse_optional_utc_datetime
from repositories.client import execute, rows_of, supabase

# Supabase table name for products.
# Keep this aligned with migrations/001_schema.sql.
_PRODUCTS_TABLE: str = "products"


def _row_to_product(row: Mapping[str, Any]) -> Product:
    """Convert a Supabase row into a Product."""

    return Product(
        product_id=UUID(str(row["id"])),
        name=str(row["name"]),
        sku=str(row["sku"]),
        category=ProductCategory(str(row["category"])),
        cost_price=row["cost_price"],
        selling_price=row["selling_price"],
        charity_percentage=row.get("charity_percentage", 0),
        size_inventory=SizeInventory.from_mapping(row.get("size_inventory")),
        is_active=bool(row.get("is_active", True)),
        image_url=row.get("image_url"),
        images=list(row.get("images") or []),
        created_at=parse_optional_utc_datetime(row.get("created_at")),
        updated_at=parse_optional_utc_datetime(row.get("updated_at")),
    )


def _product_payload(product: Product) -> dict[str, Any]:
    """Editable columns. Stock is written only on insert and through compare_and_set_inventory."""

    return {
        "name": product.name,
        "sku": product.sku,
        "category": product.category.value,
        "cost_price": str(product.cost_price),
        "selling_price": str(product.selling_price),
        "charity_percentage": str(product.charity_percentage),
        "is_active": product.is_active,
        "image_url": product.image_url,
        "images": list(product.images),
    }


def get_product_by_id(product_id: UUID) -> Optional[Product]:
    """
    Retrieve a single product by its ID.

    Returns:
        Product or None if not found
    """

    response = execute(
        supabase.table(_PRODUCTS_TABLE).select("*").eq("id", str(product_id)).limit(1),
        "fetch product",
    )
    rows = rows_of(response)
    if not rows:
        return None
    return _row_to_product(rows[0])


def list_products(active_only: bool = False) -> List[Product]:
    """List products ordered by name, optionally only active ones."""

    query = supabase.table(_PRODUCTS_TABLE).select("*")
    if active_only:
        query = query.eq("is_active", True)
    response = execute(query.order("name"), "list products")
    return [_row_to_product(row) for row in rows_of(response)]


def insert_product(product: Product) -> Product:
    """
    Insert a new product. A fresh id and timestamps are assigned here.

    Returns:
        Product as stored
    """

    now = datetime.now(timezone.utc)
    product_id = uuid4()
    payload = _product_payload(product)
    payload.update(
        {
            "id": str(product_id),
            "size_inventory": product.size_inventory.to_mapping(),
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
        }
    )
    response = execute(supabase.table(_PRODUCTS_TABLE).insert(payload), "create product")
    rows = rows_of(response)
    if rows:
        return _row_to_product(rows[0])
    return _row_to_product(payload)


def update_product(product: Product) -> Product:
    """Overwrite the editable fields of an existing product. Stock is left untouched."""

    payload = _product_payload(product)
    payload["updated_at"] = datetime.now(timezone.utc).isoformat()
    response = execute(
        supabase.table(_PRODUCTS_TABLE).update(payload).eq("id", str(product.product_id)),
        "update product",
    )
    rows = rows_of(response)
    if not rows:
        raise NotFoundError("Product", product.product_id)
    return _row_to_product(rows[0])


def set_product_active(product_id: UUID, is_active: bool) -> None:
    execute(
        supabase.table(_PRODUCTS_TABLE)
        .update({"is_active": is_active, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(product_id)),
        "update product status",
    )


def compare_and_set_inventory(
    product_id: UUID,
    expected: SizeInventory,
    inventory: SizeInventory,
) -> bool:
    """
    Write `inventory` only if the stored stock still equals `expected` for every size.

    This is the conditional update that replaces a blind read-then-write: two
    writers working from the same snapshot cannot both succeed.

    Returns:
        True if the row was updated, False if the stock changed underneath
        (or the product no longer exists).
    """

    query = (
        supabase.table(_PRODUCTS_TABLE)
        .update(
            {
                "size_inventory": inventory.to_mapping(),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        .eq("id", str(product_id))
    )
    for size in Size:
        query = query.eq(f"size_inventory->>{size.value}", str(expected.get(size)))

    response = execute(query, "update product inventory")
    return bool(rows_of(response))


__all__ = [
    "get_product_by_id",
    "list_products",
    "insert_product",
    "update_product",
    "set_product_active",
    "compare_and_set_inventory",
]

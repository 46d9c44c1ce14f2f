"""
Domain: Product catalogue entry.

A Product owns its per-size stock exclusively. Products are never deleted;
they are disabled through `is_active`.

Stock alert policy (used by every report and endpoint):
- out of stock: every size is at 0
- low stock: any size is at or below the configured threshold
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from .errors import ValidationError
from .pricing import require_cents, require_percentage, to_decimal
from .size import Size, SizeInventory
from .time import require_utc_timestamp


class ProductCategory(str, Enum):
    SHIRT = "Shirt"
    T_SHIRT = "T-Shirt"
    HOODIE = "Hoodie"
    PANTS = "Pants"
    ACCESSORY = "Accessory"


@dataclass(frozen=True, slots=True)
class Product:
    """
    Immutable product snapshot as read from the `products` table.

    Prices and charity percentage are Decimals; stock changes return a new
    Product via `with_inventory`.
    """

    product_id: UUID
    name: str
    sku: str
    category: ProductCategory
    cost_price: Decimal
    selling_price: Decimal
    charity_percentage: Decimal
    size_inventory: SizeInventory = field(default_factory=SizeInventory)
    is_active: bool = True
    image_url: Optional[str] = None
    images: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Product name is required")
        if not self.sku or not self.sku.strip():
            raise ValidationError("Product SKU is required")

        cost = to_decimal(self.cost_price, "cost price")
        selling = to_decimal(self.selling_price, "selling price")
        if cost < 0:
            raise ValidationError("cost price must be >= 0")
        if selling < 0:
            raise ValidationError("selling price must be >= 0")
        pct = require_percentage("charity percentage", to_decimal(self.charity_percentage, "charity percentage"))

        object.__setattr__(self, "cost_price", require_cents("cost price", cost))
        object.__setattr__(self, "selling_price", require_cents("selling price", selling))
        object.__setattr__(self, "charity_percentage", pct)

        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def stock_for(self, size: Size) -> int:
        return self.size_inventory.get(size)

    def with_inventory(self, inventory: SizeInventory) -> "Product":
        return replace(self, size_inventory=inventory)

    @property
    def unit_margin(self) -> Decimal:
        return self.selling_price - self.cost_price

    def is_out_of_stock(self) -> bool:
        return self.size_inventory.is_out_of_stock()

    def is_low_stock(self, threshold: int = 0) -> bool:
        return self.size_inventory.is_low_stock(threshold)


__all__ = ["Product", "ProductCategory"]

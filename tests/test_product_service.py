"""
Tests for `services/product_service.py` and `services/pricing_service.py`.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

import pytest

from domain.errors import NotFoundError, ValidationError
from domain.pricing import FlatDiscount
from domain.product import ProductCategory
from domain.size import Size, SizeInventory
from services.pricing_service import quote_sale
from services.product_service import (
    create_product,
    deactivate_product,
    update_product_details,
)


def test_create_product_with_opening_stock(store) -> None:
    product = create_product(
        name="  Logo Tee ",
        sku="TEE-001",
        category="T-Shirt",
        cost_price=Decimal("500"),
        selling_price=Decimal("999"),
        charity_percentage=Decimal("10"),
        size_inventory=SizeInventory(m=3, l=5),
    )

    assert product.name == "Logo Tee"
    assert product.category is ProductCategory.T_SHIRT
    assert product.is_active is True
    assert store.products[product.product_id].stock_for(Size.L) == 5


def test_create_product_validates_fields(store) -> None:
    with pytest.raises(ValidationError):
        create_product(
            name="Tee", sku="T-1", category="Socks",
            cost_price=Decimal("1"), selling_price=Decimal("2"), charity_percentage=Decimal("0"),
        )
    with pytest.raises(ValidationError):
        create_product(
            name="Tee", sku="T-1", category="Shirt",
            cost_price=Decimal("1"), selling_price=Decimal("2"), charity_percentage=Decimal("120"),
        )
    assert store.products == {}


def test_update_product_details_keeps_stock(store) -> None:
    product = store.add_product(inventory=SizeInventory(m=3))

    updated = update_product_details(product.product_id, selling_price=Decimal("1099"), category="Hoodie")

    assert updated.selling_price == Decimal("1099")
    assert updated.category is ProductCategory.HOODIE
    assert updated.stock_for(Size.M) == 3


def test_update_product_details_rejects_stock_edits(store) -> None:
    product = store.add_product()

    with pytest.raises(ValidationError):
        update_product_details(product.product_id, size_inventory=SizeInventory(m=100))


def test_deactivate_product(store) -> None:
    product = store.add_product()

    deactivate_product(product.product_id)

    assert store.products[product.product_id].is_active is False
    with pytest.raises(ValidationError):
        quote_sale(product.product_id, Size.M, 1, FlatDiscount(Decimal("0")))


def test_quote_sale_reports_stock(store) -> None:
    product = store.add_product(inventory=SizeInventory(m=1))

    quote = quote_sale(product.product_id, Size.M, 2, FlatDiscount(Decimal("200")))

    assert quote.breakdown.sale_amount == Decimal("1798")
    assert quote.available_stock == 1
    assert quote.in_stock is False
    assert store.writes == []


def test_quote_unknown_product(store) -> None:
    with pytest.raises(NotFoundError):
        quote_sale(UUID("00000000-0000-0000-0000-000000000099"), Size.M, 1, FlatDiscount(Decimal("0")))

"""
Tests for `domain/size.py`.

Covers contract rules:
- Stock quantities are non-negative integers for exactly the sizes M, L, XL, XXL.
- Stored mappings with unknown or missing size keys are rejected.
- apply_delta floors at zero and returns a new instance.
- Restocking requires at least one non-zero size.
- Stock alert policy: out of stock = every size 0; low stock = any size <= threshold.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from domain.errors import ValidationError
from domain.size import Size, SizeInventory


def test_size_parse_accepts_labels_case_insensitively() -> None:
    assert Size.parse("xl") is Size.XL
    assert Size.parse(" XXL ") is Size.XXL
    assert Size.parse(Size.M) is Size.M

    with pytest.raises(ValidationError):
        Size.parse("S")


def test_from_mapping_round_trips_stored_json() -> None:
    inventory = SizeInventory.from_mapping({"M": 3, "L": 0, "XL": 1, "XXL": 2})

    assert inventory == SizeInventory(m=3, l=0, xl=1, xxl=2)
    assert inventory.to_mapping() == {"M": 3, "L": 0, "XL": 1, "XXL": 2}


def test_from_mapping_null_column_is_empty_inventory() -> None:
    assert SizeInventory.from_mapping(None) == SizeInventory()


def test_from_mapping_rejects_unknown_and_missing_keys() -> None:
    with pytest.raises(ValidationError):
        SizeInventory.from_mapping({"M": 1, "L": 1, "XL": 1, "XXL": 1, "S": 1})

    with pytest.raises(ValidationError):
        SizeInventory.from_mapping({"M": 1, "L": 1, "XL": 1})


def test_quantities_must_be_non_negative_integers() -> None:
    with pytest.raises(ValidationError):
        SizeInventory(m=-1)
    with pytest.raises(ValidationError):
        SizeInventory(l="3")  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        SizeInventory(xl=True)  # type: ignore[arg-type]


def test_apply_delta_returns_new_instance_and_floors_at_zero() -> None:
    inventory = SizeInventory(m=3)

    sold = inventory.apply_delta(Size.M, -2)
    assert sold.get(Size.M) == 1
    assert inventory.get(Size.M) == 3

    assert inventory.apply_delta(Size.M, -5).get(Size.M) == 0
    assert inventory.apply_delta(Size.XXL, 4).get(Size.XXL) == 4


def test_restocked_adds_every_size() -> None:
    inventory = SizeInventory(m=1, l=2)

    result = inventory.restocked(SizeInventory(m=5, xl=2))

    assert result == SizeInventory(m=6, l=2, xl=2, xxl=0)


def test_restock_with_all_zero_sizes_is_rejected() -> None:
    with pytest.raises(ValidationError, match="at least one size"):
        SizeInventory(m=1).restocked(SizeInventory())


def test_stock_alert_policy() -> None:
    assert SizeInventory().is_out_of_stock() is True
    assert SizeInventory(m=1).is_out_of_stock() is False

    # Default threshold 0: low stock when any size is empty.
    assert SizeInventory(m=1, l=1, xl=1, xxl=0).is_low_stock() is True
    assert SizeInventory(m=1, l=1, xl=1, xxl=1).is_low_stock() is False
    assert SizeInventory(m=5, l=2, xl=5, xxl=5).is_low_stock(threshold=2) is True


def test_total_units_and_has_at_least() -> None:
    inventory = SizeInventory(m=3, l=5, xl=2)

    assert inventory.total_units == 10
    assert inventory.has_at_least(Size.M, 3) is True
    assert inventory.has_at_least(Size.M, 4) is False


def test_size_inventory_is_immutable() -> None:
    with pytest.raises(FrozenInstanceError):
        SizeInventory().m = 1  # type: ignore[misc]

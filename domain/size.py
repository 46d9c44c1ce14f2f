"""
Domain: garment sizes and per-size stock.

Stock is held per product for a closed set of four sizes. It is modelled as a
record with one field per size so that a typo or a missing key can never read
as "0 in stock".

Rules implemented here:
- Quantities are non-negative integers.
- apply_delta floors the result at zero (a sale reversal or restock adds, a
  sale subtracts). Callers must check availability before a sale decrement;
  the floor only protects against counts desynced by out-of-band edits.
- Parsing a stored mapping rejects unknown and missing size keys.

This module contains only pure value objects: no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .errors import ValidationError


class Size(str, Enum):
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"

    @staticmethod
    def parse(value: Any) -> "Size":
        """Resolve a Size from its label, raising ValidationError for anything else."""

        if isinstance(value, Size):
            return value
        try:
            return Size(str(value).strip().upper())
        except ValueError:
            allowed = ", ".join(s.value for s in Size)
            raise ValidationError(f"Invalid size '{value}'. Must be one of: {allowed}") from None


def _require_quantity(size: Size, quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"Stock for size {size.value} must be an integer, got {quantity!r}")
    if quantity < 0:
        raise ValidationError(f"Stock for size {size.value} must be >= 0")
    return quantity


@dataclass(frozen=True, slots=True)
class SizeInventory:
    """Immutable stock count for each size. Transitions return new instances."""

    m: int = 0
    l: int = 0  # noqa: E741
    xl: int = 0
    xxl: int = 0

    def __post_init__(self) -> None:
        for size in Size:
            _require_quantity(size, self.get(size))

    @staticmethod
    def from_mapping(raw: Optional[Mapping[str, Any]]) -> "SizeInventory":
        """
        Build from the stored JSON object (`{"M": 3, "L": 0, "XL": 1, "XXL": 0}`).

        A NULL column is an empty inventory. Otherwise every size must be present
        and no other key is accepted.
        """

        if raw is None:
            return SizeInventory()

        known = {s.value for s in Size}
        unknown = sorted(str(k) for k in raw if str(k) not in known)
        if unknown:
            raise ValidationError(f"Unknown size key(s) in inventory: {', '.join(unknown)}")
        missing = [s.value for s in Size if s.value not in raw]
        if missing:
            raise ValidationError(f"Inventory is missing size key(s): {', '.join(missing)}")

        return SizeInventory(
            m=_require_quantity(Size.M, raw["M"]),
            l=_require_quantity(Size.L, raw["L"]),
            xl=_require_quantity(Size.XL, raw["XL"]),
            xxl=_require_quantity(Size.XXL, raw["XXL"]),
        )

    def to_mapping(self) -> Dict[str, int]:
        return {size.value: self.get(size) for size in Size}

    def get(self, size: Size) -> int:
        if size is Size.M:
            return self.m
        if size is Size.L:
            return self.l
        if size is Size.XL:
            return self.xl
        if size is Size.XXL:
            return self.xxl
        raise ValidationError(f"Invalid size: {size!r}")

    def with_quantity(self, size: Size, quantity: int) -> "SizeInventory":
        values = self.to_mapping()
        values[size.value] = quantity
        return SizeInventory.from_mapping(values)

    def apply_delta(self, size: Size, delta: int) -> "SizeInventory":
        """
        Return a new inventory with `delta` applied to `size`, floored at zero.

        Negative delta: sale. Positive delta: restock or sale reversal.
        """

        return self.with_quantity(size, max(0, self.get(size) + delta))

    def restocked(self, additions: "SizeInventory") -> "SizeInventory":
        """Add a restock batch to every size."""

        if additions.total_units == 0:
            raise ValidationError("Please enter stock quantity for at least one size")
        result = self
        for size in Size:
            result = result.apply_delta(size, additions.get(size))
        return result

    def has_at_least(self, size: Size, quantity: int) -> bool:
        return self.get(size) >= quantity

    @property
    def total_units(self) -> int:
        return self.m + self.l + self.xl + self.xxl

    def is_out_of_stock(self) -> bool:
        """True when every size is at zero."""

        return self.total_units == 0

    def is_low_stock(self, threshold: int = 0) -> bool:
        """True when any size is at or below `threshold`."""

        return any(self.get(size) <= threshold for size in Size)


__all__ = ["Size", "SizeInventory"]

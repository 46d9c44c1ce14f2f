"""
Domain: sale pricing and charity share.

Rules implemented here:
- subtotal = unit_price * quantity
- A discount is exactly one of: none, a flat amount, or a percentage of the
  subtotal. It resolves to a single discount amount.
- A discount larger than the subtotal is rejected, never clamped.
- sale_amount = subtotal - discount_amount
- cost_amount = cost_price * quantity
- profit = sale_amount - cost_amount (negative for a loss sale)
- charity_amount = max(0, profit) * charity_percentage / 100
  (charity is a share of profit, never of revenue, and never of a loss)

Flat discounts and prices must be whole cents. Percentage discounts and
charity amounts are rounded half-up to cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from .errors import ValidationError

_CENTS = Decimal("0.01")
_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def to_decimal(value: Any, name: str) -> Decimal:
    """Coerce a number (or numeric string) to Decimal without float artifacts."""

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise ValidationError(f"{name} must be a finite number")
    return result


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def require_cents(name: str, value: Decimal) -> Decimal:
    """Money columns are numeric(12,2); anything finer than a cent is rejected."""

    if value != value.quantize(_CENTS):
        raise ValidationError(f"{name} cannot have more than 2 decimal places")
    return value


def require_percentage(name: str, value: Decimal) -> Decimal:
    if value < _ZERO or value > _HUNDRED:
        raise ValidationError(f"{name} must be between 0 and 100")
    return value


@dataclass(frozen=True, slots=True)
class NoDiscount:
    def resolve(self, subtotal: Decimal) -> Decimal:
        return _ZERO


@dataclass(frozen=True, slots=True)
class FlatDiscount:
    amount: Decimal

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount, "discount amount")
        if amount < _ZERO:
            raise ValidationError("discount amount must be >= 0")
        object.__setattr__(self, "amount", require_cents("discount amount", amount))

    def resolve(self, subtotal: Decimal) -> Decimal:
        return self.amount


@dataclass(frozen=True, slots=True)
class PercentageDiscount:
    percentage: Decimal

    def __post_init__(self) -> None:
        pct = require_percentage("discount percentage", to_decimal(self.percentage, "discount percentage"))
        object.__setattr__(self, "percentage", pct)

    def resolve(self, subtotal: Decimal) -> Decimal:
        return round_cents(subtotal * self.percentage / _HUNDRED)


Discount = Union[NoDiscount, FlatDiscount, PercentageDiscount]


def discount_from_inputs(amount: Any = None, percentage: Any = None) -> Discount:
    """
    Build a Discount from the two mutually exclusive form inputs.

    Supplying both is a ValidationError; supplying neither (or zero) is no discount.
    """

    has_amount = amount is not None and to_decimal(amount, "discount amount") != _ZERO
    has_percentage = percentage is not None and to_decimal(percentage, "discount percentage") != _ZERO

    if has_amount and has_percentage:
        raise ValidationError("Provide either a discount amount or a discount percentage, not both")
    if has_amount:
        return FlatDiscount(to_decimal(amount, "discount amount"))
    if has_percentage:
        return PercentageDiscount(to_decimal(percentage, "discount percentage"))
    return NoDiscount()


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """Every monetary figure recorded on a sale."""

    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    discount_amount: Decimal
    sale_amount: Decimal
    cost_amount: Decimal
    profit: Decimal
    charity_percentage: Decimal
    charity_amount: Decimal

    @property
    def is_loss(self) -> bool:
        return self.profit < _ZERO


def compute_price_breakdown(
    unit_price: Any,
    quantity: int,
    discount: Discount,
    cost_price: Any,
    charity_percentage: Any,
) -> PriceBreakdown:
    """
    Compute the monetary figures of a sale.

    Raises:
        ValidationError: quantity <= 0, negative prices, charity percentage outside
            [0, 100], or a discount exceeding the subtotal.

    Example:
        compute_price_breakdown(999, 2, NoDiscount(), 500, 10)
        # subtotal=1998, profit=998, charity_amount=99.80
    """

    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")
    if quantity <= 0:
        raise ValidationError("quantity must be greater than 0")

    unit = to_decimal(unit_price, "unit price")
    cost = to_decimal(cost_price, "cost price")
    if unit < _ZERO:
        raise ValidationError("unit price must be >= 0")
    if cost < _ZERO:
        raise ValidationError("cost price must be >= 0")
    require_cents("unit price", unit)
    require_cents("cost price", cost)
    pct = require_percentage("charity percentage", to_decimal(charity_percentage, "charity percentage"))

    subtotal = unit * quantity
    discount_amount = discount.resolve(subtotal)
    if discount_amount > subtotal:
        raise ValidationError(
            f"Discount ({discount_amount}) cannot exceed the subtotal ({subtotal})"
        )

    sale_amount = subtotal - discount_amount
    cost_amount = cost * quantity
    profit = sale_amount - cost_amount
    charity_amount = round_cents(max(_ZERO, profit) * pct / _HUNDRED)

    return PriceBreakdown(
        unit_price=unit,
        quantity=quantity,
        subtotal=subtotal,
        discount_amount=discount_amount,
        sale_amount=sale_amount,
        cost_amount=cost_amount,
        profit=profit,
        charity_percentage=pct,
        charity_amount=charity_amount,
    )


__all__ = [
    "Discount",
    "NoDiscount",
    "FlatDiscount",
    "PercentageDiscount",
    "PriceBreakdown",
    "compute_price_breakdown",
    "discount_from_inputs",
    "require_cents",
    "round_cents",
    "to_decimal",
]

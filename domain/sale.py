"""
Domain: Sale events.

A sale records one product line in one size, with every monetary figure
computed at the time of sale (see domain/pricing.py). The charity percentage is
copied from the product so later product edits never rewrite history.

Invariants enforced here:
- quantity is a positive integer and size is required.
- 0 <= discount_amount <= subtotal and sale_amount = subtotal - discount_amount.
- profit = sale_amount - cost_amount.
- charity_amount >= 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from .errors import ValidationError
from .pricing import PriceBreakdown
from .size import Size
from .time import require_utc_timestamp


class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"


class SaleMode(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """
    Immutable record of a sale.

    All timestamps must be passed explicitly.
    """

    sale_id: UUID
    product_id: UUID
    customer_id: Optional[UUID]
    quantity: int
    size: Size
    unit_price: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    sale_amount: Decimal
    cost_amount: Decimal
    profit: Decimal
    charity_percentage: Decimal
    charity_amount: Decimal
    payment_mode: PaymentMode
    sale_mode: SaleMode
    sale_date: datetime
    customer_email: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("sale_date", self.sale_date)
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)

        if self.quantity <= 0:
            raise ValidationError("quantity must be greater than 0")
        if self.discount_amount < 0 or self.discount_amount > self.subtotal:
            raise ValidationError("discount_amount must be between 0 and the subtotal")
        if self.sale_amount != self.subtotal - self.discount_amount:
            raise ValidationError("sale_amount must equal subtotal - discount_amount")
        if self.profit != self.sale_amount - self.cost_amount:
            raise ValidationError("profit must equal sale_amount - cost_amount")
        if self.charity_amount < 0:
            raise ValidationError("charity_amount must be >= 0")

    @staticmethod
    def from_breakdown(
        *,
        sale_id: UUID,
        product_id: UUID,
        customer_id: Optional[UUID],
        size: Size,
        breakdown: PriceBreakdown,
        payment_mode: PaymentMode,
        sale_mode: SaleMode,
        sale_date: datetime,
        customer_email: Optional[str] = None,
        created_by: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "SaleRecord":
        return SaleRecord(
            sale_id=sale_id,
            product_id=product_id,
            customer_id=customer_id,
            quantity=breakdown.quantity,
            size=size,
            unit_price=breakdown.unit_price,
            subtotal=breakdown.subtotal,
            discount_amount=breakdown.discount_amount,
            sale_amount=breakdown.sale_amount,
            cost_amount=breakdown.cost_amount,
            profit=breakdown.profit,
            charity_percentage=breakdown.charity_percentage,
            charity_amount=breakdown.charity_amount,
            payment_mode=payment_mode,
            sale_mode=sale_mode,
            sale_date=sale_date,
            customer_email=customer_email,
            created_by=created_by,
            created_at=created_at,
        )


__all__ = ["PaymentMode", "SaleMode", "SaleRecord"]

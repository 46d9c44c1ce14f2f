"""
Domain: error taxonomy.

Every failure surfaced by the platform is one of these types:
- ValidationError: bad input shape/range. Raised before any write; safe to retry
  after correcting the input.
- NotFoundError: a referenced product, customer, sale or expense does not exist.
- InsufficientStockError: requested quantity exceeds the stock held for a size.
- PersistenceError: a Supabase call failed.
- PartialSaleError: a multi-step sale write failed part way and could not be
  fully undone; some steps remain committed and need manual correction.
"""

from __future__ import annotations

from typing import Sequence
from uuid import UUID


class RetailError(Exception):
    """Base class for all platform errors."""


class ValidationError(RetailError, ValueError):
    pass


class NotFoundError(RetailError, LookupError):
    def __init__(self, entity: str, identifier: object, message: str | None = None) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(message or f"{entity} not found: {identifier}")


class InsufficientStockError(RetailError):
    def __init__(self, product_id: UUID, size: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.size = size
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for size {size}: requested {requested}, available {available}"
        )


class PersistenceError(RetailError, RuntimeError):
    pass


class PartialSaleError(PersistenceError):
    """Raised when earlier sale steps stay committed after a later step failed."""

    def __init__(self, message: str, committed_steps: Sequence[str]) -> None:
        self.committed_steps = list(committed_steps)
        steps = ", ".join(self.committed_steps) or "none"
        super().__init__(
            f"{message}. The sale was partially recorded (committed: {steps}) "
            "and must be corrected manually."
        )


__all__ = [
    "RetailError",
    "ValidationError",
    "NotFoundError",
    "InsufficientStockError",
    "PersistenceError",
    "PartialSaleError",
]

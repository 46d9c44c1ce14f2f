"""
Sale service for recording and deleting sales.

Handles:
- Validation, pricing and the stock check before any write
- Point-of-sale customer resolution (find by mobile, or create)
- The three side effects of a sale: sale row, stock decrement, customer totals
- The inverse on deletion: restore stock, reduce customer totals, remove the row

Two write strategies (SALE_WRITE_STRATEGY):
- "atomic" (default): the side effects run inside the record_sale_atomic() /
  delete_sale_atomic() Postgres functions, so they commit or fail together.
- "stepwise": each side effect is its own request with a conditional update.
  Completed steps register a compensating action; when a later step fails the
  compensations run newest first. If a compensation fails too, PartialSaleError
  reports the steps that stay committed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple
from uuid import UUID, uuid4

from domain.customer import Customer
from domain.errors import (
    InsufficientStockError,
    NotFoundError,
    PartialSaleError,
    PersistenceError,
    RetailError,
    ValidationError,
)
from domain.pricing import Discount, FlatDiscount, NoDiscount, PercentageDiscount
from domain.product import Product
from domain.sale import PaymentMode, SaleMode, SaleRecord
from domain.size import Size
from domain.time import require_utc_timestamp
from repositories.customer_repository import get_customer_by_id
from repositories.product_repository import get_product_by_id
from repositories.sale_repository import (
    AtomicSaleResult,
    delete_sale_atomic,
    delete_sale_row,
    get_sale_by_id,
    insert_sale,
    record_sale_atomic,
)
from services.customer_service import apply_customer_totals, resolve_customer
from services.inventory_service import apply_stock_delta
from services.pricing_service import load_sellable_product, price_sale

logger = logging.getLogger(__name__)

SALE_WRITE_STRATEGY: str = os.getenv("SALE_WRITE_STRATEGY", "atomic")


class SaleStep(str, Enum):
    VALIDATING = "validating"
    PRICING = "pricing"
    RESOLVING_CUSTOMER = "resolving_customer"
    PERSISTING_SALE = "persisting_sale"
    PERSISTING_INVENTORY = "persisting_inventory"
    PERSISTING_CUSTOMER = "persisting_customer"
    REVERSING = "reversing"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class SaleRequest:
    """
    Request to record one product line.

    Customer contact is optional; without a mobile the sale is anonymous.
    """
    product_id: UUID
    size: Size
    quantity: int
    discount: Discount = field(default_factory=NoDiscount)
    payment_mode: PaymentMode = PaymentMode.CASH
    sale_mode: SaleMode = SaleMode.OFFLINE
    customer_mobile: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    created_by: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SaleResult:
    """
    Result of a recorded sale.

    sale: the persisted sale
    product: the product with its stock after the sale
    customer: the customer with updated totals (None for anonymous sales)
    """
    sale: SaleRecord
    product: Product
    customer: Optional[Customer]


@dataclass(frozen=True, slots=True)
class SaleDeletionResult:
    sale: SaleRecord
    product: Product
    customer: Optional[Customer]


class SaleWriter(Protocol):
    def record(self, sale: SaleRecord, product: Product, customer: Optional[Customer]) -> SaleResult:
        ...

    def delete(self, sale: SaleRecord, product: Product, customer: Optional[Customer]) -> SaleDeletionResult:
        ...


def _error_from_atomic(result: AtomicSaleResult, sale: SaleRecord, action: str) -> RetailError:
    """Map a failed Postgres function status onto the error taxonomy."""

    code = (result.error_code or "").upper()
    if code == "PRODUCT_NOT_FOUND":
        return NotFoundError("Product", sale.product_id)
    if code == "CUSTOMER_NOT_FOUND":
        return NotFoundError("Customer", sale.customer_id)
    if code == "SALE_NOT_FOUND":
        return NotFoundError("Sale", sale.sale_id)
    if code == "INSUFFICIENT_STOCK":
        return InsufficientStockError(sale.product_id, sale.size.value, sale.quantity, result.available or 0)
    if code == "VALIDATION_ERROR":
        return ValidationError(result.error_message or "Invalid sale")
    return PersistenceError(f"Failed to {action}: {result.error_message or code or 'unknown error'}")


class AtomicSaleWriter:
    """Runs the three side effects in one database transaction."""

    def record(self, sale: SaleRecord, product: Product, customer: Optional[Customer]) -> SaleResult:
        result = record_sale_atomic(sale)
        if not result.success:
            raise _error_from_atomic(result, sale, "record sale")

        return SaleResult(
            sale=sale,
            product=product.with_inventory(product.size_inventory.apply_delta(sale.size, -sale.quantity)),
            customer=customer.apply_totals_delta(sale.sale_amount, sale.charity_amount) if customer else None,
        )

    def delete(self, sale: SaleRecord, product: Product, customer: Optional[Customer]) -> SaleDeletionResult:
        result = delete_sale_atomic(sale.sale_id)
        if not result.success:
            raise _error_from_atomic(result, sale, "delete sale")

        return SaleDeletionResult(
            sale=sale,
            product=product.with_inventory(product.size_inventory.apply_delta(sale.size, sale.quantity)),
            customer=customer.apply_totals_delta(-sale.sale_amount, -sale.charity_amount) if customer else None,
        )


class CompensationLog:
    """
    Undo actions for the steps committed so far, newest last.

    unwind() runs them newest first. A failing undo stops the unwind and raises
    PartialSaleError naming every step still committed.
    """

    def __init__(self) -> None:
        self._entries: List[Tuple[SaleStep, Callable[[], object]]] = []

    def committed(self, step: SaleStep, undo: Callable[[], object]) -> None:
        self._entries.append((step, undo))

    @property
    def committed_steps(self) -> List[SaleStep]:
        return [step for step, _ in self._entries]

    def unwind(self, failure: Exception) -> None:
        while self._entries:
            step, undo = self._entries[-1]
            try:
                undo()
            except RetailError as undo_error:
                logger.error(
                    "Compensation failed, sale left partially written",
                    extra={"step": step.value, "error": str(undo_error)},
                )
                raise PartialSaleError(
                    str(failure), [s.value for s in self.committed_steps]
                ) from undo_error
            self._entries.pop()
            logger.warning("Compensated sale step", extra={"step": step.value})


class StepwiseSaleWriter:
    """Runs the side effects as separate conditional writes with compensation."""

    def record(self, sale: SaleRecord, product: Product, customer: Optional[Customer]) -> SaleResult:
        log = CompensationLog()
        try:
            stored = insert_sale(sale)
            log.committed(SaleStep.PERSISTING_SALE, lambda: delete_sale_row(sale.sale_id))

            updated_product = apply_stock_delta(
                sale.product_id, sale.size, -sale.quantity, require_available=True
            )
            log.committed(
                SaleStep.PERSISTING_INVENTORY,
                lambda: apply_stock_delta(sale.product_id, sale.size, sale.quantity),
            )

            updated_customer = None
            if customer is not None:
                updated_customer = apply_customer_totals(
                    customer.customer_id, sale.sale_amount, sale.charity_amount
                )
        except RetailError as e:
            log.unwind(e)
            raise

        return SaleResult(sale=stored, product=updated_product, customer=updated_customer)

    def delete(self, sale: SaleRecord, product: Product, customer: Optional[Customer]) -> SaleDeletionResult:
        log = CompensationLog()
        try:
            updated_product = apply_stock_delta(sale.product_id, sale.size, sale.quantity)
            log.committed(
                SaleStep.PERSISTING_INVENTORY,
                lambda: apply_stock_delta(sale.product_id, sale.size, -sale.quantity),
            )

            updated_customer = None
            if customer is not None:
                updated_customer = apply_customer_totals(
                    customer.customer_id, -sale.sale_amount, -sale.charity_amount
                )
                log.committed(
                    SaleStep.PERSISTING_CUSTOMER,
                    lambda: apply_customer_totals(
                        customer.customer_id, sale.sale_amount, sale.charity_amount
                    ),
                )

            if not delete_sale_row(sale.sale_id):
                raise NotFoundError("Sale", sale.sale_id)
        except RetailError as e:
            log.unwind(e)
            raise

        return SaleDeletionResult(sale=sale, product=updated_product, customer=updated_customer)


def get_sale_writer(strategy: Optional[str] = None) -> SaleWriter:
    name = (strategy or SALE_WRITE_STRATEGY).strip().lower()
    if name == "atomic":
        return AtomicSaleWriter()
    if name == "stepwise":
        return StepwiseSaleWriter()
    raise ValueError(f"Unknown SALE_WRITE_STRATEGY '{name}'. Use 'atomic' or 'stepwise'.")


def _validate_request(request: SaleRequest) -> None:
    if request.product_id is None:
        raise ValidationError("Please select a product")
    if request.size is None:
        raise ValidationError("Please select a size")
    if not isinstance(request.size, Size):
        raise ValidationError(f"Invalid size: {request.size!r}")
    if isinstance(request.quantity, bool) or not isinstance(request.quantity, int) or request.quantity <= 0:
        raise ValidationError("quantity must be a positive integer")
    if not isinstance(request.discount, (NoDiscount, FlatDiscount, PercentageDiscount)):
        raise ValidationError("Invalid discount")


def record_sale(
    request: SaleRequest,
    *,
    sale_date: Optional[datetime] = None,
    writer: Optional[SaleWriter] = None,
) -> SaleResult:
    """
    Record a sale and its side effects.

    Process:
    1. Validate the request (no side effects on failure)
    2. Load the product and price the sale
    3. Check stock for the size (InsufficientStockError, no side effects)
    4. Resolve or create the customer by mobile
    5. Persist the sale, decrement stock, add customer totals

    Raises:
        ValidationError, NotFoundError, InsufficientStockError: nothing was written
            (except a customer created in step 4)
        PersistenceError: a write failed; with the atomic writer nothing was
            committed, with the stepwise writer committed steps were undone
        PartialSaleError: some steps stay committed and need manual correction

    Example:
        result = record_sale(SaleRequest(product_id=pid, size=Size.M, quantity=2,
                                         discount=FlatDiscount(Decimal("200"))))
        print(f"Sold for {result.sale.sale_amount}, {result.sale.charity_amount} to charity")
    """
    step = SaleStep.VALIDATING
    try:
        _validate_request(request)
        when = sale_date or datetime.now(timezone.utc)
        require_utc_timestamp("sale_date", when)

        step = SaleStep.PRICING
        product = load_sellable_product(request.product_id)
        breakdown = price_sale(product, request.quantity, request.discount)
        available = product.stock_for(request.size)
        if available < request.quantity:
            raise InsufficientStockError(product.product_id, request.size.value, request.quantity, available)

        step = SaleStep.RESOLVING_CUSTOMER
        customer = resolve_customer(request.customer_mobile, request.customer_name, request.customer_email)

        sale = SaleRecord.from_breakdown(
            sale_id=uuid4(),
            product_id=product.product_id,
            customer_id=customer.customer_id if customer else None,
            size=request.size,
            breakdown=breakdown,
            payment_mode=request.payment_mode,
            sale_mode=request.sale_mode,
            sale_date=when,
            customer_email=request.customer_email or (customer.email if customer else None),
            created_by=request.created_by,
        )

        step = SaleStep.PERSISTING_SALE
        result = (writer or get_sale_writer()).record(sale, product, customer)
    except RetailError as e:
        logger.warning(
            "Sale rejected",
            extra={"product_id": str(request.product_id), "step": step.value, "error": str(e)},
        )
        raise

    logger.info(
        "Sale recorded",
        extra={
            "sale_id": str(result.sale.sale_id),
            "product_id": str(product.product_id),
            "size": request.size.value,
            "quantity": request.quantity,
            "sale_amount": str(result.sale.sale_amount),
            "charity_amount": str(result.sale.charity_amount),
            "step": SaleStep.DONE.value,
        },
    )
    return result


def delete_sale(sale_id: UUID, *, writer: Optional[SaleWriter] = None) -> SaleDeletionResult:
    """
    Delete a sale and reverse its side effects.

    Restores the sold quantity to the product's size, subtracts the sale from
    the customer's totals (floored at zero) and removes the sale row.

    Raises:
        NotFoundError: the sale, its product or its customer does not exist
            (checked before any write)
        PersistenceError / PartialSaleError: see record_sale
    """
    step = SaleStep.VALIDATING
    try:
        sale = get_sale_by_id(sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)

        product = get_product_by_id(sale.product_id)
        if product is None:
            raise NotFoundError("Product", sale.product_id)

        customer = None
        if sale.customer_id is not None:
            customer = get_customer_by_id(sale.customer_id)
            if customer is None:
                raise NotFoundError("Customer", sale.customer_id)

        step = SaleStep.REVERSING
        result = (writer or get_sale_writer()).delete(sale, product, customer)
    except RetailError as e:
        logger.warning(
            "Sale deletion rejected",
            extra={"sale_id": str(sale_id), "step": step.value, "error": str(e)},
        )
        raise

    logger.info(
        "Sale deleted",
        extra={
            "sale_id": str(sale_id),
            "restored_quantity": sale.quantity,
            "size": sale.size.value,
            "step": SaleStep.REVERSING.value,
        },
    )
    return result


__all__ = [
    "AtomicSaleWriter",
    "CompensationLog",
    "SaleDeletionResult",
    "SaleRequest",
    "SaleResult",
    "SaleStep",
    "SaleWriter",
    "StepwiseSaleWriter",
    "delete_sale",
    "get_sale_writer",
    "record_sale",
]

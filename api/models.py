"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Money values are Decimals and serialize as strings.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.customer import Customer
from domain.expense import Expense, ExpenseCategory
from domain.pricing import Discount, PriceBreakdown, discount_from_inputs
from domain.product import Product, ProductCategory
from domain.sale import PaymentMode, SaleMode, SaleRecord
from domain.size import Size, SizeInventory


# ============================================================================
# Shared Models
# ============================================================================

class SizeInventoryModel(BaseModel):
    """Units held (or added) per size."""
    M: int = Field(0, ge=0)
    L: int = Field(0, ge=0)
    XL: int = Field(0, ge=0)
    XXL: int = Field(0, ge=0)

    def to_domain(self) -> SizeInventory:
        return SizeInventory(m=self.M, l=self.L, xl=self.XL, xxl=self.XXL)

    @classmethod
    def from_domain(cls, inventory: SizeInventory) -> "SizeInventoryModel":
        return cls(**inventory.to_mapping())

    class Config:
        json_schema_extra = {"example": {"M": 3, "L": 5, "XL": 0, "XXL": 2}}


class DiscountModel(BaseModel):
    """Either a flat amount or a percentage of the subtotal, never both."""
    amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None

    def to_domain(self) -> Discount:
        return discount_from_inputs(amount=self.amount, percentage=self.percentage)


class PriceBreakdownResponse(BaseModel):
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    discount_amount: Decimal
    sale_amount: Decimal
    cost_amount: Decimal
    profit: Decimal
    charity_percentage: Decimal
    charity_amount: Decimal
    is_loss: bool

    @classmethod
    def from_domain(cls, breakdown: PriceBreakdown) -> "PriceBreakdownResponse":
        return cls(
            unit_price=breakdown.unit_price,
            quantity=breakdown.quantity,
            subtotal=breakdown.subtotal,
            discount_amount=breakdown.discount_amount,
            sale_amount=breakdown.sale_amount,
            cost_amount=breakdown.cost_amount,
            profit=breakdown.profit,
            charity_percentage=breakdown.charity_percentage,
            charity_amount=breakdown.charity_amount,
            is_loss=breakdown.is_loss,
        )


# ============================================================================
# Product Models
# ============================================================================

class ProductResponse(BaseModel):
    product_id: UUID
    name: str
    sku: str
    category: ProductCategory
    cost_price: Decimal
    selling_price: Decimal
    charity_percentage: Decimal
    size_inventory: SizeInventoryModel
    total_units: int
    is_active: bool
    image_url: Optional[str] = None
    images: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            product_id=product.product_id,
            name=product.name,
            sku=product.sku,
            category=product.category,
            cost_price=product.cost_price,
            selling_price=product.selling_price,
            charity_percentage=product.charity_percentage,
            size_inventory=SizeInventoryModel.from_domain(product.size_inventory),
            total_units=product.size_inventory.total_units,
            is_active=product.is_active,
            image_url=product.image_url,
            images=list(product.images),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductCreateRequest(BaseModel):
    """Request to create a product with its opening stock."""
    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    category: ProductCategory
    cost_price: Decimal = Field(..., ge=0)
    selling_price: Decimal = Field(..., ge=0)
    charity_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    size_inventory: SizeInventoryModel = Field(default_factory=SizeInventoryModel)
    image_url: Optional[str] = None
    images: List[str] = []

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Logo Tee",
                "sku": "TEE-001",
                "category": "T-Shirt",
                "cost_price": "500.00",
                "selling_price": "999.00",
                "charity_percentage": "10",
                "size_inventory": {"M": 3, "L": 5, "XL": 0, "XXL": 2},
            }
        }


class ProductUpdateRequest(BaseModel):
    """Partial product edit. Stock is changed through restock and sales only."""
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[ProductCategory] = None
    cost_price: Optional[Decimal] = Field(None, ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)
    charity_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    image_url: Optional[str] = None
    images: Optional[List[str]] = None


class RestockRequest(BaseModel):
    additions: SizeInventoryModel

    class Config:
        json_schema_extra = {"example": {"additions": {"M": 5, "XL": 2}}}


class QuoteRequest(BaseModel):
    """Request to price a sale without recording it."""
    size: Size
    quantity: int = Field(..., gt=0)
    discount: Optional[DiscountModel] = None

    class Config:
        json_schema_extra = {
            "example": {"size": "M", "quantity": 2, "discount": {"amount": "200"}}
        }


class QuoteResponse(BaseModel):
    product_id: UUID
    size: Size
    available_stock: int
    in_stock: bool
    breakdown: PriceBreakdownResponse


# ============================================================================
# Customer Models
# ============================================================================

class CustomerResponse(BaseModel):
    customer_id: UUID
    name: str
    mobile: str
    email: Optional[str] = None
    total_spent: Decimal
    total_charity: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            customer_id=customer.customer_id,
            name=customer.name,
            mobile=customer.mobile,
            email=customer.email,
            total_spent=customer.total_spent,
            total_charity=customer.total_charity,
            created_at=customer.created_at,
            updated_at=customer.updated_at,
        )


class CustomerRequest(BaseModel):
    name: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=1)
    email: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"name": "Asha Rao", "mobile": "9876543210", "email": "asha@example.com"}
        }


# ============================================================================
# Sale Models
# ============================================================================

class SaleResponse(BaseModel):
    sale_id: UUID
    product_id: UUID
    customer_id: Optional[UUID] = None
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
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    customer_name: Optional[str] = None

    @classmethod
    def from_domain(
        cls,
        sale: SaleRecord,
        *,
        product_name: Optional[str] = None,
        product_sku: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> "SaleResponse":
        return cls(
            sale_id=sale.sale_id,
            product_id=sale.product_id,
            customer_id=sale.customer_id,
            quantity=sale.quantity,
            size=sale.size,
            unit_price=sale.unit_price,
            subtotal=sale.subtotal,
            discount_amount=sale.discount_amount,
            sale_amount=sale.sale_amount,
            cost_amount=sale.cost_amount,
            profit=sale.profit,
            charity_percentage=sale.charity_percentage,
            charity_amount=sale.charity_amount,
            payment_mode=sale.payment_mode,
            sale_mode=sale.sale_mode,
            sale_date=sale.sale_date,
            customer_email=sale.customer_email,
            created_by=sale.created_by,
            product_name=product_name,
            product_sku=product_sku,
            customer_name=customer_name,
        )


class SaleCreateRequest(BaseModel):
    """Request to record a sale of one product line."""
    product_id: UUID
    size: Size
    quantity: int = Field(..., gt=0)
    discount: Optional[DiscountModel] = None
    payment_mode: PaymentMode = PaymentMode.CASH
    sale_mode: SaleMode = SaleMode.OFFLINE
    customer_mobile: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    created_by: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "product_id": "123e4567-e89b-12d3-a456-426614174000",
                "size": "M",
                "quantity": 2,
                "discount": {"amount": "200"},
                "payment_mode": "UPI",
                "sale_mode": "Offline",
                "customer_mobile": "9876543210",
                "customer_name": "Asha Rao",
            }
        }


class SaleCreateResponse(BaseModel):
    """Persisted sale plus the product stock and customer totals after it."""
    sale: SaleResponse
    product: ProductResponse
    customer: Optional[CustomerResponse] = None


class SaleDeletionResponse(BaseModel):
    deleted_sale_id: UUID
    restored_size: Size
    restored_quantity: int
    product: ProductResponse
    customer: Optional[CustomerResponse] = None


class CustomerHistoryDay(BaseModel):
    day: date
    sales: List[SaleResponse]
    total: Decimal


class CustomerHistoryResponse(BaseModel):
    customer: CustomerResponse
    total_revenue: Decimal
    total_charity: Decimal
    sales_count: int
    days: List[CustomerHistoryDay]


# ============================================================================
# Expense Models
# ============================================================================

class ExpenseRequest(BaseModel):
    category: ExpenseCategory
    amount: Decimal = Field(..., gt=0)
    expense_date: date
    notes: Optional[str] = None
    invoice_url: Optional[str] = None
    created_by: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "category": "Fabric",
                "amount": "12500.00",
                "expense_date": "2025-01-15",
                "notes": "Cotton roll",
            }
        }


class ExpenseResponse(BaseModel):
    expense_id: UUID
    category: ExpenseCategory
    amount: Decimal
    expense_date: date
    notes: Optional[str] = None
    invoice_url: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, expense: Expense) -> "ExpenseResponse":
        return cls(
            expense_id=expense.expense_id,
            category=expense.category,
            amount=expense.amount,
            expense_date=expense.expense_date,
            notes=expense.notes,
            invoice_url=expense.invoice_url,
            created_by=expense.created_by,
            created_at=expense.created_at,
        )


class ExpenseListResponse(BaseModel):
    items: List[ExpenseResponse]
    total: Decimal
    month_total: Decimal
    by_category: Dict[str, Decimal]


# ============================================================================
# Report Models
# ============================================================================

class ProductAmountResponse(BaseModel):
    product_id: UUID
    name: str
    units: int
    amount: Decimal


class CharityReportResponse(BaseModel):
    total_revenue: Decimal
    total_profit: Decimal
    total_charity: Decimal
    this_month_charity: Decimal
    last_month_charity: Decimal
    share_of_profit: Decimal
    month_growth: Optional[Decimal] = None
    top_products: List[ProductAmountResponse]


class FinancialSummaryResponse(BaseModel):
    total_revenue: Decimal
    total_profit: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    total_charity: Decimal
    sales_count: int
    expenses_by_category: Dict[str, Decimal]


class StockAlertsResponse(BaseModel):
    threshold: int
    out_of_stock: List[ProductResponse]
    low_stock: List[ProductResponse]


class LifetimeStockResponse(BaseModel):
    current_units: int
    sold_units: int
    lifetime_units: int


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str

    class Config:
        json_schema_extra = {
            "example": {"detail": "Insufficient stock for size M: requested 5, available 3"}
        }

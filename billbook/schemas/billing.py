"""Pydantic schemas for invoices, dyeing bills and payments."""
from datetime import datetime, date
from typing import Optional, List
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field

from billbook.core.enum_utils import (
    create_uppercase_validator,
    VALID_TAX_MODES,
    VALID_PAYMENT_METHODS,
)
from billbook.models.billing import TaxMode, PaymentMethod
from billbook.schemas.base import BaseResponseSchema, BaseCreateSchema, PaginatedResponse


# ==================== Invoice Schemas ====================

class InvoiceItemCreate(BaseCreateSchema):
    """Invoice line as entered."""
    item_name: str = Field(..., min_length=1, max_length=300)
    hsn_code: str = Field(..., min_length=4, max_length=8)
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    rate: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)


class InvoiceCreate(BaseCreateSchema):
    """
    Schema for creating an invoice.

    Number, amounts, tax split and status are computed by the service.
    """
    customer_id: UUID
    invoice_date: date = Field(default_factory=date.today)
    tax_mode: TaxMode = TaxMode.INTRASTATE
    tax_rate: Decimal = Field(Decimal("18"), ge=0, le=100, decimal_places=2, description="GST rate in percent")
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None

    normalize_tax_mode = create_uppercase_validator('tax_mode', VALID_TAX_MODES)


class InvoiceItemResponse(BaseResponseSchema):
    """Response schema for InvoiceItem."""
    id: UUID
    line_number: int
    item_name: str
    hsn_code: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class InvoiceBrief(BaseResponseSchema):
    """Brief invoice info for lists."""
    id: UUID
    invoice_number: str
    customer_id: UUID
    invoice_date: date
    total_amount: Decimal
    paid_amount: Decimal
    status: str


class InvoiceResponse(BaseResponseSchema):
    """Full invoice with GST split and items."""
    id: UUID
    invoice_number: str
    customer_id: UUID
    invoice_date: date
    subtotal: Decimal
    tax_mode: str
    tax_rate: Decimal
    cgst_rate: Optional[Decimal] = None
    sgst_rate: Optional[Decimal] = None
    igst_rate: Optional[Decimal] = None
    cgst_amount: Optional[Decimal] = None
    sgst_amount: Optional[Decimal] = None
    igst_amount: Optional[Decimal] = None
    tax_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    eway_bill_required: bool = Field(False, description="Total at or above the e-way bill threshold")
    status: str
    notes: Optional[str] = None
    items: List[InvoiceItemResponse] = []
    created_at: datetime
    updated_at: datetime


class InvoiceListResponse(PaginatedResponse):
    """Response for listing invoices."""
    items: List[InvoiceBrief]
    total_value: Decimal = Decimal("0")


# ==================== Dyeing Bill Schemas ====================

class DyeingBillItemCreate(BaseCreateSchema):
    """Dyeing bill line as entered."""
    product_name: str = Field(..., min_length=1, max_length=300)
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    rate: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)


class DyeingBillCreate(BaseCreateSchema):
    """Schema for creating a dyeing bill."""
    customer_id: UUID
    bill_date: date = Field(default_factory=date.today)
    items: List[DyeingBillItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None


class DyeingBillItemResponse(BaseResponseSchema):
    id: UUID
    line_number: int
    product_name: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class DyeingBillBrief(BaseResponseSchema):
    id: UUID
    bill_number: str
    customer_id: UUID
    bill_date: date
    total_amount: Decimal
    paid_amount: Decimal
    status: str


class DyeingBillResponse(BaseResponseSchema):
    id: UUID
    bill_number: str
    customer_id: UUID
    bill_date: date
    total_amount: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    status: str
    notes: Optional[str] = None
    items: List[DyeingBillItemResponse] = []
    created_at: datetime
    updated_at: datetime


class DyeingBillListResponse(PaginatedResponse):
    items: List[DyeingBillBrief]
    total_value: Decimal = Decimal("0")


# ==================== Payment Schemas ====================

class PaymentCreate(BaseCreateSchema):
    """
    Payment received from a customer.

    The amount is checked against the customer's outstanding balance by the
    service, not here.
    """
    customer_id: UUID
    amount: Decimal = Field(..., max_digits=14, decimal_places=2)
    payment_date: date = Field(default_factory=date.today)
    payment_method: PaymentMethod = PaymentMethod.CASH
    invoice_id: Optional[UUID] = None
    notes: Optional[str] = None

    normalize_payment_method = create_uppercase_validator('payment_method', VALID_PAYMENT_METHODS)


class PaymentResponse(BaseResponseSchema):
    id: UUID
    customer_id: UUID
    invoice_id: Optional[UUID] = None
    amount: Decimal
    payment_date: date
    payment_method: str
    notes: Optional[str] = None
    created_at: datetime


class PaymentListResponse(PaginatedResponse):
    items: List[PaymentResponse]
    total_amount: Decimal = Decimal("0")

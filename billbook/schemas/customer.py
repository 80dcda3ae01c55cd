from pydantic import BaseModel, Field, EmailStr

from billbook.schemas.base import BaseResponseSchema, BaseCreateSchema, BaseUpdateSchema, PaginatedResponse
from typing import Optional, List, Dict
from datetime import datetime, date
from decimal import Decimal
import uuid


# ==================== CUSTOMER SCHEMAS ====================

class CustomerBase(BaseModel):
    """Base customer schema."""
    name: str = Field(..., min_length=1, max_length=200)
    gstin: Optional[str] = Field(None, max_length=20, description="Validated and normalized by the service")
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100, description="Filled from the GSTIN when left empty")
    pincode: Optional[str] = Field(None, max_length=10)


class CustomerCreate(CustomerBase, BaseCreateSchema):
    """Customer creation schema."""
    pass


class CustomerUpdate(BaseUpdateSchema):
    """Customer update schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    gstin: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)


class CustomerResponse(BaseResponseSchema):
    """Customer response schema."""
    id: uuid.UUID
    name: str
    gstin: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    outstanding_balance: Decimal
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(PaginatedResponse):
    """Response for listing customers."""
    items: List[CustomerResponse]


# ==================== LEDGER SCHEMAS ====================

class CustomerBalanceResponse(BaseModel):
    """Result of a balance recomputation."""
    customer_id: uuid.UUID
    outstanding_balance: Decimal


class CustomerStatementResponse(BaseResponseSchema):
    """Customer balance card."""
    customer_id: uuid.UUID
    customer_name: str
    total_billed: Decimal
    total_paid: Decimal
    pending: Decimal
    payments_received: Decimal
    invoice_count: int
    dyeing_bill_count: int
    payment_count: int
    last_document_date: Optional[date] = None


class ReconcileResponse(BaseModel):
    """Result of reconciling every customer."""
    customers_reconciled: int
    balances: Dict[str, Decimal]

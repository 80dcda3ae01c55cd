"""Billing models: sales invoices, dyeing bills and payments.

Supports:
- Tax invoice with CGST+SGST (intrastate) or IGST (interstate)
- Dyeing service bill (no GST split)
- Payments received from customers
"""
import uuid
from datetime import datetime, date, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Date
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billbook.config import settings
from billbook.database import Base
from billbook.db_types import UUIDType, Money, Rate, Quantity

if TYPE_CHECKING:
    from billbook.models.customer import Customer


class TaxMode(str, Enum):
    """GST jurisdiction of a sale."""
    INTRASTATE = "INTRASTATE"  # CGST + SGST, half rate each
    INTERSTATE = "INTERSTATE"  # IGST at full rate


class DocumentStatus(str, Enum):
    """Payment status of an invoice or dyeing bill, derived from paid vs. total."""
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class PaymentMethod(str, Enum):
    """How a payment was received."""
    CASH = "CASH"
    CHEQUE = "CHEQUE"
    BANK_TRANSFER = "BANK_TRANSFER"
    UPI = "UPI"
    OTHER = "OTHER"


class Invoice(Base):
    """
    Sales (tax) invoice.

    total_amount = subtotal + tax_amount, where tax_amount is either
    cgst_amount + sgst_amount or igst_amount depending on tax_mode.
    """
    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    invoice_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="e.g., INV-00001"
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Amounts
    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    # GST
    tax_mode: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="INTRASTATE, INTERSTATE"
    )
    tax_rate: Mapped[Decimal] = mapped_column(Rate, nullable=False, default=Decimal("0"))
    cgst_rate: Mapped[Optional[Decimal]] = mapped_column(Rate, nullable=True)
    sgst_rate: Mapped[Optional[Decimal]] = mapped_column(Rate, nullable=True)
    igst_rate: Mapped[Optional[Decimal]] = mapped_column(Rate, nullable=True)
    cgst_amount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    sgst_amount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    igst_amount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    tax_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    paid_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DocumentStatus.PENDING.value,
        comment="PENDING, PARTIAL, PAID"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    customer: Mapped["Customer"] = relationship("Customer", back_populates="invoices")
    items: Mapped[List["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.line_number",
    )

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.paid_amount

    @property
    def eway_bill_required(self) -> bool:
        return self.total_amount >= settings.EWAY_BILL_THRESHOLD

    def __repr__(self) -> str:
        return f"<Invoice(number='{self.invoice_number}', total={self.total_amount})>"


class InvoiceItem(Base):
    """Invoice line item with HSN classification."""
    __tablename__ = "invoice_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    item_name: Mapped[str] = mapped_column(String(300), nullable=False)
    hsn_code: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        comment="HSN code for goods, SAC for services"
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Money, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False, comment="quantity x rate")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="items")

    def __repr__(self) -> str:
        return f"<InvoiceItem(name='{self.item_name}', amount={self.amount})>"


class DyeingBill(Base):
    """
    Dyeing service bill.

    Same numbering and status rules as Invoice, no GST split:
    total_amount = sum of item amounts.
    """
    __tablename__ = "dyeing_bills"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    bill_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="e.g., DYE-00001"
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    bill_date: Mapped[date] = mapped_column(Date, nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    paid_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DocumentStatus.PENDING.value,
        comment="PENDING, PARTIAL, PAID"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    customer: Mapped["Customer"] = relationship("Customer", back_populates="dyeing_bills")
    items: Mapped[List["DyeingBillItem"]] = relationship(
        "DyeingBillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="DyeingBillItem.line_number",
    )

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.paid_amount

    def __repr__(self) -> str:
        return f"<DyeingBill(number='{self.bill_number}', total={self.total_amount})>"


class DyeingBillItem(Base):
    """Dyeing bill line: product dyed, quantity and rate."""
    __tablename__ = "dyeing_bill_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    bill_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("dyeing_bills.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    product_name: Mapped[str] = mapped_column(String(300), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Money, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False, comment="quantity x rate")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    bill: Mapped["DyeingBill"] = relationship("DyeingBill", back_populates="items")

    def __repr__(self) -> str:
        return f"<DyeingBillItem(product='{self.product_name}', amount={self.amount})>"


class Payment(Base):
    """
    Payment received from a customer. Immutable once created.

    The amount is allocated to the customer's open invoices and dyeing bills
    when the payment is applied; invoice_id records the invoice it was
    received against, if any.
    """
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    invoice_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType,
        ForeignKey("invoices.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentMethod.CASH.value,
        comment="CASH, CHEQUE, BANK_TRANSFER, UPI, OTHER"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment(customer={self.customer_id}, amount={self.amount})>"

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billbook.database import Base
from billbook.db_types import UUIDType, Money

if TYPE_CHECKING:
    from billbook.models.billing import Invoice, DyeingBill, Payment


class Customer(Base):
    """
    Customer billed through invoices and dyeing bills.

    outstanding_balance is derived: only the ledger reconciler writes it,
    always as a full recomputation over the customer's documents.
    """
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Basic Info
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    gstin: Mapped[Optional[str]] = mapped_column(String(15), nullable=True, index=True)

    # Contact
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Address
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # Ledger
    outstanding_balance: Mapped[Decimal] = mapped_column(
        Money,
        default=Decimal("0"),
        server_default="0",
        nullable=False,
        comment="Derived: sum of unpaid invoice and dyeing bill amounts. Signed."
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships (no cascade: documents restrict customer deletion)
    invoices: Mapped[List["Invoice"]] = relationship(
        "Invoice",
        back_populates="customer",
        passive_deletes="all",
    )
    dyeing_bills: Mapped[List["DyeingBill"]] = relationship(
        "DyeingBill",
        back_populates="customer",
        passive_deletes="all",
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="customer",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"<Customer(name='{self.name}', balance={self.outstanding_balance})>"

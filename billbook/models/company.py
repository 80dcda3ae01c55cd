import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from billbook.database import Base
from billbook.db_types import UUIDType


class CompanyProfile(Base):
    """
    Seller profile (single row).

    Supplies the invoice and dyeing bill numbering prefixes; the sequencer
    receives them as an explicit SequencePrefixes value.
    """
    __tablename__ = "company_profile"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gstin: Mapped[Optional[str]] = mapped_column(String(15), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Numbering
    invoice_prefix: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="INV",
        comment="Invoice number prefix, e.g. INV -> INV-00001"
    )
    dyeing_prefix: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="DYE",
        comment="Dyeing bill number prefix, e.g. DYE -> DYE-00001"
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

    def __repr__(self) -> str:
        return f"<CompanyProfile(name='{self.company_name}', prefixes={self.invoice_prefix}/{self.dyeing_prefix})>"

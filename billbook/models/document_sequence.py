"""
Document Sequence Model for Gapless Number Generation

FORMAT:
━━━━━━━
• Invoice:     INV-00001
• Dyeing bill: DYE-00001
  ({PREFIX}-{SEQUENCE}, sequence zero-padded to padding_length)

One counter row per (document class, prefix). The row is locked with
SELECT ... FOR UPDATE while a number is allocated, and it only ever moves
forward: deleting a document never gives its number back.

USAGE:
━━━━━━
    from billbook.services.document_sequence_service import DocumentSequenceService

    async def create_invoice(db, prefixes):
        service = DocumentSequenceService(db)
        number = await service.get_next_number(DocumentClass.INVOICE, prefixes.invoice)
        # Returns: INV-00001
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from billbook.database import Base
from billbook.db_types import UUIDType


class DocumentClass(str, Enum):
    """Document classes that use sequence numbering."""
    INVOICE = "INVOICE"
    DYEING_BILL = "DYEING_BILL"


class DocumentSequence(Base):
    """
    Counter row for one numbering series.

    Example:
        document_class = "INVOICE"
        prefix = "INV"
        current_number = 42
        → Next invoice number: INV-00043
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        UniqueConstraint(
            "document_class", "prefix",
            name="uq_document_class_prefix"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    document_class: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="INVOICE, DYEING_BILL"
    )
    prefix: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    # Sequence Counter
    current_number: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Last used sequence number"
    )

    # Formatting
    padding_length: Mapped[int] = mapped_column(
        Integer,
        default=5,
        nullable=False,
        comment="Zero padding for sequence (5 = 00001)"
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

    def format_number(self, number: int) -> str:
        return f"{self.prefix}-{str(number).zfill(self.padding_length)}"

    def get_next_number(self) -> str:
        """
        Generate next document number.

        NOTE: This method increments current_number but does NOT
        commit to database. The caller must handle the transaction.
        """
        self.current_number += 1
        return self.format_number(self.current_number)

    def preview_next_number(self) -> str:
        """Preview next number without incrementing."""
        return self.format_number(self.current_number + 1)

    def __repr__(self) -> str:
        return f"<DocumentSequence({self.document_class}/{self.prefix}: {self.current_number})>"

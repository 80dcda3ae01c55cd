"""
Document Sequence Service for Gapless Number Generation

NUMBERING RULES:
- Format: {PREFIX}-{SEQUENCE}, e.g. INV-00001, DYE-00042
- Independent series per (document class, prefix)
- Strictly increasing; a number is never reused, even after deletion
- Allocation is serialized with a row lock (SELECT FOR UPDATE) on the counter
- A last-issued number that cannot be parsed stops allocation with
  SequenceCorruptionError instead of restarting at 00001

USAGE:
    from billbook.services.document_sequence_service import DocumentSequenceService

    async def create_invoice(db: AsyncSession, prefixes: SequencePrefixes):
        service = DocumentSequenceService(db)
        number = await service.get_next_number(DocumentClass.INVOICE, prefixes.invoice)
        # Returns: INV-00001
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.config import settings
from billbook.core.exceptions import InvalidPrefixError, SequenceCorruptionError
from billbook.models.billing import Invoice, DyeingBill
from billbook.models.document_sequence import DocumentSequence, DocumentClass


logger = logging.getLogger(__name__)

PREFIX_PATTERN = re.compile(r"^[A-Z0-9/]{1,20}$")

# Document class metadata: display name and where issued numbers live
DOCUMENT_METADATA = {
    DocumentClass.INVOICE: {
        "name": "Invoice",
        "model": Invoice,
        "number_column": Invoice.invoice_number,
    },
    DocumentClass.DYEING_BILL: {
        "name": "Dyeing Bill",
        "model": DyeingBill,
        "number_column": DyeingBill.bill_number,
    },
}


@dataclass(frozen=True)
class SequencePrefixes:
    """Numbering prefixes per document class, as configured on the company profile."""
    invoice: str
    dyeing_bill: str

    def for_class(self, document_class: DocumentClass) -> str:
        if document_class == DocumentClass.INVOICE:
            return self.invoice
        return self.dyeing_bill


def validate_prefix(prefix: Optional[str]) -> str:
    """
    Normalize a numbering prefix to uppercase.

    Raises:
        InvalidPrefixError: empty, longer than 20 or containing characters outside A-Z 0-9 /
    """
    normalized = (prefix or "").strip().upper()
    if not PREFIX_PATTERN.match(normalized):
        raise InvalidPrefixError(
            f"Invalid prefix '{prefix}'. Use 1-20 characters from A-Z, 0-9 and '/'",
            details={"prefix": prefix},
        )
    return normalized


def parse_document_number(number: str, prefix: str) -> int:
    """
    Extract the sequence from '{prefix}-{digits}'.

    Raises:
        SequenceCorruptionError: number does not have that shape
    """
    match = re.fullmatch(rf"{re.escape(prefix)}-(\d+)", number or "")
    if not match:
        raise SequenceCorruptionError(
            f"Last issued number '{number}' does not match '{prefix}-NNNNN'; "
            f"refusing to restart the sequence",
            details={"number": number, "prefix": prefix},
        )
    return int(match.group(1))


def _to_document_class(document_class: Union[DocumentClass, str]) -> DocumentClass:
    try:
        return DocumentClass(
            document_class.upper() if isinstance(document_class, str) else document_class
        )
    except ValueError:
        valid_types = ", ".join(c.value for c in DocumentClass)
        raise ValueError(f"Invalid document class '{document_class}'. Valid classes: {valid_types}")


class DocumentSequenceService:
    """
    Service for generating gapless document numbers.

    Uses database-level locking (SELECT FOR UPDATE) on the counter row so
    concurrent document creations never receive the same number. Before a
    number is handed out it is checked against the document table; a
    collision resynchronizes the counter from the documents and retries.
    """

    def __init__(
        self,
        db: AsyncSession,
        padding: int = None,
        max_retries: int = None,
    ):
        """
        Initialize the service.

        Args:
            db: Async database session
            padding: Zero padding for new series (default: SEQUENCE_PADDING)
            max_retries: Collision resync attempts (default: SEQUENCE_MAX_RETRIES)
        """
        self.db = db
        self.padding = padding or settings.SEQUENCE_PADDING
        self.max_retries = settings.SEQUENCE_MAX_RETRIES if max_retries is None else max_retries

    async def get_next_number(
        self,
        document_class: Union[DocumentClass, str],
        prefix: str,
    ) -> str:
        """
        Allocate the next document number.

        The counter increment is flushed into the caller's transaction; it
        becomes permanent when the document that uses it is committed.

        Args:
            document_class: INVOICE or DYEING_BILL
            prefix: Numbering prefix, e.g. INV

        Returns:
            Formatted document number, e.g., INV-00001

        Raises:
            InvalidPrefixError: prefix is malformed
            SequenceCorruptionError: last issued number cannot be parsed, or no
                free number was found after max_retries resyncs
        """
        doc_class = _to_document_class(document_class)
        prefix = validate_prefix(prefix)

        # Lock and get/create sequence record
        sequence = await self._get_or_create_sequence(doc_class, prefix)

        for attempt in range(self.max_retries + 1):
            old_number = sequence.current_number
            doc_number = sequence.get_next_number()

            if not await self._number_exists(doc_class, doc_number):
                await self.db.flush()
                logger.info(
                    f"Allocated {doc_class.value} number {doc_number} "
                    f"(sequence {old_number} -> {sequence.current_number})"
                )
                return doc_number

            # Someone issued this number outside the counter; catch up and retry
            last_issued = await self._last_issued_number(doc_class, prefix)
            logger.warning(
                f"{doc_class.value} number {doc_number} already exists; "
                f"resyncing sequence to {max(last_issued, sequence.current_number)} "
                f"(attempt {attempt + 1}/{self.max_retries + 1})"
            )
            if last_issued > sequence.current_number:
                sequence.current_number = last_issued

        logger.error(f"No free {doc_class.value} number for prefix {prefix} after resync")
        raise SequenceCorruptionError(
            f"Could not allocate a free {DOCUMENT_METADATA[doc_class]['name'].lower()} "
            f"number for prefix '{prefix}' after {self.max_retries + 1} attempts",
            details={"document_class": doc_class.value, "prefix": prefix},
        )

    async def preview_next_number(
        self,
        document_class: Union[DocumentClass, str],
        prefix: str,
    ) -> str:
        """
        Preview what the next number would be without incrementing.

        Raises:
            SequenceCorruptionError: no counter exists yet and the last issued
                number cannot be parsed
        """
        doc_class = _to_document_class(document_class)
        prefix = validate_prefix(prefix)

        # Get sequence without locking
        result = await self.db.execute(
            select(DocumentSequence).where(
                DocumentSequence.document_class == doc_class.value,
                DocumentSequence.prefix == prefix,
            )
        )
        sequence = result.scalar_one_or_none()

        if sequence:
            return sequence.preview_next_number()

        last_issued = await self._last_issued_number(doc_class, prefix)
        return f"{prefix}-{str(last_issued + 1).zfill(self.padding)}"

    async def resync_from_documents(
        self,
        document_class: Union[DocumentClass, str],
        prefix: str,
    ) -> DocumentSequence:
        """
        Move the counter forward to the last issued document number if it lags.

        The counter never moves backwards.
        """
        doc_class = _to_document_class(document_class)
        prefix = validate_prefix(prefix)

        sequence = await self._get_or_create_sequence(doc_class, prefix)
        last_issued = await self._last_issued_number(doc_class, prefix)

        if last_issued > sequence.current_number:
            logger.warning(
                f"Resyncing {doc_class.value}/{prefix} sequence "
                f"{sequence.current_number} -> {last_issued}"
            )
            sequence.current_number = last_issued
            await self.db.flush()

        return sequence

    async def _get_or_create_sequence(
        self,
        document_class: DocumentClass,
        prefix: str,
    ) -> DocumentSequence:
        """
        Get existing sequence with row lock, or create new one.

        A new counter starts at the last number already issued under this
        prefix (most recently created document), so series that predate the
        counter continue where they left off.
        """
        # Try to get existing sequence with lock
        result = await self.db.execute(
            select(DocumentSequence)
            .where(
                DocumentSequence.document_class == document_class.value,
                DocumentSequence.prefix == prefix,
            )
            .with_for_update()
        )
        sequence = result.scalar_one_or_none()

        if sequence:
            return sequence

        # Create new sequence
        starting_number = await self._last_issued_number(document_class, prefix)
        sequence = DocumentSequence(
            document_class=document_class.value,
            prefix=prefix,
            current_number=starting_number,
            padding_length=self.padding,
        )
        self.db.add(sequence)
        await self.db.flush()

        logger.info(
            f"Created {document_class.value} sequence for prefix {prefix} "
            f"starting after {starting_number}"
        )

        # Re-fetch with lock to ensure atomicity
        result = await self.db.execute(
            select(DocumentSequence)
            .where(DocumentSequence.id == sequence.id)
            .with_for_update()
        )
        return result.scalar_one()

    async def _last_issued_number(self, document_class: DocumentClass, prefix: str) -> int:
        """
        Sequence of the most recently created document under this prefix, 0 if none.

        Raises:
            SequenceCorruptionError: that document's number cannot be parsed
        """
        metadata = DOCUMENT_METADATA[document_class]
        model = metadata["model"]
        number_column = metadata["number_column"]

        result = await self.db.execute(
            select(number_column)
            .where(number_column.startswith(f"{prefix}-", autoescape=True))
            .order_by(model.created_at.desc(), number_column.desc())
            .limit(1)
        )
        last_number = result.scalar_one_or_none()

        if last_number is None:
            return 0

        try:
            return parse_document_number(last_number, prefix)
        except SequenceCorruptionError:
            logger.error(f"Unparseable {document_class.value} number '{last_number}' for prefix {prefix}")
            raise

    async def _number_exists(self, document_class: DocumentClass, number: str) -> bool:
        number_column = DOCUMENT_METADATA[document_class]["number_column"]
        result = await self.db.execute(
            select(number_column).where(number_column == number).limit(1)
        )
        return result.scalar_one_or_none() is not None


# Convenience function for quick access
async def get_next_document_number(
    db: AsyncSession,
    document_class: Union[DocumentClass, str],
    prefix: str,
) -> str:
    """
    Quick function to get next document number.

    Usage:
        number = await get_next_document_number(db, "INVOICE", "INV")
    """
    service = DocumentSequenceService(db)
    return await service.get_next_number(document_class, prefix)

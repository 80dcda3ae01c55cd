"""Invoice Service: tax invoice creation and deletion.

Every write runs as one unit inside the request transaction:

    lock customer -> compute amounts and GST -> allocate number
        -> insert header + items -> recompute customer balance

Any failure rolls the whole unit back, including the number allocation.
"""
import uuid
import logging
from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple

from sqlalchemy import select, delete, update, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.core.exceptions import DocumentNotFoundError
from billbook.models.billing import Invoice, InvoiceItem, Payment, DocumentStatus
from billbook.models.document_sequence import DocumentClass
from billbook.schemas.billing import InvoiceCreate
from billbook.services.company_service import CompanyService
from billbook.services.document_sequence_service import DocumentSequenceService, SequencePrefixes
from billbook.services.ledger_service import LedgerService
from billbook.services.tax_calculator import compute_tax, line_amount, round_money


logger = logging.getLogger(__name__)


def derive_status(total: Decimal, paid: Decimal) -> DocumentStatus:
    """PAID when fully paid, PARTIAL when something is paid, else PENDING."""
    if paid >= total:
        return DocumentStatus.PAID
    if paid > 0:
        return DocumentStatus.PARTIAL
    return DocumentStatus.PENDING


class InvoiceService:
    """Creates, deletes and lists tax invoices."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = LedgerService(db)

    async def create_invoice(
        self,
        data: InvoiceCreate,
        prefixes: Optional[SequencePrefixes] = None,
    ) -> Invoice:
        """
        Create an invoice and bring the customer's balance up to date.

        Args:
            data: Customer, date, tax mode/rate and line items
            prefixes: Numbering prefixes (default: from the company profile)

        Raises:
            CustomerNotFoundError: unknown customer
            InvalidTaxInputError: rate out of range
            SequenceCorruptionError: invoice series cannot be continued
        """
        customer = await self.ledger.lock_customer(data.customer_id)

        if prefixes is None:
            prefixes = await CompanyService(self.db).sequence_prefixes()

        items = []
        for line_number, item in enumerate(data.items, start=1):
            items.append(InvoiceItem(
                line_number=line_number,
                item_name=item.item_name,
                hsn_code=item.hsn_code,
                quantity=item.quantity,
                rate=item.rate,
                amount=line_amount(item.quantity, item.rate),
            ))

        subtotal = sum((i.amount for i in items), Decimal("0"))
        breakdown = compute_tax(subtotal, data.tax_rate, data.tax_mode).rounded()

        invoice_number = await DocumentSequenceService(self.db).get_next_number(
            DocumentClass.INVOICE, prefixes.invoice
        )

        invoice = Invoice(
            invoice_number=invoice_number,
            customer_id=customer.id,
            invoice_date=data.invoice_date,
            subtotal=breakdown.subtotal,
            tax_mode=breakdown.mode.value,
            tax_rate=breakdown.tax_rate,
            cgst_rate=breakdown.cgst_rate,
            sgst_rate=breakdown.sgst_rate,
            igst_rate=breakdown.igst_rate,
            cgst_amount=breakdown.cgst_amount,
            sgst_amount=breakdown.sgst_amount,
            igst_amount=breakdown.igst_amount,
            tax_amount=breakdown.tax_amount,
            total_amount=breakdown.total,
            paid_amount=Decimal("0"),
            status=DocumentStatus.PENDING.value,
            notes=data.notes,
            items=items,
        )
        self.db.add(invoice)
        await self.db.flush()

        await self.ledger.recompute_balance(customer.id, customer)

        logger.info(
            f"Created invoice {invoice_number} for customer {customer.id}: "
            f"subtotal {breakdown.subtotal}, tax {breakdown.tax_amount}, total {breakdown.total}"
        )
        return await self.get_invoice(invoice.id)

    async def delete_invoice(self, invoice_id: uuid.UUID) -> str:
        """
        Delete an invoice and its items, then recompute the customer's balance.

        Payments received against the invoice are kept and detached from it.
        The invoice number is not released.

        Returns:
            The deleted invoice number

        Raises:
            DocumentNotFoundError: unknown invoice
        """
        invoice = await self.db.get(Invoice, invoice_id)
        if not invoice:
            raise DocumentNotFoundError(
                f"Invoice {invoice_id} not found",
                details={"invoice_id": str(invoice_id)},
            )

        customer_id = invoice.customer_id
        invoice_number = invoice.invoice_number
        customer = await self.ledger.lock_customer(customer_id)

        await self.db.execute(
            update(Payment).where(Payment.invoice_id == invoice_id).values(invoice_id=None)
        )
        await self.db.execute(delete(InvoiceItem).where(InvoiceItem.invoice_id == invoice_id))
        await self.db.execute(delete(Invoice).where(Invoice.id == invoice_id))

        await self.ledger.recompute_balance(customer_id, customer)

        logger.info(f"Deleted invoice {invoice_number} for customer {customer_id}")
        return invoice_number

    async def get_invoice(self, invoice_id: uuid.UUID) -> Invoice:
        """
        Get invoice with items.

        Raises:
            DocumentNotFoundError: unknown invoice
        """
        result = await self.db.execute(
            select(Invoice)
            .options(selectinload(Invoice.items))
            .where(Invoice.id == invoice_id)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise DocumentNotFoundError(
                f"Invoice {invoice_id} not found",
                details={"invoice_id": str(invoice_id)},
            )
        return invoice

    async def list_invoices(
        self,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Invoice], int, Decimal]:
        """
        List invoices, newest first.

        Returns:
            (page of invoices, total matching, total value of all matching)
        """
        filters = []
        if customer_id:
            filters.append(Invoice.customer_id == customer_id)
        if status:
            filters.append(Invoice.status == status.upper())
        if start_date:
            filters.append(Invoice.invoice_date >= start_date)
        if end_date:
            filters.append(Invoice.invoice_date <= end_date)

        totals = (await self.db.execute(
            select(func.count(Invoice.id), func.coalesce(func.sum(Invoice.total_amount), 0))
            .where(*filters)
        )).one()

        result = await self.db.execute(
            select(Invoice)
            .where(*filters)
            .order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), totals[0], round_money(totals[1])

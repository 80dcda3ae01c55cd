"""
Customer ledger reconciliation.

A customer's outstanding balance is never adjusted incrementally. Every
write that can change it (document create/delete, payment) ends with a full
recomputation from the documents:

    outstanding = (sum invoice.total - sum invoice.paid)
                + (sum dyeing_bill.total - sum dyeing_bill.paid)

Recomputation is idempotent. The customer row lock taken by lock_customer()
is the per-customer serialization point for all of those writes.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.core.exceptions import AggregationError, CustomerNotFoundError
from billbook.models.billing import Invoice, DyeingBill, Payment
from billbook.models.customer import Customer
from billbook.services.tax_calculator import round_money


logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class CustomerStatement:
    """Balance card for one customer."""
    customer_id: uuid.UUID
    customer_name: str
    total_billed: Decimal
    total_paid: Decimal
    pending: Decimal
    payments_received: Decimal
    invoice_count: int
    dyeing_bill_count: int
    payment_count: int
    last_document_date: Optional[date]


class LedgerService:
    """Recomputes and reports customer outstanding balances."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock_customer(self, customer_id: uuid.UUID) -> Customer:
        """
        Load a customer with a row lock held until the transaction ends.

        Raises:
            CustomerNotFoundError: customer does not exist
        """
        result = await self.db.execute(
            select(Customer).where(Customer.id == customer_id).with_for_update()
        )
        customer = result.scalar_one_or_none()
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    async def recompute_balance(
        self,
        customer_id: uuid.UUID,
        customer: Optional[Customer] = None,
    ) -> Decimal:
        """
        Recompute and store a customer's outstanding balance.

        Args:
            customer_id: Customer to reconcile
            customer: Already locked customer row, if the caller holds one

        Returns:
            The stored balance. Negative values are stored as-is.

        Raises:
            CustomerNotFoundError: customer does not exist
            AggregationError: the store failed while summing or writing
        """
        if customer is None:
            customer = await self.lock_customer(customer_id)

        try:
            # Pending document writes must be visible to the aggregates
            await self.db.flush()
            inv_total, inv_paid, bill_total, bill_paid = await self._document_totals(customer_id)

            outstanding = round_money((inv_total - inv_paid) + (bill_total - bill_paid))
            customer.outstanding_balance = outstanding
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Balance recomputation failed for customer {customer_id}: {e}")
            raise AggregationError(
                f"Could not recompute outstanding balance for customer {customer_id}",
                details={"customer_id": str(customer_id)},
            ) from e

        if outstanding < ZERO:
            logger.warning(
                f"Customer {customer_id} has negative outstanding balance {outstanding} "
                f"(invoices {inv_total}/{inv_paid}, dyeing bills {bill_total}/{bill_paid})"
            )
        else:
            logger.debug(f"Customer {customer_id} outstanding balance = {outstanding}")

        return outstanding

    async def recompute_all(self) -> Dict[uuid.UUID, Decimal]:
        """Reconcile every customer. Returns the new balance per customer."""
        result = await self.db.execute(select(Customer.id).order_by(Customer.name))
        customer_ids = result.scalars().all()

        balances = {}
        for customer_id in customer_ids:
            balances[customer_id] = await self.recompute_balance(customer_id)

        logger.info(f"Reconciled {len(balances)} customer balances")
        return balances

    async def get_statement(self, customer_id: uuid.UUID) -> CustomerStatement:
        """
        Totals for the customer balance card.

        Raises:
            CustomerNotFoundError: customer does not exist
        """
        customer = await self.db.get(Customer, customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)

        inv_total, inv_paid, bill_total, bill_paid = await self._document_totals(customer_id)
        total_billed = round_money(inv_total + bill_total)
        total_paid = round_money(inv_paid + bill_paid)

        invoice_count = await self._count(Invoice.id, Invoice.customer_id == customer_id)
        bill_count = await self._count(DyeingBill.id, DyeingBill.customer_id == customer_id)
        payment_count = await self._count(Payment.id, Payment.customer_id == customer_id)

        received = await self.db.scalar(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.customer_id == customer_id)
        )
        last_invoice = await self.db.scalar(
            select(func.max(Invoice.invoice_date)).where(Invoice.customer_id == customer_id)
        )
        last_bill = await self.db.scalar(
            select(func.max(DyeingBill.bill_date)).where(DyeingBill.customer_id == customer_id)
        )
        dates = [d for d in (last_invoice, last_bill) if d is not None]

        return CustomerStatement(
            customer_id=customer.id,
            customer_name=customer.name,
            total_billed=total_billed,
            total_paid=total_paid,
            pending=total_billed - total_paid,
            payments_received=round_money(received or 0),
            invoice_count=invoice_count,
            dyeing_bill_count=bill_count,
            payment_count=payment_count,
            last_document_date=max(dates) if dates else None,
        )

    async def _document_totals(self, customer_id: uuid.UUID) -> Tuple[Decimal, Decimal, Decimal, Decimal]:
        """(invoice total, invoice paid, bill total, bill paid) for one customer."""
        inv_row = (await self.db.execute(
            select(
                func.coalesce(func.sum(Invoice.total_amount), 0),
                func.coalesce(func.sum(Invoice.paid_amount), 0),
            ).where(Invoice.customer_id == customer_id)
        )).one()
        bill_row = (await self.db.execute(
            select(
                func.coalesce(func.sum(DyeingBill.total_amount), 0),
                func.coalesce(func.sum(DyeingBill.paid_amount), 0),
            ).where(DyeingBill.customer_id == customer_id)
        )).one()

        return (
            round_money(inv_row[0]),
            round_money(inv_row[1]),
            round_money(bill_row[0]),
            round_money(bill_row[1]),
        )

    async def _count(self, column, criterion) -> int:
        return await self.db.scalar(select(func.count(column)).where(criterion)) or 0

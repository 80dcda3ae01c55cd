"""Payment Service: records customer payments and settles open documents.

A payment is accepted only when it does not exceed the customer's
outstanding balance, freshly recomputed under the customer lock. The amount
is then allocated to open documents so that paid_amount on invoices and
dyeing bills stays the single source of truth for what has been paid:

1. the invoice the payment was received against, if any
2. remaining open invoices and dyeing bills, oldest document date first
"""
import uuid
import logging
from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.core.exceptions import (
    AggregationError,
    InvalidAmountError,
    OverpaymentError,
    PaymentTargetError,
)
from billbook.models.billing import Invoice, DyeingBill, Payment, PaymentMethod
from billbook.services.invoice_service import derive_status
from billbook.services.ledger_service import LedgerService
from billbook.services.tax_calculator import to_decimal, round_money


logger = logging.getLogger(__name__)


class PaymentService:
    """Applies and lists customer payments."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = LedgerService(db)

    async def apply_payment(
        self,
        customer_id: uuid.UUID,
        amount: Union[Decimal, int, str],
        payment_date: Optional[date] = None,
        notes: Optional[str] = None,
        payment_method: Union[PaymentMethod, str] = PaymentMethod.CASH,
        invoice_id: Optional[uuid.UUID] = None,
    ) -> Payment:
        """
        Record a payment and reduce the customer's outstanding balance.

        Raises:
            InvalidAmountError: amount <= 0 or more than 2 decimal places
            CustomerNotFoundError: unknown customer
            PaymentTargetError: invoice_id is not one of the customer's invoices
            OverpaymentError: amount exceeds the current outstanding balance
            AggregationError: open documents could not absorb the whole amount
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise InvalidAmountError(
                "Payment amount must be greater than zero",
                details={"amount": str(amount)},
            )
        if round_money(amount) != amount:
            raise InvalidAmountError(
                "Payment amount cannot have more than 2 decimal places",
                details={"amount": str(amount)},
            )

        customer = await self.ledger.lock_customer(customer_id)

        if invoice_id is not None:
            target = await self.db.get(Invoice, invoice_id)
            if not target or target.customer_id != customer_id:
                raise PaymentTargetError(
                    f"Invoice {invoice_id} does not belong to customer {customer_id}",
                    details={"invoice_id": str(invoice_id), "customer_id": str(customer_id)},
                )

        outstanding = await self.ledger.recompute_balance(customer_id, customer)
        if amount > outstanding:
            logger.info(f"Rejected payment of {amount} from customer {customer_id}: outstanding {outstanding}")
            raise OverpaymentError(amount, outstanding)

        method = payment_method.value if isinstance(payment_method, PaymentMethod) else str(payment_method).upper()
        payment = Payment(
            customer_id=customer_id,
            invoice_id=invoice_id,
            amount=amount,
            payment_date=payment_date or date.today(),
            payment_method=method,
            notes=notes or f"Payment received from {customer.name}",
        )
        self.db.add(payment)
        await self.db.flush()

        await self._allocate(customer_id, amount, invoice_id)
        new_balance = await self.ledger.recompute_balance(customer_id, customer)

        logger.info(
            f"Recorded {method} payment of {amount} from customer {customer_id}; "
            f"outstanding {outstanding} -> {new_balance}"
        )
        return payment

    async def _allocate(
        self,
        customer_id: uuid.UUID,
        amount: Decimal,
        invoice_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Spread a payment over the customer's open documents."""
        open_invoices = (await self.db.execute(
            select(Invoice)
            .where(
                Invoice.customer_id == customer_id,
                Invoice.paid_amount < Invoice.total_amount,
            )
            .order_by(Invoice.invoice_date, Invoice.created_at)
            .with_for_update()
        )).scalars().all()
        open_bills = (await self.db.execute(
            select(DyeingBill)
            .where(
                DyeingBill.customer_id == customer_id,
                DyeingBill.paid_amount < DyeingBill.total_amount,
            )
            .order_by(DyeingBill.bill_date, DyeingBill.created_at)
            .with_for_update()
        )).scalars().all()

        # (priority, document date, kind, position within its own query)
        queue = [
            (0 if inv.id == invoice_id else 1, inv.invoice_date, 0, pos, inv)
            for pos, inv in enumerate(open_invoices)
        ] + [
            (1, bill.bill_date, 1, pos, bill)
            for pos, bill in enumerate(open_bills)
        ]
        queue.sort(key=lambda entry: entry[:4])

        remaining = amount
        for *_, document in queue:
            if remaining <= 0:
                break
            due = document.total_amount - document.paid_amount
            if due <= 0:
                continue
            applied = min(remaining, due)
            document.paid_amount = document.paid_amount + applied
            document.status = derive_status(document.total_amount, document.paid_amount).value
            remaining -= applied

        if remaining > 0:
            logger.error(
                f"Payment of {amount} from customer {customer_id} left {remaining} unallocated; "
                f"open documents do not cover the outstanding balance"
            )
            raise AggregationError(
                f"Open documents of customer {customer_id} do not cover the outstanding balance",
                details={"customer_id": str(customer_id), "unallocated": str(remaining)},
            )

        await self.db.flush()

    async def list_payments(
        self,
        customer_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Payment], int, Decimal]:
        """List payments, newest first, with total count and amount."""
        filters = []
        if customer_id:
            filters.append(Payment.customer_id == customer_id)

        totals = (await self.db.execute(
            select(func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0)).where(*filters)
        )).one()

        result = await self.db.execute(
            select(Payment)
            .where(*filters)
            .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), totals[0], round_money(totals[1])

"""Dyeing bill service.

Same unit-of-work shape as invoices, without a GST split: the bill total is
the sum of its rounded line amounts. Dyeing bills are numbered in their own
series under the dyeing prefix.
"""
import uuid
import logging
from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.core.exceptions import DocumentNotFoundError
from billbook.models.billing import DyeingBill, DyeingBillItem, DocumentStatus
from billbook.models.document_sequence import DocumentClass
from billbook.schemas.billing import DyeingBillCreate
from billbook.services.company_service import CompanyService
from billbook.services.document_sequence_service import DocumentSequenceService, SequencePrefixes
from billbook.services.ledger_service import LedgerService
from billbook.services.tax_calculator import line_amount, round_money


logger = logging.getLogger(__name__)


class DyeingBillService:
    """Creates, deletes and lists dyeing bills."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = LedgerService(db)

    async def create_bill(
        self,
        data: DyeingBillCreate,
        prefixes: Optional[SequencePrefixes] = None,
    ) -> DyeingBill:
        """
        Create a dyeing bill and bring the customer's balance up to date.

        Raises:
            CustomerNotFoundError: unknown customer
            SequenceCorruptionError: dyeing bill series cannot be continued
        """
        customer = await self.ledger.lock_customer(data.customer_id)

        if prefixes is None:
            prefixes = await CompanyService(self.db).sequence_prefixes()

        items = [
            DyeingBillItem(
                line_number=line_number,
                product_name=item.product_name,
                quantity=item.quantity,
                rate=item.rate,
                amount=line_amount(item.quantity, item.rate),
            )
            for line_number, item in enumerate(data.items, start=1)
        ]
        total = sum((i.amount for i in items), Decimal("0"))

        bill_number = await DocumentSequenceService(self.db).get_next_number(
            DocumentClass.DYEING_BILL, prefixes.dyeing_bill
        )

        bill = DyeingBill(
            bill_number=bill_number,
            customer_id=customer.id,
            bill_date=data.bill_date,
            total_amount=total,
            paid_amount=Decimal("0"),
            status=DocumentStatus.PENDING.value,
            notes=data.notes,
            items=items,
        )
        self.db.add(bill)
        await self.db.flush()

        await self.ledger.recompute_balance(customer.id, customer)

        logger.info(f"Created dyeing bill {bill_number} for customer {customer.id}: total {total}")
        return await self.get_bill(bill.id)

    async def delete_bill(self, bill_id: uuid.UUID) -> str:
        """
        Delete a dyeing bill and its items, then recompute the customer's balance.

        Raises:
            DocumentNotFoundError: unknown bill
        """
        bill = await self.db.get(DyeingBill, bill_id)
        if not bill:
            raise DocumentNotFoundError(
                f"Dyeing bill {bill_id} not found",
                details={"bill_id": str(bill_id)},
            )

        customer_id = bill.customer_id
        bill_number = bill.bill_number
        customer = await self.ledger.lock_customer(customer_id)

        await self.db.execute(delete(DyeingBillItem).where(DyeingBillItem.bill_id == bill_id))
        await self.db.execute(delete(DyeingBill).where(DyeingBill.id == bill_id))

        await self.ledger.recompute_balance(customer_id, customer)

        logger.info(f"Deleted dyeing bill {bill_number} for customer {customer_id}")
        return bill_number

    async def get_bill(self, bill_id: uuid.UUID) -> DyeingBill:
        result = await self.db.execute(
            select(DyeingBill)
            .options(selectinload(DyeingBill.items))
            .where(DyeingBill.id == bill_id)
        )
        bill = result.scalar_one_or_none()
        if not bill:
            raise DocumentNotFoundError(
                f"Dyeing bill {bill_id} not found",
                details={"bill_id": str(bill_id)},
            )
        return bill

    async def list_bills(
        self,
        customer_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[DyeingBill], int, Decimal]:
        """List dyeing bills, newest first, with total count and value."""
        filters = []
        if customer_id:
            filters.append(DyeingBill.customer_id == customer_id)
        if status:
            filters.append(DyeingBill.status == status.upper())
        if start_date:
            filters.append(DyeingBill.bill_date >= start_date)
        if end_date:
            filters.append(DyeingBill.bill_date <= end_date)

        totals = (await self.db.execute(
            select(func.count(DyeingBill.id), func.coalesce(func.sum(DyeingBill.total_amount), 0))
            .where(*filters)
        )).one()

        result = await self.db.execute(
            select(DyeingBill)
            .where(*filters)
            .order_by(DyeingBill.bill_date.desc(), DyeingBill.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), totals[0], round_money(totals[1])

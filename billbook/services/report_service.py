"""Dashboard figures and sales report."""
import uuid
import logging
from datetime import date
from typing import Optional, Dict, Any

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.models.billing import Invoice, DyeingBill
from billbook.models.customer import Customer
from billbook.services.tax_calculator import round_money


logger = logging.getLogger(__name__)


class ReportService:
    """Read-only aggregates over customers and documents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def dashboard(self, recent: int = 5) -> Dict[str, Any]:
        """
        Counts and pending totals.

        total_pending is summed from the documents, not from the stored
        customer balances.
        """
        total_customers = await self.db.scalar(select(func.count(Customer.id))) or 0
        total_invoices = await self.db.scalar(select(func.count(Invoice.id))) or 0
        total_bills = await self.db.scalar(select(func.count(DyeingBill.id))) or 0

        invoice_pending = await self.db.scalar(
            select(func.coalesce(func.sum(Invoice.total_amount - Invoice.paid_amount), 0))
        )
        bill_pending = await self.db.scalar(
            select(func.coalesce(func.sum(DyeingBill.total_amount - DyeingBill.paid_amount), 0))
        )
        customers_with_dues = await self.db.scalar(
            select(func.count(Customer.id)).where(Customer.outstanding_balance > 0)
        ) or 0

        result = await self.db.execute(
            select(Invoice).order_by(Invoice.created_at.desc()).limit(recent)
        )

        return {
            "total_customers": total_customers,
            "total_invoices": total_invoices,
            "total_dyeing_bills": total_bills,
            "total_pending": round_money(invoice_pending) + round_money(bill_pending),
            "customers_with_dues": customers_with_dues,
            "recent_invoices": list(result.scalars().all()),
        }

    async def sales_report(
        self,
        start_date: date,
        end_date: date,
        customer_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        """Invoices dated within [start_date, end_date] with their sums."""
        filters = [Invoice.invoice_date >= start_date, Invoice.invoice_date <= end_date]
        if customer_id:
            filters.append(Invoice.customer_id == customer_id)

        sums = (await self.db.execute(
            select(
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.subtotal), 0),
                func.coalesce(func.sum(Invoice.tax_amount), 0),
                func.coalesce(func.sum(Invoice.total_amount), 0),
                func.coalesce(func.sum(Invoice.paid_amount), 0),
            ).where(*filters)
        )).one()

        result = await self.db.execute(
            select(Invoice).where(*filters).order_by(Invoice.invoice_date, Invoice.created_at)
        )

        logger.debug(f"Sales report {start_date}..{end_date}: {sums[0]} invoices")
        return {
            "start_date": start_date,
            "end_date": end_date,
            "customer_id": customer_id,
            "invoice_count": sums[0],
            "total_subtotal": round_money(sums[1]),
            "total_tax": round_money(sums[2]),
            "total_amount": round_money(sums[3]),
            "total_paid": round_money(sums[4]),
            "invoices": list(result.scalars().all()),
        }

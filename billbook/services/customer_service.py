"""Customer master data.

A customer's GSTIN is validated on every write. When it decodes, the state is
filled from the GSTIN state code, but only if the customer has no state yet
and the request did not supply one.
"""
import uuid
import logging
from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.core.exceptions import CustomerNotFoundError, CustomerHasDocumentsError
from billbook.models.billing import Invoice, DyeingBill, Payment
from billbook.models.customer import Customer
from billbook.schemas.customer import CustomerCreate, CustomerUpdate
from billbook.services.gstin import decode_gstin


logger = logging.getLogger(__name__)


def _apply_gstin(values: Dict[str, Any], current_state: Optional[str] = None) -> Dict[str, Any]:
    """Normalize values['gstin'] and auto-fill values['state'] from it."""
    raw = values.get("gstin")
    if raw is None:
        return values
    if not raw.strip():
        values["gstin"] = None
        return values

    decoded = decode_gstin(raw)
    values["gstin"] = decoded.gstin
    if not current_state and not (values.get("state") or "").strip():
        values["state"] = decoded.state_name
        logger.debug(f"State {decoded.state_name} detected from GSTIN {decoded.gstin}")
    return values


class CustomerService:
    """CRUD for customers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_customer(self, data: CustomerCreate) -> Customer:
        """
        Raises:
            GstinValidationError: GSTIN given but invalid
        """
        values = _apply_gstin(data.model_dump())
        customer = Customer(**values)
        self.db.add(customer)
        await self.db.flush()

        logger.info(f"Created customer {customer.id} ({customer.name})")
        return customer

    async def update_customer(self, customer_id: uuid.UUID, data: CustomerUpdate) -> Customer:
        """
        Apply the fields present in the request.

        Raises:
            CustomerNotFoundError: unknown customer
            GstinValidationError: GSTIN given but invalid
        """
        customer = await self.get_customer(customer_id)
        update_data = _apply_gstin(data.model_dump(exclude_unset=True), current_state=customer.state)

        for field, value in update_data.items():
            setattr(customer, field, value)

        await self.db.flush()
        logger.info(f"Updated customer {customer_id}: {', '.join(sorted(update_data)) or 'no changes'}")
        return customer

    async def get_customer(self, customer_id: uuid.UUID) -> Customer:
        customer = await self.db.get(Customer, customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    async def list_customers(
        self,
        search: Optional[str] = None,
        with_dues: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Customer], int]:
        """Customers by name, optionally filtered by a name/phone/GSTIN search."""
        filters = []
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(or_(
                Customer.name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.gstin.ilike(pattern),
            ))
        if with_dues:
            filters.append(Customer.outstanding_balance > 0)

        total = await self.db.scalar(select(func.count(Customer.id)).where(*filters))

        result = await self.db.execute(
            select(Customer)
            .where(*filters)
            .order_by(Customer.name)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def delete_customer(self, customer_id: uuid.UUID) -> None:
        """
        Raises:
            CustomerNotFoundError: unknown customer
            CustomerHasDocumentsError: invoices, dyeing bills or payments still reference it
        """
        customer = await self.get_customer(customer_id)

        references = {
            "invoices": await self._count(Invoice.id, Invoice.customer_id == customer_id),
            "dyeing_bills": await self._count(DyeingBill.id, DyeingBill.customer_id == customer_id),
            "payments": await self._count(Payment.id, Payment.customer_id == customer_id),
        }
        if any(references.values()):
            raise CustomerHasDocumentsError(
                f"Customer {customer.name} has documents and cannot be deleted",
                details={"customer_id": str(customer_id), **references},
            )

        await self.db.delete(customer)
        await self.db.flush()
        logger.info(f"Deleted customer {customer_id} ({customer.name})")

    async def _count(self, column, criterion) -> int:
        return await self.db.scalar(select(func.count(column)).where(criterion)) or 0

from typing import Optional
from datetime import date
from uuid import UUID
from math import ceil

from fastapi import APIRouter, Query, status

from billbook.api.deps import DB
from billbook.core.enum_utils import normalize_to_uppercase, VALID_DOCUMENT_STATUSES
from billbook.schemas.billing import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceBrief,
    InvoiceListResponse,
)
from billbook.services.invoice_service import InvoiceService


router = APIRouter()


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    db: DB,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    customer_id: Optional[UUID] = None,
    status: Optional[str] = Query(None, description="PENDING, PARTIAL, PAID"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """List invoices with filters."""
    invoices, total, total_value = await InvoiceService(db).list_invoices(
        customer_id=customer_id,
        status=normalize_to_uppercase(status, VALID_DOCUMENT_STATUSES),
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )

    return InvoiceListResponse(
        items=[InvoiceBrief.model_validate(inv) for inv in invoices],
        total=total,
        page=(skip // limit) + 1,
        size=limit,
        pages=ceil(total / limit) if total > 0 else 1,
        total_value=total_value,
    )


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(data: InvoiceCreate, db: DB):
    """
    Create a tax invoice.

    The number comes from the invoice series of the company prefix; GST is
    split by tax_mode; the customer's balance is recomputed in the same
    transaction.
    """
    invoice = await InvoiceService(db).create_invoice(data)
    return InvoiceResponse.model_validate(invoice)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: UUID, db: DB):
    """Get invoice by ID."""
    invoice = await InvoiceService(db).get_invoice(invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: UUID, db: DB):
    """Delete an invoice. Its number is never reissued."""
    await InvoiceService(db).delete_invoice(invoice_id)

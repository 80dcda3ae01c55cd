from typing import Optional
from uuid import UUID
from math import ceil

from fastapi import APIRouter, Query, status

from billbook.api.deps import DB
from billbook.schemas.billing import PaymentCreate, PaymentResponse, PaymentListResponse
from billbook.services.payment_service import PaymentService


router = APIRouter()


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    db: DB,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    customer_id: Optional[UUID] = None,
):
    """List payments received."""
    payments, total, total_amount = await PaymentService(db).list_payments(
        customer_id=customer_id,
        skip=skip,
        limit=limit,
    )

    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in payments],
        total=total,
        page=(skip // limit) + 1,
        size=limit,
        pages=ceil(total / limit) if total > 0 else 1,
        total_amount=total_amount,
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(data: PaymentCreate, db: DB):
    """
    Record a payment from a customer.

    Rejected with 409 when the amount exceeds the outstanding balance.
    """
    payment = await PaymentService(db).apply_payment(
        customer_id=data.customer_id,
        amount=data.amount,
        payment_date=data.payment_date,
        notes=data.notes,
        payment_method=data.payment_method,
        invoice_id=data.invoice_id,
    )
    return PaymentResponse.model_validate(payment)

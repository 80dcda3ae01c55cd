from typing import Optional
from datetime import date
from uuid import UUID
from math import ceil

from fastapi import APIRouter, Query, status

from billbook.api.deps import DB
from billbook.core.enum_utils import normalize_to_uppercase, VALID_DOCUMENT_STATUSES
from billbook.schemas.billing import (
    DyeingBillCreate,
    DyeingBillResponse,
    DyeingBillBrief,
    DyeingBillListResponse,
)
from billbook.services.dyeing_service import DyeingBillService


router = APIRouter()


@router.get("", response_model=DyeingBillListResponse)
async def list_dyeing_bills(
    db: DB,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    customer_id: Optional[UUID] = None,
    status: Optional[str] = Query(None, description="PENDING, PARTIAL, PAID"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    bills, total, total_value = await DyeingBillService(db).list_bills(
        customer_id=customer_id,
        status=normalize_to_uppercase(status, VALID_DOCUMENT_STATUSES),
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )

    return DyeingBillListResponse(
        items=[DyeingBillBrief.model_validate(b) for b in bills],
        total=total,
        page=(skip // limit) + 1,
        size=limit,
        pages=ceil(total / limit) if total > 0 else 1,
        total_value=total_value,
    )


@router.post("", response_model=DyeingBillResponse, status_code=status.HTTP_201_CREATED)
async def create_dyeing_bill(data: DyeingBillCreate, db: DB):
    """Create a dyeing bill numbered under the dyeing prefix."""
    bill = await DyeingBillService(db).create_bill(data)
    return DyeingBillResponse.model_validate(bill)


@router.get("/{bill_id}", response_model=DyeingBillResponse)
async def get_dyeing_bill(bill_id: UUID, db: DB):
    bill = await DyeingBillService(db).get_bill(bill_id)
    return DyeingBillResponse.model_validate(bill)


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dyeing_bill(bill_id: UUID, db: DB):
    await DyeingBillService(db).delete_bill(bill_id)

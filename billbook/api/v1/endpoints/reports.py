from typing import Optional
from datetime import date
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from billbook.api.deps import DB
from billbook.schemas.billing import InvoiceBrief
from billbook.schemas.report import DashboardResponse, SalesReportResponse
from billbook.services.report_service import ReportService


router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(db: DB):
    """Customer and document counts with the total pending amount."""
    data = await ReportService(db).dashboard()
    data["recent_invoices"] = [InvoiceBrief.model_validate(i) for i in data["recent_invoices"]]
    return DashboardResponse(**data)


@router.get("/sales", response_model=SalesReportResponse)
async def sales_report(
    db: DB,
    start_date: date = Query(...),
    end_date: date = Query(...),
    customer_id: Optional[UUID] = None,
):
    """Invoices in a date range with subtotal, tax and total sums."""
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_date must not be before start_date",
        )

    data = await ReportService(db).sales_report(start_date, end_date, customer_id)
    data["invoices"] = [InvoiceBrief.model_validate(i) for i in data["invoices"]]
    return SalesReportResponse(**data)

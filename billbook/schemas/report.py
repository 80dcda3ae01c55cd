"""Schemas for dashboard and sales reports."""
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from billbook.schemas.billing import InvoiceBrief


class DashboardResponse(BaseModel):
    total_customers: int
    total_invoices: int
    total_dyeing_bills: int
    total_pending: Decimal
    customers_with_dues: int
    recent_invoices: List[InvoiceBrief] = []


class SalesReportResponse(BaseModel):
    start_date: date
    end_date: date
    customer_id: Optional[UUID] = None
    invoice_count: int
    total_subtotal: Decimal
    total_tax: Decimal
    total_amount: Decimal
    total_paid: Decimal
    invoices: List[InvoiceBrief] = []

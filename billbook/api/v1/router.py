from fastapi import APIRouter

from billbook.api.v1.endpoints import (
    gstin,
    tax,
    company,
    sequences,
    customers,
    invoices,
    dyeing_bills,
    payments,
    reports,
)


api_router = APIRouter(prefix="/api/v1")

# ==================== GSTIN ====================
api_router.include_router(
    gstin.router,
    prefix="/gstin",
    tags=["GSTIN"]
)

# ==================== Tax ====================
api_router.include_router(
    tax.router,
    prefix="/tax",
    tags=["Tax"]
)

# ==================== Company Profile ====================
api_router.include_router(
    company.router,
    prefix="/company",
    tags=["Company"]
)

# ==================== Document Sequences ====================
api_router.include_router(
    sequences.router,
    prefix="/sequences",
    tags=["Document Sequences"]
)

# ==================== Customers & Ledger ====================
api_router.include_router(
    customers.router,
    prefix="/customers",
    tags=["Customers"]
)

# ==================== Invoices ====================
api_router.include_router(
    invoices.router,
    prefix="/invoices",
    tags=["Invoices"]
)

# ==================== Dyeing Bills ====================
api_router.include_router(
    dyeing_bills.router,
    prefix="/dyeing-bills",
    tags=["Dyeing Bills"]
)

# ==================== Payments ====================
api_router.include_router(
    payments.router,
    prefix="/payments",
    tags=["Payments"]
)

# ==================== Reports ====================
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"]
)

from typing import Optional
import uuid
from math import ceil

from fastapi import APIRouter, Query, status

from billbook.api.deps import DB
from billbook.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
    CustomerBalanceResponse,
    CustomerStatementResponse,
    ReconcileResponse,
)
from billbook.services.customer_service import CustomerService
from billbook.services.ledger_service import LedgerService


router = APIRouter()


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    db: DB,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name, phone, GSTIN"),
    with_dues: bool = Query(False, description="Only customers with a positive balance"),
):
    """Get paginated list of customers."""
    skip = (page - 1) * size
    customers, total = await CustomerService(db).list_customers(
        search=search,
        with_dues=with_dues,
        skip=skip,
        limit=size,
    )

    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(data: CustomerCreate, db: DB):
    """
    Create a new customer.

    A valid GSTIN fills the state when none is given.
    """
    customer = await CustomerService(db).create_customer(data)
    return CustomerResponse.model_validate(customer)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_all(db: DB):
    """Recompute every customer's outstanding balance from the documents."""
    balances = await LedgerService(db).recompute_all()
    return ReconcileResponse(
        customers_reconciled=len(balances),
        balances={str(k): v for k, v in balances.items()},
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: uuid.UUID, db: DB):
    """Get a customer by ID."""
    customer = await CustomerService(db).get_customer(customer_id)
    return CustomerResponse.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(customer_id: uuid.UUID, data: CustomerUpdate, db: DB):
    """Update a customer."""
    customer = await CustomerService(db).update_customer(customer_id, data)
    return CustomerResponse.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: uuid.UUID, db: DB):
    """Delete a customer that has no invoices, dyeing bills or payments."""
    await CustomerService(db).delete_customer(customer_id)


@router.post("/{customer_id}/ledger", response_model=CustomerBalanceResponse)
async def recompute_ledger(customer_id: uuid.UUID, db: DB):
    """Recompute one customer's outstanding balance."""
    balance = await LedgerService(db).recompute_balance(customer_id)
    return CustomerBalanceResponse(customer_id=customer_id, outstanding_balance=balance)


@router.get("/{customer_id}/statement", response_model=CustomerStatementResponse)
async def get_statement(customer_id: uuid.UUID, db: DB):
    """Billed, paid and pending totals for a customer."""
    statement = await LedgerService(db).get_statement(customer_id)
    return CustomerStatementResponse.model_validate(statement)

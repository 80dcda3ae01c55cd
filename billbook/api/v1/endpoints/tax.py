from fastapi import APIRouter

from billbook.schemas.tax import TaxComputeRequest, TaxBreakdownResponse
from billbook.services.tax_calculator import compute_tax


router = APIRouter()


@router.post("/compute", response_model=TaxBreakdownResponse)
async def compute(data: TaxComputeRequest):
    """Preview the rounded CGST/SGST or IGST split for a subtotal."""
    breakdown = compute_tax(data.subtotal, data.tax_rate, data.tax_mode).rounded()
    return TaxBreakdownResponse.model_validate(breakdown)

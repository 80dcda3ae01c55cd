from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from billbook.core.enum_utils import create_uppercase_validator, VALID_TAX_MODES
from billbook.models.billing import TaxMode
from billbook.schemas.base import BaseResponseSchema


class TaxComputeRequest(BaseModel):
    """Preview of the GST split for a subtotal."""
    subtotal: Decimal
    tax_rate: Decimal = Field(..., ge=0, le=100, decimal_places=2)
    tax_mode: TaxMode = TaxMode.INTRASTATE

    normalize_tax_mode = create_uppercase_validator('tax_mode', VALID_TAX_MODES)


class TaxBreakdownResponse(BaseResponseSchema):
    """Rounded GST split."""
    subtotal: Decimal
    tax_rate: Decimal
    mode: TaxMode
    cgst_rate: Optional[Decimal] = None
    sgst_rate: Optional[Decimal] = None
    igst_rate: Optional[Decimal] = None
    cgst_amount: Optional[Decimal] = None
    sgst_amount: Optional[Decimal] = None
    igst_amount: Optional[Decimal] = None
    tax_amount: Decimal = Field(..., description="Sum of the populated tax amounts")
    total: Decimal

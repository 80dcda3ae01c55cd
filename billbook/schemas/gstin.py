"""Schemas for GSTIN decoding and registry lookup."""
from pydantic import BaseModel

from billbook.schemas.base import BaseResponseSchema


class DecodedGstinResponse(BaseResponseSchema):
    """Structural decode of a GSTIN."""
    gstin: str
    state_code: str
    state_name: str
    pan: str
    entity_code: str
    holder_type: str
    holder_type_label: str


class GstinProfileResponse(BaseResponseSchema):
    """Registry profile; verified is False when built locally."""
    gstin: str
    legal_name: str
    trade_name: str
    address: str
    city: str
    state: str
    state_code: str
    pincode: str
    status: str
    registration_date: str
    business_type: str
    verified: bool


class GstStateResponse(BaseModel):
    code: str
    name: str

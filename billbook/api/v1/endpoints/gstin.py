"""GSTIN decoding and registry lookup endpoints."""
from typing import List

from fastapi import APIRouter

from billbook.api.deps import Registry
from billbook.schemas.gstin import DecodedGstinResponse, GstinProfileResponse, GstStateResponse
from billbook.services.gstin import decode_gstin, GST_STATE_CODES


router = APIRouter()


@router.get("/decode/{gstin}", response_model=DecodedGstinResponse)
async def decode(gstin: str):
    """Decode a GSTIN into state, PAN and holder type. No network access."""
    return DecodedGstinResponse.model_validate(decode_gstin(gstin))


@router.get("/verify/{gstin}", response_model=GstinProfileResponse)
async def verify(gstin: str, registry: Registry):
    """
    Look up registration details.

    Falls back to a locally derived profile (verified=false) when the
    registry is not configured or unavailable.
    """
    profile = await registry.verify(gstin)
    return GstinProfileResponse.model_validate(profile)


@router.get("/states", response_model=List[GstStateResponse])
async def list_states():
    """GST state and union territory codes."""
    return [GstStateResponse(code=code, name=name) for code, name in GST_STATE_CODES.items()]

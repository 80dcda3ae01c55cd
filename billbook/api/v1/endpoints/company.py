from fastapi import APIRouter

from billbook.api.deps import DB
from billbook.schemas.company import CompanyProfileResponse, CompanyProfileUpdate
from billbook.services.company_service import CompanyService


router = APIRouter()


@router.get("", response_model=CompanyProfileResponse)
async def get_company_profile(db: DB):
    """Get the company profile, created with defaults on first access."""
    profile = await CompanyService(db).get_profile()
    return CompanyProfileResponse.model_validate(profile)


@router.put("", response_model=CompanyProfileResponse)
async def update_company_profile(data: CompanyProfileUpdate, db: DB):
    """Update company details and numbering prefixes."""
    profile = await CompanyService(db).update_profile(data)
    return CompanyProfileResponse.model_validate(profile)

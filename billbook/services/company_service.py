"""Company profile (single row) and the numbering prefixes it carries."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.config import settings
from billbook.models.company import CompanyProfile
from billbook.schemas.company import CompanyProfileUpdate
from billbook.services.document_sequence_service import SequencePrefixes, validate_prefix
from billbook.services.gstin import decode_gstin


logger = logging.getLogger(__name__)


class CompanyService:
    """Reads and updates the seller profile."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self) -> CompanyProfile:
        """Return the profile, creating it with configured defaults on first use."""
        result = await self.db.execute(
            select(CompanyProfile).order_by(CompanyProfile.created_at).limit(1)
        )
        profile = result.scalar_one_or_none()
        if profile:
            return profile

        profile = CompanyProfile(
            company_name=settings.APP_NAME,
            invoice_prefix=settings.DEFAULT_INVOICE_PREFIX,
            dyeing_prefix=settings.DEFAULT_DYEING_PREFIX,
        )
        self.db.add(profile)
        await self.db.flush()
        logger.info("Created company profile with default prefixes")
        return profile

    async def update_profile(self, data: CompanyProfileUpdate) -> CompanyProfile:
        """
        Update profile fields.

        Changing a prefix starts (or resumes) the series for that prefix;
        numbers already issued under the old prefix are untouched.

        Raises:
            InvalidPrefixError: prefix is malformed
            GstinValidationError: company GSTIN is invalid
        """
        profile = await self.get_profile()
        update_data = data.model_dump(exclude_unset=True)

        if "invoice_prefix" in update_data:
            update_data["invoice_prefix"] = validate_prefix(update_data["invoice_prefix"])
        if "dyeing_prefix" in update_data:
            update_data["dyeing_prefix"] = validate_prefix(update_data["dyeing_prefix"])
        if update_data.get("gstin"):
            update_data["gstin"] = decode_gstin(update_data["gstin"]).gstin

        for field, value in update_data.items():
            setattr(profile, field, value)

        await self.db.flush()
        logger.info(f"Updated company profile fields: {', '.join(sorted(update_data)) or 'none'}")
        return profile

    async def sequence_prefixes(self) -> SequencePrefixes:
        profile = await self.get_profile()
        return SequencePrefixes(
            invoice=profile.invoice_prefix,
            dyeing_bill=profile.dyeing_prefix,
        )

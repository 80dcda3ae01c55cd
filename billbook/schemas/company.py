from datetime import datetime
from typing import Optional
import uuid

from pydantic import Field, EmailStr

from billbook.schemas.base import BaseResponseSchema, BaseUpdateSchema


class CompanyProfileUpdate(BaseUpdateSchema):
    """Company profile update. Prefixes are validated by the service."""
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    invoice_prefix: Optional[str] = Field(None, max_length=20)
    dyeing_prefix: Optional[str] = Field(None, max_length=20)


class CompanyProfileResponse(BaseResponseSchema):
    id: uuid.UUID
    company_name: str
    address: Optional[str] = None
    gstin: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    invoice_prefix: str
    dyeing_prefix: str
    created_at: datetime
    updated_at: datetime


class SequencePreviewResponse(BaseResponseSchema):
    """Next number a document class would receive."""
    document_class: str
    prefix: str
    next_number: str

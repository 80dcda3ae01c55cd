"""
Base Schema Classes for Pydantic Models

RULE: All response schemas that use `from_attributes=True` MUST inherit from BaseResponseSchema.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class BaseResponseSchema(BaseModel):
    """
    Base class for all response schemas that read from ORM models.

    Usage:
        class CustomerResponse(BaseResponseSchema):
            id: UUID
            name: str
            gstin: Optional[str] = None
    """
    model_config = ConfigDict(
        from_attributes=True,
        # Serialize UUIDs as strings in JSON output
        json_encoders={
            UUID: str,
            datetime: lambda v: v.isoformat() if v else None,
        },
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """Base class for create/input schemas. Unknown fields are ignored."""
    model_config = ConfigDict(
        extra='ignore',
    )


class BaseUpdateSchema(BaseModel):
    """
    Base class for update/patch schemas.

    All fields are optional; only fields present in the request are applied
    (model_dump(exclude_unset=True)).
    """
    model_config = ConfigDict(
        extra='ignore',
    )


class PaginatedResponse(BaseModel):
    """Paging envelope shared by list endpoints."""
    total: int
    page: int = 1
    size: int = 50
    pages: int = 1


OptionalUUID = Optional[UUID]

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from billbook.database import get_db
from billbook.services.gst_registry import GstinRegistryClient


def get_registry_client() -> GstinRegistryClient:
    """GSTIN registry client built from settings. Overridden in tests."""
    return GstinRegistryClient()


# Type aliases for dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]
Registry = Annotated[GstinRegistryClient, Depends(get_registry_client)]

from pydantic_settings import BaseSettings
from pydantic import field_validator
from decimal import Decimal
from typing import Optional
from functools import lru_cache
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str

    # Database Connection Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 5  # Base number of connections in pool
    DB_MAX_OVERFLOW: int = 10  # Extra connections allowed beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes

    # App Settings
    APP_NAME: str = "Billbook"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Document numbering
    DEFAULT_INVOICE_PREFIX: str = "INV"
    DEFAULT_DYEING_PREFIX: str = "DYE"
    SEQUENCE_PADDING: int = 5  # 5 = 00001
    SEQUENCE_MAX_RETRIES: int = 3  # Resync attempts when a generated number already exists

    # Invoices at or above this total need an e-way bill for the goods movement
    EWAY_BILL_THRESHOLD: Decimal = Decimal("50000")

    # GSTIN registry lookup (optional, enriches customer fields only)
    GST_API_KEY: Optional[str] = None
    GST_API_URL: str = "https://gst-verification.p.rapidapi.com/v3/tasks/sync/verify_with_source/ind_gst_certificate"
    GST_API_HOST: str = "gst-verification.p.rapidapi.com"
    GST_API_TIMEOUT: float = 15.0

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('DEFAULT_INVOICE_PREFIX', 'DEFAULT_DYEING_PREFIX')
    @classmethod
    def uppercase_prefix(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def cors_origins_list(self) -> list[str]:
        return self.CORS_ORIGINS

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

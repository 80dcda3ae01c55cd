"""
Enum Utilities for VARCHAR-based Status Fields

STORAGE STANDARD:
━━━━━━━━━━━━━━━━━
• Database: VARCHAR - NOT PostgreSQL ENUM
• SQLAlchemy: String(n) with Mapped[str]
• Pydantic: Python Enum for API validation
• API Response: Use string directly (NO .value needed)
• Case: All enum values stored in UPPERCASE

DATA FLOW:
━━━━━━━━━━
INPUT (API Request):
    Pydantic Enum → .value → String → Database
    Example: TaxMode.INTRASTATE → "INTRASTATE" → VARCHAR

OUTPUT (API Response):
    Database → String → Return directly

Lowercase input such as "intrastate" or "dyeing_bill" is accepted by the
schemas through create_uppercase_validator().
"""

from enum import Enum
from typing import Any, Optional, TypeVar, Type, Set


T = TypeVar('T', bound=Enum)


def to_enum(value: Any, enum_class: Type[T]) -> Optional[T]:
    """
    Convert a string value to an enum instance, case-insensitively.

    Returns None if the value is not a member.
    """
    if value is None:
        return None
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(str(value).upper())
    except (ValueError, KeyError):
        return None


# =============================================================================
# CASE NORMALIZATION FOR PYDANTIC SCHEMAS
# =============================================================================

def normalize_to_uppercase(value: Any, valid_values: Set[str]) -> Any:
    """
    Normalize a string value to UPPERCASE if it's a valid enum value.

    Returns the original value otherwise, for Pydantic to reject.

    Examples:
        >>> normalize_to_uppercase('paid', {'PENDING', 'PAID'})
        'PAID'
        >>> normalize_to_uppercase('invalid', {'PENDING', 'PAID'})
        'invalid'
    """
    if value is None:
        return value
    if isinstance(value, str):
        upper_v = value.strip().upper()
        if upper_v in valid_values:
            return upper_v
    return value


def create_uppercase_validator(field_name: str, valid_values: Set[str]) -> classmethod:
    """
    Create a Pydantic field_validator that normalizes values to UPPERCASE.

    Usage:
        class MySchema(BaseModel):
            tax_mode: TaxMode

            normalize_tax_mode = create_uppercase_validator('tax_mode', VALID_TAX_MODES)
    """
    from pydantic import field_validator

    @field_validator(field_name, mode='before')
    @classmethod
    def validate(cls, v):
        return normalize_to_uppercase(v, valid_values)

    return validate


# =============================================================================
# PRE-DEFINED VALID VALUE SETS
# =============================================================================

VALID_TAX_MODES = {"INTRASTATE", "INTERSTATE"}

VALID_DOCUMENT_STATUSES = {"PENDING", "PARTIAL", "PAID"}

VALID_DOCUMENT_CLASSES = {"INVOICE", "DYEING_BILL"}

VALID_PAYMENT_METHODS = {"CASH", "CHEQUE", "BANK_TRANSFER", "UPI", "OTHER"}

"""Error taxonomy for the billing ledger.

Every failure carries a human readable message, a stable error_code for
clients and optional details. The API layer maps the classes to HTTP status
codes in billbook.main.
"""
from decimal import Decimal
from typing import Any, Dict, Optional


class BillbookError(Exception):
    """Base exception for ledger and document errors."""
    error_code = "BILLBOOK_ERROR"

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ==================== Validation ====================

class ValidationError(BillbookError):
    """Input rejected before any write."""
    error_code = "VALIDATION_ERROR"


class GstinValidationError(ValidationError):
    """GSTIN could not be decoded."""
    error_code = "GSTIN_INVALID"

    def __init__(self, message: str, gstin: Optional[str] = None):
        super().__init__(message, details={"gstin": gstin} if gstin is not None else None)
        self.gstin = gstin


class GstinLengthError(GstinValidationError):
    error_code = "GSTIN_LENGTH"


class GstinFormatError(GstinValidationError):
    error_code = "GSTIN_FORMAT"


class UnknownStateError(GstinValidationError):
    error_code = "GSTIN_UNKNOWN_STATE"

    def __init__(self, message: str, gstin: Optional[str] = None, state_code: Optional[str] = None):
        super().__init__(message, gstin=gstin)
        self.state_code = state_code
        self.details["state_code"] = state_code


class InvalidAmountError(ValidationError):
    """Payment or document amount is not positive."""
    error_code = "INVALID_AMOUNT"


class InvalidTaxInputError(ValidationError):
    """Subtotal or rate outside the accepted range."""
    error_code = "INVALID_TAX_INPUT"


class InvalidPrefixError(ValidationError):
    """Document number prefix is empty or has characters outside A-Z 0-9 /."""
    error_code = "INVALID_PREFIX"


class PaymentTargetError(ValidationError):
    """Payment references an invoice that does not belong to the customer."""
    error_code = "PAYMENT_TARGET_INVALID"


# ==================== Ledger ====================

class OverpaymentError(BillbookError):
    """Payment exceeds the customer's current outstanding balance."""
    error_code = "OVERPAYMENT"

    def __init__(self, amount: Decimal, outstanding: Decimal):
        super().__init__(
            f"Payment amount {amount} exceeds outstanding balance {outstanding}",
            details={"amount": str(amount), "outstanding_balance": str(outstanding)},
        )
        self.amount = amount
        self.outstanding = outstanding


class SequenceCorruptionError(BillbookError):
    """Last issued document number cannot be continued safely."""
    error_code = "SEQUENCE_CORRUPTION"


class AggregationError(BillbookError):
    """Store failed while recomputing a customer's balance."""
    error_code = "AGGREGATION_FAILED"


# ==================== Lookup / integrity ====================

class NotFoundError(BillbookError):
    error_code = "NOT_FOUND"


class CustomerNotFoundError(NotFoundError):
    error_code = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: Any):
        super().__init__(f"Customer {customer_id} not found", details={"customer_id": str(customer_id)})


class DocumentNotFoundError(NotFoundError):
    error_code = "DOCUMENT_NOT_FOUND"


class CustomerHasDocumentsError(BillbookError):
    """Customer is still referenced by invoices, dyeing bills or payments."""
    error_code = "CUSTOMER_HAS_DOCUMENTS"

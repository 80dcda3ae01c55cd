# Import all models so they register with Base.metadata
from billbook.models.company import CompanyProfile
from billbook.models.customer import Customer
from billbook.models.billing import (
    TaxMode,
    DocumentStatus,
    PaymentMethod,
    Invoice,
    InvoiceItem,
    DyeingBill,
    DyeingBillItem,
    Payment,
)
from billbook.models.document_sequence import DocumentClass, DocumentSequence

__all__ = [
    "CompanyProfile",
    "Customer",
    "TaxMode",
    "DocumentStatus",
    "PaymentMethod",
    "Invoice",
    "InvoiceItem",
    "DyeingBill",
    "DyeingBillItem",
    "Payment",
    "DocumentClass",
    "DocumentSequence",
]

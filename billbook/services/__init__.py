# Services module
from billbook.services.document_sequence_service import DocumentSequenceService, SequencePrefixes
from billbook.services.ledger_service import LedgerService, CustomerStatement
from billbook.services.invoice_service import InvoiceService, derive_status
from billbook.services.dyeing_service import DyeingBillService
from billbook.services.payment_service import PaymentService
from billbook.services.customer_service import CustomerService
from billbook.services.company_service import CompanyService
from billbook.services.report_service import ReportService
from billbook.services.gst_registry import GstinRegistryClient, GstinProfile

__all__ = [
    "DocumentSequenceService",
    "SequencePrefixes",
    "LedgerService",
    "CustomerStatement",
    "InvoiceService",
    "derive_status",
    "DyeingBillService",
    "PaymentService",
    "CustomerService",
    "CompanyService",
    "ReportService",
    # GSTIN registry
    "GstinRegistryClient",
    "GstinProfile",
]

"""Request builders shared by the service tests."""
from datetime import date
from decimal import Decimal

from billbook.models.billing import Invoice, DyeingBill
from billbook.schemas.billing import (
    DyeingBillCreate,
    DyeingBillItemCreate,
    InvoiceCreate,
    InvoiceItemCreate,
)


def invoice_data(
    customer_id,
    rate: str = "1000",
    quantity: str = "1",
    tax_rate: str = "18",
    tax_mode: str = "INTRASTATE",
    invoice_date: date = date(2026, 4, 1),
) -> InvoiceCreate:
    """Single-line invoice request."""
    return InvoiceCreate(
        customer_id=customer_id,
        invoice_date=invoice_date,
        tax_mode=tax_mode,
        tax_rate=Decimal(tax_rate),
        items=[
            InvoiceItemCreate(
                item_name="Cotton fabric",
                hsn_code="5208",
                quantity=Decimal(quantity),
                rate=Decimal(rate),
            )
        ],
    )


def dyeing_data(
    customer_id,
    rate: str = "50",
    quantity: str = "10",
    bill_date: date = date(2026, 4, 1),
) -> DyeingBillCreate:
    """Single-line dyeing bill request."""
    return DyeingBillCreate(
        customer_id=customer_id,
        bill_date=bill_date,
        items=[
            DyeingBillItemCreate(
                product_name="Saree dyeing",
                quantity=Decimal(quantity),
                rate=Decimal(rate),
            )
        ],
    )


def raw_invoice(customer_id, number: str, total: str = "100", paid: str = "0") -> Invoice:
    """Invoice row written directly, bypassing the sequencer (legacy or out-of-band data)."""
    return Invoice(
        invoice_number=number,
        customer_id=customer_id,
        invoice_date=date(2026, 1, 1),
        subtotal=Decimal(total),
        tax_mode="INTRASTATE",
        tax_rate=Decimal("0"),
        tax_amount=Decimal("0"),
        total_amount=Decimal(total),
        paid_amount=Decimal(paid),
    )


def raw_dyeing_bill(customer_id, number: str, total: str = "100") -> DyeingBill:
    return DyeingBill(
        bill_number=number,
        customer_id=customer_id,
        bill_date=date(2026, 1, 1),
        total_amount=Decimal(total),
    )

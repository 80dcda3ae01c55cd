"""Tests for invoice and dyeing bill creation and deletion."""
import uuid
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

import pytest
from pydantic import ValidationError
from sqlalchemy import select, func

from billbook.core.exceptions import CustomerNotFoundError, DocumentNotFoundError
from billbook.models.billing import DocumentStatus, Invoice, InvoiceItem, DyeingBillItem, Payment
from billbook.models.document_sequence import DocumentClass
from billbook.services.document_sequence_service import DocumentSequenceService, SequencePrefixes
from billbook.services.dyeing_service import DyeingBillService
from billbook.services.invoice_service import InvoiceService, derive_status
from billbook.services.payment_service import PaymentService
from billbook.schemas.billing import DyeingBillItemCreate, InvoiceCreate, InvoiceItemCreate

from factories import invoice_data, dyeing_data


class TestDeriveStatus:
    """Test derive_status."""

    @pytest.mark.parametrize(
        "total, paid, expected",
        [
            ("100", "0", DocumentStatus.PENDING),
            ("100", "0.01", DocumentStatus.PARTIAL),
            ("100", "99.99", DocumentStatus.PARTIAL),
            ("100", "100", DocumentStatus.PAID),
            ("0", "0", DocumentStatus.PAID),
        ],
    )
    def test_status(self, total, paid, expected) -> None:
        assert derive_status(Decimal(total), Decimal(paid)) == expected


class TestCreateInvoice:
    """Test InvoiceService.create_invoice."""

    @pytest.mark.asyncio
    async def test_intrastate_invoice(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        assert invoice.invoice_number == "INV-00001"
        assert invoice.subtotal == Decimal("1000.00")
        assert invoice.cgst_amount == Decimal("90.00")
        assert invoice.sgst_amount == Decimal("90.00")
        assert invoice.igst_amount is None
        assert invoice.tax_amount == Decimal("180.00")
        assert invoice.total_amount == Decimal("1180.00")
        assert invoice.paid_amount == Decimal("0")
        assert invoice.status == "PENDING"
        assert customer.outstanding_balance == Decimal("1180.00")

    @pytest.mark.asyncio
    async def test_interstate_invoice(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(
            invoice_data(customer.id, tax_mode="interstate"), prefixes
        )

        assert invoice.tax_mode == "INTERSTATE"
        assert invoice.igst_rate == Decimal("18")
        assert invoice.igst_amount == Decimal("180.00")
        assert invoice.cgst_amount is None
        assert invoice.sgst_amount is None
        assert invoice.total_amount == Decimal("1180.00")

    @pytest.mark.asyncio
    async def test_totals_are_sum_of_rounded_lines(self, db, customer, prefixes) -> None:
        data = InvoiceCreate(
            customer_id=customer.id,
            invoice_date=date(2026, 4, 1),
            tax_mode="INTRASTATE",
            tax_rate=Decimal("5"),
            items=[
                InvoiceItemCreate(item_name="Silk", hsn_code="5007", quantity=Decimal("2.5"), rate=Decimal("10.01")),
                InvoiceItemCreate(item_name="Lace", hsn_code="5804", quantity=Decimal("0.333"), rate=Decimal("100.01")),
            ],
        )

        invoice = await InvoiceService(db).create_invoice(data, prefixes)

        assert [i.amount for i in invoice.items] == [Decimal("25.03"), Decimal("33.30")]
        assert [i.line_number for i in invoice.items] == [1, 2]
        assert invoice.subtotal == Decimal("58.33")
        assert invoice.total_amount == invoice.subtotal + invoice.tax_amount
        assert invoice.tax_amount == invoice.cgst_amount + invoice.sgst_amount

    @pytest.mark.asyncio
    async def test_unknown_customer_allocates_nothing(self, db, prefixes) -> None:
        with pytest.raises(CustomerNotFoundError):
            await InvoiceService(db).create_invoice(invoice_data(uuid.uuid4()), prefixes)

        preview = await DocumentSequenceService(db).preview_next_number(DocumentClass.INVOICE, "INV")
        assert preview == "INV-00001"

    @pytest.mark.asyncio
    async def test_uses_company_prefix_by_default(self, db, customer) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id))

        assert invoice.invoice_number == "INV-00001"


    @pytest.mark.asyncio
    @pytest.mark.parametrize("rate, required", [("50000", True), ("49999.99", False)])
    async def test_eway_bill_threshold(self, db, customer, prefixes, rate, required) -> None:
        invoice = await InvoiceService(db).create_invoice(
            invoice_data(customer.id, rate=rate, tax_rate="0"), prefixes
        )

        assert invoice.eway_bill_required is required

class TestDeleteInvoice:
    """Test InvoiceService.delete_invoice."""

    @pytest.mark.asyncio
    async def test_delete_removes_items_and_updates_balance(self, db, customer, prefixes) -> None:
        service = InvoiceService(db)
        keep = await service.create_invoice(invoice_data(customer.id, rate="500"), prefixes)
        drop = await service.create_invoice(invoice_data(customer.id), prefixes)
        assert customer.outstanding_balance == Decimal("1770.00")

        number = await service.delete_invoice(drop.id)

        assert number == "INV-00002"
        assert customer.outstanding_balance == Decimal("590.00")
        remaining_items = await db.scalar(select(func.count(InvoiceItem.id)))
        assert remaining_items == 1
        assert (await service.get_invoice(keep.id)).invoice_number == "INV-00001"
        with pytest.raises(DocumentNotFoundError):
            await service.get_invoice(drop.id)

    @pytest.mark.asyncio
    async def test_delete_detaches_payments(self, db, customer, prefixes) -> None:
        service = InvoiceService(db)
        invoice = await service.create_invoice(invoice_data(customer.id), prefixes)
        payment = await PaymentService(db).apply_payment(
            customer.id, Decimal("500"), date(2026, 4, 2), invoice_id=invoice.id
        )

        await service.delete_invoice(invoice.id)

        stored = await db.get(Payment, payment.id)
        assert stored is not None
        assert stored.invoice_id is None
        assert customer.outstanding_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_delete_unknown(self, db) -> None:
        with pytest.raises(DocumentNotFoundError):
            await InvoiceService(db).delete_invoice(uuid.uuid4())


class TestListInvoices:
    """Test InvoiceService.list_invoices."""

    @pytest.mark.asyncio
    async def test_filters(self, db, customer, other_customer, prefixes) -> None:
        service = InvoiceService(db)
        await service.create_invoice(invoice_data(customer.id, invoice_date=date(2026, 4, 1)), prefixes)
        await service.create_invoice(invoice_data(customer.id, invoice_date=date(2026, 5, 1)), prefixes)
        await service.create_invoice(invoice_data(other_customer.id, invoice_date=date(2026, 5, 2)), prefixes)

        invoices, total, total_value = await service.list_invoices(customer_id=customer.id)
        assert total == 2
        assert total_value == Decimal("2360.00")
        assert [i.invoice_date for i in invoices] == [date(2026, 5, 1), date(2026, 4, 1)]

        _, total, _ = await service.list_invoices(start_date=date(2026, 5, 1))
        assert total == 2

        _, total, _ = await service.list_invoices(status="paid")
        assert total == 0


class TestDyeingBills:
    """Test DyeingBillService."""

    @pytest.mark.asyncio
    async def test_create_bill(self, db, customer, prefixes) -> None:
        bill = await DyeingBillService(db).create_bill(dyeing_data(customer.id), prefixes)

        assert bill.bill_number == "DYE-00001"
        assert bill.total_amount == Decimal("500.00")
        assert bill.status == "PENDING"
        assert len(bill.items) == 1
        assert customer.outstanding_balance == Decimal("500.00")

    @pytest.mark.asyncio
    async def test_custom_prefix(self, db, customer, prefixes) -> None:
        bill = await DyeingBillService(db).create_bill(
            dyeing_data(customer.id), SequencePrefixes(invoice="INV", dyeing_bill="DB")
        )

        assert bill.bill_number == "DB-00001"

    @pytest.mark.asyncio
    async def test_delete_bill(self, db, customer, prefixes) -> None:
        service = DyeingBillService(db)
        bill = await service.create_bill(dyeing_data(customer.id), prefixes)

        await service.delete_bill(bill.id)

        assert customer.outstanding_balance == Decimal("0")
        assert await db.scalar(select(func.count(DyeingBillItem.id))) == 0
        with pytest.raises(DocumentNotFoundError):
            await service.get_bill(bill.id)

    @pytest.mark.asyncio
    async def test_list_bills(self, db, customer, prefixes) -> None:
        service = DyeingBillService(db)
        await service.create_bill(dyeing_data(customer.id), prefixes)
        await service.create_bill(dyeing_data(customer.id, rate="10"), prefixes)

        bills, total, total_value = await service.list_bills(customer_id=customer.id)

        assert total == 2
        assert total_value == Decimal("600.00")


def rounded_product(quantity: Decimal, rate: Decimal) -> Decimal:
    return (quantity * rate).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class TestStoredPrecision:
    """Stored lines and tax splits stay consistent with their stored inputs."""

    @pytest.mark.parametrize(
        "build",
        [
            lambda: DyeingBillItemCreate(product_name="Dyeing", quantity="3", rate="0.335"),
            lambda: InvoiceItemCreate(item_name="Silk", hsn_code="5007", quantity="1.2345", rate="10"),
        ],
    )
    def test_line_precision_beyond_column_rejected(self, build) -> None:
        with pytest.raises(ValidationError):
            build()

    def test_tax_rate_precision_rejected(self) -> None:
        with pytest.raises(ValidationError):
            invoice_data(uuid.uuid4(), tax_rate="18.005")

    @pytest.mark.asyncio
    async def test_reloaded_items_match_quantity_times_rate(self, db, session_factory, customer, prefixes) -> None:
        await DyeingBillService(db).create_bill(dyeing_data(customer.id, quantity="3", rate="0.34"), prefixes)
        await InvoiceService(db).create_invoice(
            invoice_data(customer.id, quantity="0.333", rate="100.01", tax_rate="0.25"), prefixes
        )
        await db.commit()

        async with session_factory() as fresh:
            bill_items = (await fresh.execute(select(DyeingBillItem))).scalars().all()
            invoice_items = (await fresh.execute(select(InvoiceItem))).scalars().all()
            invoice = (await fresh.execute(select(Invoice))).scalar_one()

        for item in [*bill_items, *invoice_items]:
            assert item.amount == rounded_product(item.quantity, item.rate)
        assert bill_items[0].amount == Decimal("1.02")

        assert invoice.cgst_rate == Decimal("0.125")
        assert invoice.cgst_amount == rounded_product(invoice.subtotal, invoice.cgst_rate / 100)
        assert invoice.sgst_amount == invoice.cgst_amount
        assert invoice.total_amount == invoice.subtotal + invoice.cgst_amount + invoice.sgst_amount

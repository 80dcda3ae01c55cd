"""Tests for payment application and allocation."""
import uuid
from datetime import date
from decimal import Decimal

import pytest

from billbook.core.exceptions import (
    AggregationError,
    CustomerNotFoundError,
    InvalidAmountError,
    OverpaymentError,
    PaymentTargetError,
)
from billbook.models.billing import Payment
from billbook.services.dyeing_service import DyeingBillService
from billbook.services.invoice_service import InvoiceService
from billbook.services.payment_service import PaymentService

from factories import invoice_data, dyeing_data


class TestPaymentValidation:
    """Amounts rejected before anything is written."""

    @pytest.mark.parametrize("amount", ["0", "-10", "0.00"])
    @pytest.mark.asyncio
    async def test_non_positive_amount(self, db, customer, amount) -> None:
        with pytest.raises(InvalidAmountError):
            await PaymentService(db).apply_payment(customer.id, Decimal(amount))

    @pytest.mark.asyncio
    async def test_more_than_two_decimals(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        with pytest.raises(InvalidAmountError):
            await PaymentService(db).apply_payment(customer.id, Decimal("10.005"))

    @pytest.mark.asyncio
    async def test_unknown_customer(self, db) -> None:
        with pytest.raises(CustomerNotFoundError):
            await PaymentService(db).apply_payment(uuid.uuid4(), Decimal("10"))

    @pytest.mark.asyncio
    async def test_nothing_outstanding(self, db, customer) -> None:
        with pytest.raises(OverpaymentError) as exc_info:
            await PaymentService(db).apply_payment(customer.id, Decimal("1"))

        assert exc_info.value.outstanding == Decimal("0")


class TestApplyPayment:
    """Test PaymentService.apply_payment."""

    @pytest.mark.asyncio
    async def test_full_payment_clears_balance(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        payment = await PaymentService(db).apply_payment(customer.id, Decimal("1180"), date(2026, 4, 10))

        assert payment.amount == Decimal("1180")
        assert payment.payment_method == "CASH"
        assert customer.outstanding_balance == Decimal("0")
        assert invoice.paid_amount == Decimal("1180.00")
        assert invoice.status == "PAID"

    @pytest.mark.asyncio
    async def test_overpayment_rejected_with_outstanding(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        with pytest.raises(OverpaymentError) as exc_info:
            await PaymentService(db).apply_payment(customer.id, Decimal("1180.01"))

        assert exc_info.value.outstanding == Decimal("1180.00")
        assert exc_info.value.details["outstanding_balance"] == "1180.00"
        assert exc_info.value.error_code == "OVERPAYMENT"
        assert invoice.paid_amount == Decimal("0")
        assert customer.outstanding_balance == Decimal("1180.00")

    @pytest.mark.asyncio
    async def test_partial_payment(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        await PaymentService(db).apply_payment(customer.id, "180.50")

        assert invoice.paid_amount == Decimal("180.50")
        assert invoice.status == "PARTIAL"
        assert customer.outstanding_balance == Decimal("999.50")

    @pytest.mark.asyncio
    async def test_successive_payments(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        service = PaymentService(db)

        await service.apply_payment(customer.id, Decimal("1000"))
        await service.apply_payment(customer.id, Decimal("180"))

        assert invoice.status == "PAID"
        assert customer.outstanding_balance == Decimal("0")
        with pytest.raises(OverpaymentError):
            await service.apply_payment(customer.id, Decimal("0.01"))

    @pytest.mark.asyncio
    async def test_default_note_and_method(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        payment = await PaymentService(db).apply_payment(
            customer.id, Decimal("100"), payment_method="upi"
        )

        assert payment.notes == "Payment received from Sharma Textiles"
        assert payment.payment_method == "UPI"
        assert payment.payment_date == date.today()

    @pytest.mark.asyncio
    async def test_explicit_note_kept(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        payment = await PaymentService(db).apply_payment(customer.id, Decimal("100"), notes="Cheque 000123")

        assert payment.notes == "Cheque 000123"


class TestAllocation:
    """Payments settle documents oldest first, target invoice before all others."""

    @pytest.mark.asyncio
    async def test_oldest_document_first(self, db, customer, prefixes) -> None:
        bill = await DyeingBillService(db).create_bill(
            dyeing_data(customer.id, bill_date=date(2026, 3, 1)), prefixes
        )
        invoice = await InvoiceService(db).create_invoice(
            invoice_data(customer.id, invoice_date=date(2026, 4, 1)), prefixes
        )

        await PaymentService(db).apply_payment(customer.id, Decimal("700"))

        assert bill.paid_amount == Decimal("500.00")
        assert bill.status == "PAID"
        assert invoice.paid_amount == Decimal("200.00")
        assert invoice.status == "PARTIAL"
        assert customer.outstanding_balance == Decimal("980.00")

    @pytest.mark.asyncio
    async def test_invoice_before_bill_on_same_date(self, db, customer, prefixes) -> None:
        bill = await DyeingBillService(db).create_bill(dyeing_data(customer.id), prefixes)
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        await PaymentService(db).apply_payment(customer.id, Decimal("1180"))

        assert invoice.status == "PAID"
        assert bill.paid_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_target_invoice_first(self, db, customer, prefixes) -> None:
        service = InvoiceService(db)
        older = await service.create_invoice(invoice_data(customer.id, invoice_date=date(2026, 1, 5)), prefixes)
        newer = await service.create_invoice(
            invoice_data(customer.id, rate="100", invoice_date=date(2026, 6, 1)), prefixes
        )

        payment = await PaymentService(db).apply_payment(
            customer.id, Decimal("200"), invoice_id=newer.id
        )

        assert payment.invoice_id == newer.id
        assert newer.paid_amount == Decimal("118.00")
        assert newer.status == "PAID"
        assert older.paid_amount == Decimal("82.00")

    @pytest.mark.asyncio
    async def test_other_customers_invoice_rejected(self, db, customer, other_customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        foreign = await InvoiceService(db).create_invoice(invoice_data(other_customer.id), prefixes)

        with pytest.raises(PaymentTargetError):
            await PaymentService(db).apply_payment(customer.id, Decimal("10"), invoice_id=foreign.id)

    @pytest.mark.asyncio
    async def test_unknown_invoice_rejected(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)

        with pytest.raises(PaymentTargetError):
            await PaymentService(db).apply_payment(customer.id, Decimal("10"), invoice_id=uuid.uuid4())

    @pytest.mark.asyncio
    async def test_documents_of_other_customers_untouched(self, db, customer, other_customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        foreign = await InvoiceService(db).create_invoice(invoice_data(other_customer.id), prefixes)

        await PaymentService(db).apply_payment(customer.id, Decimal("1180"))

        assert foreign.paid_amount == Decimal("0")
        assert other_customer.outstanding_balance == Decimal("1180.00")

    @pytest.mark.asyncio
    async def test_stale_paid_status_still_allocated(self, db, customer, prefixes) -> None:
        invoice = await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        invoice.status = "PAID"
        await db.flush()

        await PaymentService(db).apply_payment(customer.id, Decimal("100"))

        assert invoice.paid_amount == Decimal("100.00")
        assert invoice.status == "PARTIAL"
        assert customer.outstanding_balance == Decimal("1080.00")

    @pytest.mark.asyncio
    async def test_unallocated_remainder_is_refused(self, db, customer, prefixes, monkeypatch) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        service = PaymentService(db)

        async def inflated_balance(customer_id, customer=None):
            return Decimal("5000.00")

        monkeypatch.setattr(service.ledger, "recompute_balance", inflated_balance)

        with pytest.raises(AggregationError) as exc_info:
            await service.apply_payment(customer.id, Decimal("2000"))

        assert exc_info.value.details["unallocated"] == "820.00"


class TestListPayments:
    """Test PaymentService.list_payments."""

    @pytest.mark.asyncio
    async def test_newest_first_with_totals(self, db, customer, other_customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        await InvoiceService(db).create_invoice(invoice_data(other_customer.id), prefixes)
        service = PaymentService(db)
        await service.apply_payment(customer.id, Decimal("100"), date(2026, 4, 2))
        await service.apply_payment(customer.id, Decimal("50"), date(2026, 4, 9))
        await service.apply_payment(other_customer.id, Decimal("10"), date(2026, 4, 5))

        payments, total, total_amount = await service.list_payments(customer_id=customer.id)

        assert total == 2
        assert total_amount == Decimal("150.00")
        assert [p.payment_date for p in payments] == [date(2026, 4, 9), date(2026, 4, 2)]
        assert all(isinstance(p, Payment) for p in payments)

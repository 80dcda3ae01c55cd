"""Tests for customer balance reconciliation."""
import logging
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from billbook.core.exceptions import AggregationError, CustomerNotFoundError
from billbook.services.ledger_service import LedgerService
from billbook.services.invoice_service import InvoiceService
from billbook.services.dyeing_service import DyeingBillService
from billbook.services.payment_service import PaymentService

from factories import invoice_data, dyeing_data, raw_invoice


class TestRecomputeBalance:
    """Test LedgerService.recompute_balance."""

    @pytest.mark.asyncio
    async def test_no_documents(self, db, customer) -> None:
        balance = await LedgerService(db).recompute_balance(customer.id)

        assert balance == Decimal("0")
        assert customer.outstanding_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_sums_invoices_and_dyeing_bills(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        await DyeingBillService(db).create_bill(dyeing_data(customer.id), prefixes)

        balance = await LedgerService(db).recompute_balance(customer.id)

        assert balance == Decimal("1680.00")
        assert customer.outstanding_balance == Decimal("1680.00")

    @pytest.mark.asyncio
    async def test_idempotent(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        ledger = LedgerService(db)

        first = await ledger.recompute_balance(customer.id)
        second = await ledger.recompute_balance(customer.id)

        assert first == second == Decimal("1180.00")

    @pytest.mark.asyncio
    async def test_repairs_a_stale_balance(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        customer.outstanding_balance = Decimal("5")
        await db.flush()

        balance = await LedgerService(db).recompute_balance(customer.id)

        assert balance == Decimal("1180.00")

    @pytest.mark.asyncio
    async def test_only_counts_own_documents(self, db, customer, other_customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        await InvoiceService(db).create_invoice(invoice_data(other_customer.id, rate="200"), prefixes)

        assert await LedgerService(db).recompute_balance(customer.id) == Decimal("1180.00")
        assert await LedgerService(db).recompute_balance(other_customer.id) == Decimal("236.00")

    @pytest.mark.asyncio
    async def test_negative_balance_is_stored_and_logged(self, db, customer, caplog) -> None:
        db.add(raw_invoice(customer.id, "INV-00001", total="100", paid="150"))
        await db.flush()

        with caplog.at_level(logging.WARNING, logger="billbook.services.ledger_service"):
            balance = await LedgerService(db).recompute_balance(customer.id)

        assert balance == Decimal("-50.00")
        assert customer.outstanding_balance == Decimal("-50.00")
        assert "negative outstanding balance" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_customer(self, db) -> None:
        with pytest.raises(CustomerNotFoundError):
            await LedgerService(db).recompute_balance(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_store_failure_raises_aggregation_error(self, db, customer, monkeypatch) -> None:
        ledger = LedgerService(db)

        async def broken_totals(customer_id):
            raise OperationalError("SELECT sum(...)", {}, Exception("disk I/O error"))

        monkeypatch.setattr(ledger, "_document_totals", broken_totals)

        with pytest.raises(AggregationError):
            await ledger.recompute_balance(customer.id)

    @pytest.mark.asyncio
    async def test_recompute_all(self, db, customer, other_customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id), prefixes)
        customer.outstanding_balance = Decimal("0")
        other_customer.outstanding_balance = Decimal("99")
        await db.flush()

        balances = await LedgerService(db).recompute_all()

        assert balances == {
            customer.id: Decimal("1180.00"),
            other_customer.id: Decimal("0.00"),
        }


class TestStatement:
    """Test LedgerService.get_statement."""

    @pytest.mark.asyncio
    async def test_statement_totals(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(
            invoice_data(customer.id, invoice_date=date(2026, 4, 1)), prefixes
        )
        await DyeingBillService(db).create_bill(
            dyeing_data(customer.id, bill_date=date(2026, 4, 15)), prefixes
        )
        await PaymentService(db).apply_payment(customer.id, Decimal("600"), date(2026, 4, 20))

        statement = await LedgerService(db).get_statement(customer.id)

        assert statement.customer_name == "Sharma Textiles"
        assert statement.total_billed == Decimal("1680.00")
        assert statement.total_paid == Decimal("600.00")
        assert statement.pending == Decimal("1080.00")
        assert statement.payments_received == Decimal("600.00")
        assert statement.invoice_count == 1
        assert statement.dyeing_bill_count == 1
        assert statement.payment_count == 1
        assert statement.last_document_date == date(2026, 4, 15)

    @pytest.mark.asyncio
    async def test_statement_pending_matches_balance(self, db, customer, prefixes) -> None:
        await InvoiceService(db).create_invoice(invoice_data(customer.id, rate="333.33", tax_rate="5"), prefixes)

        statement = await LedgerService(db).get_statement(customer.id)

        assert statement.pending == customer.outstanding_balance == Decimal("349.99")

    @pytest.mark.asyncio
    async def test_empty_statement(self, db, customer) -> None:
        statement = await LedgerService(db).get_statement(customer.id)

        assert statement.total_billed == Decimal("0")
        assert statement.last_document_date is None

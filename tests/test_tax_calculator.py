"""Tests for the GST split."""
from decimal import Decimal

import pytest

from billbook.core.exceptions import InvalidTaxInputError
from billbook.models.billing import TaxMode
from billbook.services.tax_calculator import compute_tax, line_amount, round_money


class TestComputeTax:
    """Test compute_tax."""

    def test_intrastate_splits_rate_in_half(self) -> None:
        breakdown = compute_tax(Decimal("1000"), Decimal("18"), TaxMode.INTRASTATE)

        assert breakdown.cgst_rate == Decimal("9")
        assert breakdown.sgst_rate == Decimal("9")
        assert breakdown.cgst_amount == Decimal("90")
        assert breakdown.sgst_amount == Decimal("90")
        assert breakdown.igst_rate is None
        assert breakdown.igst_amount is None
        assert breakdown.total == Decimal("1180")

    def test_interstate_uses_igst(self) -> None:
        breakdown = compute_tax(Decimal("1000"), Decimal("18"), TaxMode.INTERSTATE)

        assert breakdown.igst_rate == Decimal("18")
        assert breakdown.igst_amount == Decimal("180")
        assert breakdown.cgst_amount is None
        assert breakdown.sgst_amount is None
        assert breakdown.total == Decimal("1180")

    @pytest.mark.parametrize("subtotal", ["0", "1", "333.33", "1234.57", "99999.99"])
    @pytest.mark.parametrize("rate", ["0", "5", "12", "18", "28", "0.25"])
    def test_split_and_igst_carry_the_same_tax(self, subtotal, rate) -> None:
        intra = compute_tax(subtotal, rate, TaxMode.INTRASTATE)
        inter = compute_tax(subtotal, rate, TaxMode.INTERSTATE)

        assert intra.cgst_amount + intra.sgst_amount == inter.igst_amount
        assert intra.total == inter.total == Decimal(subtotal) + inter.igst_amount

    def test_accepts_lowercase_mode(self) -> None:
        assert compute_tax("100", "5", "interstate").mode == TaxMode.INTERSTATE

    def test_zero_rate(self) -> None:
        breakdown = compute_tax("500", "0", TaxMode.INTRASTATE)

        assert breakdown.tax_amount == Decimal("0")
        assert breakdown.total == Decimal("500")

    @pytest.mark.parametrize(
        "subtotal, rate, mode",
        [
            ("-1", "18", TaxMode.INTRASTATE),
            ("100", "-5", TaxMode.INTRASTATE),
            ("100", "100.01", TaxMode.INTERSTATE),
            ("100", "18", "sideways"),
        ],
    )
    def test_rejects_invalid_input(self, subtotal, rate, mode) -> None:
        with pytest.raises(InvalidTaxInputError):
            compute_tax(subtotal, rate, mode)


class TestRounding:
    """Test rounding of persisted amounts."""

    def test_round_money_half_up(self) -> None:
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")
        assert round_money("0.005") == Decimal("0.01")

    def test_line_amount(self) -> None:
        assert line_amount(Decimal("2.5"), Decimal("10.01")) == Decimal("25.03")
        assert line_amount("3", "333.333") == Decimal("1000.00")

    def test_rounded_breakdown_total_is_sum_of_parts(self) -> None:
        exact = compute_tax(Decimal("333.33"), Decimal("5"), TaxMode.INTRASTATE)
        rounded = exact.rounded()

        assert exact.cgst_amount == Decimal("8.33325")
        assert rounded.cgst_amount == Decimal("8.33")
        assert rounded.sgst_amount == Decimal("8.33")
        assert rounded.tax_amount == Decimal("16.66")
        assert rounded.total == rounded.subtotal + rounded.tax_amount == Decimal("349.99")

    def test_rounded_keeps_unused_fields_empty(self) -> None:
        rounded = compute_tax("100", "18", TaxMode.INTERSTATE).rounded()

        assert rounded.cgst_amount is None
        assert rounded.igst_amount == Decimal("18.00")

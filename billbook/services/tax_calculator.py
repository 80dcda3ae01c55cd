"""GST split calculation.

Intrastate sales carry CGST and SGST at half the rate each; interstate sales
carry IGST at the full rate. The two are mutually exclusive.

Arithmetic is exact Decimal throughout. Rounding to 2 places (half-up)
happens once, when a breakdown is persisted or displayed
(TaxBreakdown.rounded()), never on intermediate sums.
"""
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from billbook.core.exceptions import InvalidTaxInputError
from billbook.models.billing import TaxMode


TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")
MAX_RATE = Decimal("100")


def to_decimal(value: Union[Decimal, int, str, float]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value, not their binary one
    return Decimal(str(value))


def round_money(value: Union[Decimal, int, str, float]) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_amount(quantity: Union[Decimal, int, str], rate: Union[Decimal, int, str]) -> Decimal:
    """Persisted amount of a line item: quantity x rate, rounded."""
    return round_money(to_decimal(quantity) * to_decimal(rate))


@dataclass(frozen=True)
class TaxBreakdown:
    """Tax split for one document. Fields not used by the mode are None."""
    subtotal: Decimal
    tax_rate: Decimal
    mode: TaxMode
    cgst_rate: Optional[Decimal] = None
    sgst_rate: Optional[Decimal] = None
    igst_rate: Optional[Decimal] = None
    cgst_amount: Optional[Decimal] = None
    sgst_amount: Optional[Decimal] = None
    igst_amount: Optional[Decimal] = None

    @property
    def tax_amount(self) -> Decimal:
        return sum(
            (a for a in (self.cgst_amount, self.sgst_amount, self.igst_amount) if a is not None),
            Decimal("0"),
        )

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax_amount

    def rounded(self) -> "TaxBreakdown":
        """
        Copy with every populated amount rounded to 2 places.

        total of the copy is the sum of its rounded parts, so a persisted
        total always equals persisted subtotal + persisted tax.
        """
        def _r(value: Optional[Decimal]) -> Optional[Decimal]:
            return round_money(value) if value is not None else None

        return replace(
            self,
            subtotal=round_money(self.subtotal),
            cgst_amount=_r(self.cgst_amount),
            sgst_amount=_r(self.sgst_amount),
            igst_amount=_r(self.igst_amount),
        )


def compute_tax(
    subtotal: Union[Decimal, int, str],
    rate_percent: Union[Decimal, int, str],
    mode: Union[TaxMode, str],
) -> TaxBreakdown:
    """
    Split GST on a subtotal.

    Args:
        subtotal: Taxable value, >= 0
        rate_percent: GST rate in percent, 0-100
        mode: TaxMode or its string value

    Raises:
        InvalidTaxInputError: negative subtotal, rate out of range or unknown mode
    """
    subtotal = to_decimal(subtotal)
    rate = to_decimal(rate_percent)

    if subtotal < 0:
        raise InvalidTaxInputError(f"Subtotal cannot be negative: {subtotal}")
    if rate < 0 or rate > MAX_RATE:
        raise InvalidTaxInputError(f"GST rate must be between 0 and 100, got {rate}")

    try:
        mode = TaxMode(mode.upper() if isinstance(mode, str) else mode)
    except ValueError:
        raise InvalidTaxInputError(f"Unknown tax mode: {mode}")

    if mode == TaxMode.INTRASTATE:
        half_rate = rate / 2
        half_amount = subtotal * half_rate / HUNDRED
        return TaxBreakdown(
            subtotal=subtotal,
            tax_rate=rate,
            mode=mode,
            cgst_rate=half_rate,
            sgst_rate=half_rate,
            cgst_amount=half_amount,
            sgst_amount=half_amount,
        )

    return TaxBreakdown(
        subtotal=subtotal,
        tax_rate=rate,
        mode=mode,
        igst_rate=rate,
        igst_amount=subtotal * rate / HUNDRED,
    )

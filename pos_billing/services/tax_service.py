"""GST split of cart lines. No rounding happens here; see cart_totals_service."""
from decimal import Decimal
from typing import Optional, Tuple

from pos_billing.models import LineTax

HUNDRED = Decimal('100')


def _tax_factor(gst_rate: Decimal) -> Decimal:
    return 1 + gst_rate / HUNDRED


def unit_price_from_selling(selling_price: Decimal, gst_rate: Decimal, tax_included: bool) -> Decimal:
    """Tax-exclusive unit price behind a selling price."""
    if not tax_included:
        return selling_price
    return selling_price / _tax_factor(gst_rate)


def selling_from_unit(unit_price: Decimal, gst_rate: Decimal, tax_included: bool) -> Decimal:
    """Selling price shown for a tax-exclusive unit price."""
    if not tax_included:
        return unit_price
    return unit_price * _tax_factor(gst_rate)


def derive_line_prices(selling_price: Decimal, gst_rate: Decimal, tax_included: bool) -> Tuple[Decimal, Decimal]:
    """(unit_price, selling_price) pair satisfying the cart line invariant."""
    return unit_price_from_selling(selling_price, gst_rate, tax_included), selling_price


def decompose_line(
    selling_price: Decimal,
    quantity: int,
    gst_rate: Decimal,
    tax_included: bool,
    unit_price: Optional[Decimal] = None
) -> LineTax:
    """
    Split a line into taxable base and tax.

    Tax-inclusive lines back-calculate the base from `selling_price`;
    tax-exclusive lines charge tax on top of `unit_price` (which equals
    `selling_price` for them when not given).
    """
    if tax_included:
        total_with_tax = selling_price * quantity
        taxable_amount = total_with_tax / _tax_factor(gst_rate)
        return LineTax(taxable_amount=taxable_amount, tax_amount=total_with_tax - taxable_amount)

    base = selling_price if unit_price is None else unit_price
    taxable_amount = base * quantity
    return LineTax(taxable_amount=taxable_amount, tax_amount=taxable_amount * (gst_rate / HUNDRED))


def decompose_cart_line(line) -> LineTax:
    """decompose_line for a CartLine."""
    return decompose_line(
        line.selling_price,
        line.quantity,
        line.gst_rate,
        line.tax_included,
        unit_price=line.unit_price
    )

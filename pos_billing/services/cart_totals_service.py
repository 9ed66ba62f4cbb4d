"""
Cart aggregation: GST rate buckets, discount and round-off.

Lines are summed unrounded; the only rounding step is the final grand total
to whole currency units, and the difference is reported as `round_off` so
that `gross_total + round_off == grand_total` exactly.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable

from pos_billing.models import CartLine, CartTotals, RateBucket
from pos_billing.services.tax_service import decompose_cart_line
from pos_billing.utils.formatters import money_in, num_in

HUNDRED = Decimal('100')
WHOLE_UNIT = Decimal('1')
CENTS = Decimal('0.01')


def aggregate(lines: Iterable[CartLine], discount_percentage: Decimal = Decimal('0')) -> CartTotals:
    """
    Compute cart totals.

    `discount_percentage` is assumed validated (0-100). The discount applies
    to the pre-tax subtotal only and is never distributed into rate buckets.
    """
    totals = CartTotals(discount_percentage=Decimal(discount_percentage))

    for line in lines:
        line_tax = decompose_cart_line(line)
        totals.subtotal += line_tax.taxable_amount
        totals.item_count += line.quantity

        if line.gst_rate == 0:
            totals.exempted_amount += line_tax.taxable_amount
            continue

        bucket = totals.buckets.get(line.gst_rate)
        if bucket is None:
            bucket = totals.buckets[line.gst_rate] = RateBucket(gst_rate=line.gst_rate)
        bucket.add(line_tax)
        totals.total_gst += line_tax.tax_amount

    totals.discount = totals.subtotal * totals.discount_percentage / HUNDRED
    totals.gross_total = totals.subtotal + totals.total_gst - totals.discount
    totals.grand_total = round_to_unit(totals.gross_total)
    totals.round_off = totals.grand_total - totals.gross_total
    return totals


def round_to_unit(amount: Decimal) -> Decimal:
    """Nearest whole currency unit, halves rounded up."""
    return amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def totals_to_dict(totals: CartTotals, currency_symbol: str = '₹') -> Dict[str, Any]:
    """
    Serialize totals for the screens.

    Figures are two-decimal strings; `display` holds the same figures
    formatted for the receipt panel.
    """
    def money(value):
        return money_in(value, currency_symbol)

    buckets = []
    for bucket in totals.buckets_by_rate():
        half_rate = bucket.gst_rate / 2
        buckets.append({
            'gst_rate': num_in(bucket.gst_rate),
            'cgst_rate': num_in(half_rate),
            'sgst_rate': num_in(half_rate),
            'taxable_amount': str(to_cents(bucket.taxable_amount)),
            'cgst': str(to_cents(bucket.cgst)),
            'sgst': str(to_cents(bucket.sgst)),
            'tax_amount': str(to_cents(bucket.tax_amount)),
        })

    return {
        'item_count': totals.item_count,
        'subtotal': str(to_cents(totals.subtotal)),
        'exempted_amount': str(to_cents(totals.exempted_amount)),
        'cgst': str(to_cents(totals.cgst)),
        'sgst': str(to_cents(totals.sgst)),
        'total_gst': str(to_cents(totals.total_gst)),
        'discount_percentage': num_in(totals.discount_percentage),
        'discount': str(to_cents(totals.discount)),
        'gross_total': str(to_cents(totals.gross_total)),
        'round_off': str(to_cents(totals.round_off)),
        'grand_total': str(totals.grand_total),
        'buckets': buckets,
        'display': {
            'subtotal': money(totals.subtotal),
            'total_gst': money(totals.total_gst),
            'discount': money(totals.discount),
            'round_off': money(totals.round_off),
            'grand_total': money(totals.grand_total),
        },
    }

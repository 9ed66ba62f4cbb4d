"""Computed tax figures for a line and for a whole cart."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

ZERO = Decimal('0')


@dataclass(frozen=True)
class LineTax:
    """Taxable/tax split of a single cart line (unrounded)."""

    taxable_amount: Decimal
    tax_amount: Decimal

    @property
    def cgst(self) -> Decimal:
        return self.tax_amount / 2

    @property
    def sgst(self) -> Decimal:
        return self.tax_amount / 2


@dataclass
class RateBucket:
    """Running totals for every line sharing one GST rate."""

    gst_rate: Decimal
    taxable_amount: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    tax_amount: Decimal = ZERO

    def add(self, line_tax: LineTax) -> None:
        self.taxable_amount += line_tax.taxable_amount
        self.cgst += line_tax.cgst
        self.sgst += line_tax.sgst
        self.tax_amount += line_tax.tax_amount


@dataclass
class CartTotals:
    """Cart-level figures; only `grand_total` is rounded."""

    subtotal: Decimal = ZERO
    total_gst: Decimal = ZERO
    exempted_amount: Decimal = ZERO
    discount_percentage: Decimal = ZERO
    discount: Decimal = ZERO
    gross_total: Decimal = ZERO
    grand_total: Decimal = ZERO
    round_off: Decimal = ZERO
    item_count: int = 0
    buckets: Dict[Decimal, RateBucket] = field(default_factory=dict)

    @property
    def cgst(self) -> Decimal:
        return sum((b.cgst for b in self.buckets.values()), ZERO)

    @property
    def sgst(self) -> Decimal:
        return sum((b.sgst for b in self.buckets.values()), ZERO)

    def buckets_by_rate(self) -> List[RateBucket]:
        """Rate buckets for display, highest rate first."""
        return sorted(self.buckets.values(), key=lambda b: b.gst_rate, reverse=True)

"""Cart and cart line models (session-local, never persisted remotely)."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass
class CartLine:
    """
    One product in the cart.

    `unit_price` is always exclusive of tax. `selling_price` is the tier
    resolved retail price: tax-inclusive when `tax_included` is set,
    otherwise equal to `unit_price`. `base_price` is the product's
    tier-independent price as listed when the line was created.
    """

    line_id: int
    product_id: int
    name: str
    sku: str
    base_price: Decimal
    unit_price: Decimal
    selling_price: Decimal
    quantity: int
    gst_rate: Decimal
    tax_included: bool
    stock_ceiling: int
    hsn_code: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'line_id': self.line_id,
            'product_id': self.product_id,
            'name': self.name,
            'sku': self.sku,
            'base_price': str(self.base_price),
            'unit_price': str(self.unit_price),
            'selling_price': str(self.selling_price),
            'quantity': self.quantity,
            'gst_rate': str(self.gst_rate),
            'tax_included': self.tax_included,
            'stock_ceiling': self.stock_ceiling,
            'hsn_code': self.hsn_code,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartLine':
        return cls(
            line_id=int(data['line_id']),
            product_id=int(data['product_id']),
            name=data.get('name', ''),
            sku=data.get('sku', ''),
            base_price=Decimal(str(data['base_price'])),
            unit_price=Decimal(str(data['unit_price'])),
            selling_price=Decimal(str(data['selling_price'])),
            quantity=int(data['quantity']),
            gst_rate=Decimal(str(data['gst_rate'])),
            tax_included=bool(data['tax_included']),
            stock_ceiling=int(data['stock_ceiling']),
            hsn_code=data.get('hsn_code') or '',
        )


@dataclass
class Cart:
    """Cart for one POS screen; absence of a customer means a walk-in sale."""

    lines: List[CartLine] = field(default_factory=list)
    tier_id: Optional[int] = None
    customer_id: Optional[int] = None
    customer_name: str = ''
    discount_percentage: Decimal = Decimal('0')
    billing_state_id: Optional[int] = None
    next_line_id: int = 1

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find_line(self, line_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.line_id == line_id), None)

    def find_product_line(self, product_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation (decimals as strings) for the session."""
        return {
            'lines': [line.to_dict() for line in self.lines],
            'tier_id': self.tier_id,
            'customer_id': self.customer_id,
            'customer_name': self.customer_name,
            'discount_percentage': str(self.discount_percentage),
            'billing_state_id': self.billing_state_id,
            'next_line_id': self.next_line_id,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Cart':
        if not data:
            return cls()
        return cls(
            lines=[CartLine.from_dict(line) for line in data.get('lines', [])],
            tier_id=data.get('tier_id'),
            customer_id=data.get('customer_id'),
            customer_name=data.get('customer_name') or '',
            discount_percentage=Decimal(str(data.get('discount_percentage', '0'))),
            billing_state_id=data.get('billing_state_id'),
            next_line_id=int(data.get('next_line_id', 1)),
        )

"""Product model."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional


def to_decimal(value, default='0') -> Decimal:
    """Convert an API value (str, int, float, None) to Decimal without float noise."""
    if value is None or value == '':
        return Decimal(default)
    return Decimal(str(value))


@dataclass(frozen=True)
class Product:
    """Product as returned by the backend product lookup."""

    id: int
    name: str
    sku: str
    base_selling_price: Decimal
    gst_rate: Decimal
    tax_included: bool
    stock_quantity: int
    hsn_code: str = ''
    barcode: Optional[str] = None

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', sku='{self.sku}')>"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Product':
        """Build a product from the backend's JSON representation."""
        return cls(
            id=int(data['id']),
            name=data.get('name') or '',
            sku=data.get('sku') or '',
            base_selling_price=to_decimal(data.get('selling_price')),
            gst_rate=to_decimal(data.get('gst_rate')),
            tax_included=bool(data.get('tax_included', False)),
            stock_quantity=int(to_decimal(data.get('stock_quantity'))),
            hsn_code=data.get('hsn_code') or '',
            barcode=data.get('barcode') or None,
        )

    def matches_code(self, code: str) -> bool:
        """Exact, case-insensitive SKU or barcode match (scanner input)."""
        code = code.strip().lower()
        if not code:
            return False
        return self.sku.lower() == code or (self.barcode or '').lower() == code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'sku': self.sku,
            'barcode': self.barcode,
            'selling_price': str(self.base_selling_price),
            'gst_rate': str(self.gst_rate),
            'tax_included': self.tax_included,
            'stock_quantity': self.stock_quantity,
            'hsn_code': self.hsn_code,
        }

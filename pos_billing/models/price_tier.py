"""Pricing tier and per-product tier rule models."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict
import enum

from pos_billing.models.product import to_decimal


class RuleType(str, enum.Enum):
    """How a product tier rule adjusts the price."""
    FIXED = 'fixed'
    PERCENTAGE = 'percentage'


@dataclass(frozen=True)
class PricingTier:
    """Customer pricing tier (e.g. wholesaler) with a default adjustment."""

    id: int
    name: str
    default_percentage: Decimal
    is_active: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'PricingTier':
        return cls(
            id=int(data['id']),
            name=data.get('name') or '',
            default_percentage=to_decimal(data.get('default_percentage')),
            is_active=bool(data.get('is_active', True)),
        )


@dataclass(frozen=True)
class ProductTierRule:
    """
    Product-specific override for one tier.

    `value` is an absolute price for FIXED rules and a signed percentage
    for PERCENTAGE rules.
    """

    product_id: int
    tier_id: int
    type: RuleType
    value: Decimal
    id: int = 0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'ProductTierRule':
        product_id = data.get('product', data.get('product_id'))
        tier_id = data.get('tier', data.get('tier_id'))
        return cls(
            id=int(data.get('id') or 0),
            product_id=int(product_id),
            tier_id=int(tier_id),
            type=RuleType(str(data['type']).lower()),
            value=to_decimal(data.get('value')),
        )

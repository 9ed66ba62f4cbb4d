"""
Effective price resolution under customer pricing tiers.

The tier catalog is an immutable snapshot passed in explicitly; nothing in
this module reads request or session state.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pos_billing.exceptions import DuplicateTierRuleError
from pos_billing.models import PricingTier, Product, ProductTierRule, RuleType

HUNDRED = Decimal('100')


class PriceTierCatalog:
    """
    Read-only lookup of pricing tiers and product tier rules.

    At most one rule may exist per (product, tier) pair; building a catalog
    from data violating that raises DuplicateTierRuleError.
    """

    def __init__(self, tiers: Iterable[PricingTier] = (), rules: Iterable[ProductTierRule] = ()):
        self._tiers: Dict[int, PricingTier] = {tier.id: tier for tier in tiers}
        self._rules: Dict[Tuple[int, int], ProductTierRule] = {}
        for rule in rules:
            key = (rule.product_id, rule.tier_id)
            if key in self._rules:
                raise DuplicateTierRuleError(rule.product_id, rule.tier_id)
            self._rules[key] = rule

    @classmethod
    def from_api(cls, tiers: Iterable[Mapping[str, Any]], rules: Iterable[Mapping[str, Any]]) -> 'PriceTierCatalog':
        """Build a catalog from the backend's tier and rule JSON lists."""
        return cls(
            tiers=[PricingTier.from_api(t) for t in tiers],
            rules=[ProductTierRule.from_api(r) for r in rules],
        )

    def tier(self, tier_id: Optional[int]) -> Optional[PricingTier]:
        if tier_id is None:
            return None
        return self._tiers.get(tier_id)

    def rule_for(self, product_id: int, tier_id: int) -> Optional[ProductTierRule]:
        return self._rules.get((product_id, tier_id))

    def active_tiers(self) -> List[PricingTier]:
        """Tiers an operator may select, by name."""
        return sorted((t for t in self._tiers.values() if t.is_active), key=lambda t: t.name)

    def is_selectable(self, tier_id: int) -> bool:
        tier = self._tiers.get(tier_id)
        return tier is not None and tier.is_active


def apply_percentage(base: Decimal, percentage: Decimal) -> Decimal:
    """Signed adjustment: positive is a surcharge, negative a discount."""
    return base + base * (percentage / HUNDRED)


def resolve_base_price(
    base_price: Decimal,
    product_id: int,
    tier_id: Optional[int],
    catalog: PriceTierCatalog
) -> Decimal:
    """
    Effective unit selling price for a raw base price.

    Precedence: product rule for the tier, then the tier's default
    percentage, then the base price. A rule and the tier default never
    stack.
    """
    if tier_id is None:
        return base_price

    rule = catalog.rule_for(product_id, tier_id)
    if rule is not None:
        if rule.type is RuleType.FIXED:
            return rule.value
        return apply_percentage(base_price, rule.value)

    tier = catalog.tier(tier_id)
    if tier is None or tier.default_percentage == 0:
        return base_price
    return apply_percentage(base_price, tier.default_percentage)


def resolve_price(product: Product, tier_id: Optional[int], catalog: PriceTierCatalog) -> Decimal:
    """Effective unit selling price of a product under the selected tier."""
    return resolve_base_price(product.base_selling_price, product.id, tier_id, catalog)

"""
Unit tests for tier price resolution.
"""

import pytest
from decimal import Decimal

from pos_billing.exceptions import DuplicateTierRuleError
from pos_billing.models import PricingTier, ProductTierRule, RuleType
from pos_billing.services.pricing_service import (
    PriceTierCatalog, apply_percentage, resolve_base_price, resolve_price
)


class TestResolvePrice:
    """Tests for effective price precedence."""

    def test_no_tier_returns_base_price(self, product, catalog):
        """Without a tier the listed price is used."""
        assert resolve_price(product, None, catalog) == Decimal('100')

    def test_tier_default_percentage(self, product, catalog):
        """A -10% tier with no product rule gives 90."""
        assert resolve_price(product, 10, catalog) == Decimal('90')

    def test_fixed_rule_overrides_tier_default(self, product):
        """A fixed rule of 75 wins over the tier's -10% default."""
        catalog = PriceTierCatalog(
            tiers=[PricingTier(id=10, name='Wholesale', default_percentage=Decimal('-10'))],
            rules=[ProductTierRule(product_id=1, tier_id=10, type=RuleType.FIXED, value=Decimal('75'))],
        )
        assert resolve_price(product, 10, catalog) == Decimal('75')

    def test_percentage_rule_does_not_stack_with_default(self, inclusive_product, catalog):
        """A -20% product rule replaces the -10% default instead of adding to it."""
        assert resolve_price(inclusive_product, 10, catalog) == Decimal('94.4')

    def test_positive_percentage_is_a_surcharge(self, product, catalog):
        """Tier 20 has a fixed rule for product 1; other products get +5%."""
        assert resolve_base_price(Decimal('200'), 99, 20, catalog) == Decimal('210')

    def test_zero_default_returns_base(self, product, catalog):
        assert resolve_price(product, 40, catalog) == Decimal('100')

    def test_unknown_tier_returns_base(self, product, catalog):
        assert resolve_price(product, 999, catalog) == Decimal('100')

    def test_resolution_is_idempotent(self, product, catalog):
        """Resolving twice from the base never compounds."""
        first = resolve_price(product, 10, catalog)
        second = resolve_price(product, 10, catalog)
        assert first == second == Decimal('90')

    def test_apply_percentage(self):
        assert apply_percentage(Decimal('50'), Decimal('-50')) == Decimal('25')
        assert apply_percentage(Decimal('50'), Decimal('0')) == Decimal('50')


class TestPriceTierCatalog:
    """Tests for the tier catalog snapshot."""

    def test_duplicate_rule_rejected(self):
        """Two rules for one (product, tier) pair are refused at load time."""
        rules = [
            ProductTierRule(product_id=1, tier_id=10, type=RuleType.FIXED, value=Decimal('75')),
            ProductTierRule(product_id=1, tier_id=10, type=RuleType.PERCENTAGE, value=Decimal('-5')),
        ]
        with pytest.raises(DuplicateTierRuleError) as exc_info:
            PriceTierCatalog(tiers=[], rules=rules)
        assert exc_info.value.status_code == 502

    def test_active_tiers_sorted_by_name(self, catalog):
        names = [t.name for t in catalog.active_tiers()]
        assert names == ['Retail Plus', 'Standard', 'Wholesale']

    def test_inactive_tier_not_selectable(self, catalog):
        assert catalog.is_selectable(10) is True
        assert catalog.is_selectable(30) is False
        assert catalog.is_selectable(999) is False

    def test_from_api(self):
        """Backend JSON (strings, 'product'/'tier' keys) is accepted."""
        catalog = PriceTierCatalog.from_api(
            tiers=[{'id': 1, 'name': 'Wholesale', 'default_percentage': '-10.00', 'is_active': True}],
            rules=[{'id': 3, 'product': 7, 'tier': 1, 'type': 'FIXED', 'value': '75.00'}],
        )
        rule = catalog.rule_for(7, 1)
        assert rule.type is RuleType.FIXED
        assert rule.value == Decimal('75')
        assert catalog.tier(1).default_percentage == Decimal('-10')
        assert catalog.tier(None) is None

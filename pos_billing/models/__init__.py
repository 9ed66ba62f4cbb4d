"""Models package - exports the engine's plain data models."""
from pos_billing.models.product import Product
from pos_billing.models.price_tier import PricingTier, ProductTierRule, RuleType
from pos_billing.models.cart import Cart, CartLine
from pos_billing.models.totals import LineTax, RateBucket, CartTotals
from pos_billing.models.sale import PaymentMethod, SaleScreen, normalize_payment_method

__all__ = [
    # Catalog
    'Product', 'PricingTier', 'ProductTierRule', 'RuleType',
    # Cart
    'Cart', 'CartLine', 'LineTax', 'RateBucket', 'CartTotals',
    # Checkout
    'PaymentMethod', 'SaleScreen', 'normalize_payment_method',
]

"""Checkout enums shared by both POS screens."""
import enum


class PaymentMethod(str, enum.Enum):
    """Payment methods accepted by the order API."""
    CASH = 'cash'
    CARD = 'card'
    UPI = 'upi'
    NET_BANKING = 'net_banking'


class SaleScreen(str, enum.Enum):
    """Screens holding an independent cart. Value is the URL segment."""
    POS = 'pos'
    QUICK_SALE = 'quick-sale'

    @property
    def order_prefix(self) -> str:
        return 'QS' if self is SaleScreen.QUICK_SALE else 'POS'


def normalize_payment_method(value) -> str:
    """
    Normalize payment method value to the string the order API expects.

    Args:
        value: Can be None, PaymentMethod enum, or string

    Returns:
        str: one of 'cash', 'card', 'upi', 'net_banking'

    Raises:
        ValueError: If value is invalid
    """
    # Default to CASH if None
    if value is None:
        return PaymentMethod.CASH.value

    if isinstance(value, PaymentMethod):
        return value.value

    if isinstance(value, str):
        normalized = value.lower().strip().replace('-', '_').replace(' ', '_')
        if normalized in [m.value for m in PaymentMethod]:
            return normalized

    raise ValueError(f"Invalid payment method: {value}")

"""
Cart state operations shared by the POS and quick-sale screens.

Every operation either applies completely or raises before touching the
cart, so a rejected mutation leaves the cart as it was.
"""
import logging
from decimal import Decimal
from typing import Optional

from pos_billing.exceptions import (
    BusinessLogicError, InvalidDiscountError, NotFoundError,
    OutOfStockError, StockExceededError
)
from pos_billing.models import Cart, CartLine, Product
from pos_billing.services.pricing_service import PriceTierCatalog, resolve_base_price, resolve_price
from pos_billing.services.tax_service import derive_line_prices
from pos_billing.utils.number_format import parse_decimal

logger = logging.getLogger(__name__)


def add_to_cart(cart: Cart, product: Product, catalog: PriceTierCatalog) -> CartLine:
    """
    Add one unit of a product.

    A product already in the cart gets its quantity bumped, bounded by the
    stock snapshotted when the line was created.

    Raises:
        OutOfStockError: product has no stock.
        StockExceededError: one more unit would exceed the stock ceiling.
    """
    if product.stock_quantity <= 0:
        raise OutOfStockError(product.name)

    line = cart.find_product_line(product.id)
    if line:
        new_qty = line.quantity + 1
        if new_qty > line.stock_ceiling:
            raise StockExceededError(product.name, new_qty, line.stock_ceiling)
        line.quantity = new_qty
        logger.info(f"[CART] +1 {product.sku or product.id}: qty={new_qty}")
        return line

    selling_price = resolve_price(product, cart.tier_id, catalog)
    unit_price, selling_price = derive_line_prices(selling_price, product.gst_rate, product.tax_included)
    line = CartLine(
        line_id=cart.next_line_id,
        product_id=product.id,
        name=product.name,
        sku=product.sku,
        base_price=product.base_selling_price,
        unit_price=unit_price,
        selling_price=selling_price,
        quantity=1,
        gst_rate=product.gst_rate,
        tax_included=product.tax_included,
        stock_ceiling=product.stock_quantity,
        hsn_code=product.hsn_code,
    )
    cart.lines.append(line)
    cart.next_line_id += 1
    logger.info(f"[CART] Added {product.sku or product.id} as line {line.line_id} at {selling_price}")
    return line


def change_quantity(cart: Cart, line_id: int, quantity: int) -> bool:
    """
    Set a line's quantity.

    Quantities below 1 are ignored and quantities above the stock ceiling
    leave the line unchanged; both return False instead of raising.

    Raises:
        NotFoundError: no line with that id.
    """
    line = cart.find_line(line_id)
    if line is None:
        raise NotFoundError('Item is not in the cart')

    if quantity < 1:
        return False
    if quantity > line.stock_ceiling:
        logger.info(f"[CART] Quantity {quantity} for line {line_id} exceeds stock {line.stock_ceiling}")
        return False

    line.quantity = quantity
    return True


def remove_line(cart: Cart, line_id: int) -> None:
    """Remove a line; unknown ids are ignored."""
    cart.lines = [line for line in cart.lines if line.line_id != line_id]


def change_tier(cart: Cart, tier_id: Optional[int], catalog: PriceTierCatalog) -> None:
    """
    Select a pricing tier and re-price every line.

    Lines are always re-resolved from their retained base price, so
    successive tier changes never compound.

    Raises:
        BusinessLogicError: tier is unknown or inactive.
    """
    if tier_id is not None and not catalog.is_selectable(tier_id):
        raise BusinessLogicError(f'Price tier {tier_id} is not available')

    for line in cart.lines:
        selling_price = resolve_base_price(line.base_price, line.product_id, tier_id, catalog)
        line.unit_price, line.selling_price = derive_line_prices(selling_price, line.gst_rate, line.tax_included)

    cart.tier_id = tier_id
    logger.info(f"[CART] Tier changed to {tier_id}, {len(cart.lines)} lines re-priced")


def set_discount(cart: Cart, value) -> Decimal:
    """
    Set the cart-level discount percentage.

    Raises:
        InvalidDiscountError: not a number or outside [0, 100].
    """
    try:
        discount = parse_decimal(value)
    except ValueError:
        raise InvalidDiscountError(value)

    if discount < 0 or discount > 100:
        raise InvalidDiscountError(value)

    cart.discount_percentage = discount
    return discount


def set_customer(cart: Cart, customer_id: Optional[int], customer_name: str = '') -> None:
    """Select a customer; None means walk-in."""
    cart.customer_id = customer_id
    cart.customer_name = customer_name if customer_id is not None else ''


def set_billing_state(cart: Cart, state_id: Optional[int]) -> None:
    """Billing state / place of supply, forwarded with the order."""
    cart.billing_state_id = state_id


def reset_cart(cart: Cart) -> None:
    """Clear lines and selections after checkout or cancellation. Line ids keep counting up."""
    cart.lines = []
    cart.tier_id = None
    cart.customer_id = None
    cart.customer_name = ''
    cart.discount_percentage = Decimal('0')
    cart.billing_state_id = None

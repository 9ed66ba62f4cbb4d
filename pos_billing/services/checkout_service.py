"""
Checkout: turn a cart into an order submission for the backend.

The backend is the authority on the final invoice; the payload carries the
unrounded tax-exclusive unit prices and the totals shown to the cashier, so
the totals can be re-derived from the items exactly.
"""
import logging
import time
from typing import Any, Dict, Optional

from pos_billing.exceptions import BusinessLogicError, EmptyCartCheckoutError
from pos_billing.models import Cart, SaleScreen, normalize_payment_method
from pos_billing.services.backend_client import BackendClient
from pos_billing.services.cart_service import reset_cart, set_customer
from pos_billing.services.cart_totals_service import aggregate, to_cents

logger = logging.getLogger(__name__)


def generate_order_number(screen: SaleScreen) -> str:
    return f"{screen.order_prefix}-{int(time.time() * 1000)}"


def build_order_payload(cart: Cart, payment_method: str, screen: SaleScreen) -> Dict[str, Any]:
    """
    Build the order-creation payload.

    Raises:
        EmptyCartCheckoutError: cart has no lines.
        BusinessLogicError: unknown payment method.
    """
    if cart.is_empty:
        raise EmptyCartCheckoutError()

    try:
        method = normalize_payment_method(payment_method)
    except ValueError:
        raise BusinessLogicError(f'Invalid payment method: {payment_method}')

    totals = aggregate(cart.lines, cart.discount_percentage)
    return {
        'order_number': generate_order_number(screen),
        'customer': cart.customer_id,
        'payment_method': method,
        'payment_status': 'paid',
        'billing_state': cart.billing_state_id,
        'place_of_supply': cart.billing_state_id,
        'discount_percentage': str(cart.discount_percentage),
        'subtotal': str(to_cents(totals.subtotal)),
        'gst_amount': str(to_cents(totals.total_gst)),
        'discount_amount': str(to_cents(totals.discount)),
        'round_off': str(to_cents(totals.round_off)),
        'total_amount': str(to_cents(totals.grand_total)),
        'items': [
            {
                'product': line.product_id,
                'quantity': line.quantity,
                'unit_price': format(line.unit_price, 'f'),
                'gst_rate': str(line.gst_rate),
                'hsn_code': line.hsn_code,
            }
            for line in cart.lines
        ],
    }


def checkout(
    cart: Cart,
    client: BackendClient,
    payment_method: str,
    screen: SaleScreen,
    guest_name: Optional[str] = None,
    guest_phone: Optional[str] = None
) -> Dict[str, Any]:
    """
    Submit the cart as a paid sale and reset it.

    A guest customer is created first when no customer is selected and a
    guest name is given. If the backend rejects the sale the cart is left
    untouched so the operator can retry.
    """
    payload = build_order_payload(cart, payment_method, screen)

    if cart.customer_id is None and guest_name and guest_name.strip():
        guest = client.create_guest_customer(guest_name.strip(), guest_phone)
        set_customer(cart, int(guest['id']), guest.get('name') or guest_name.strip())
        payload['customer'] = cart.customer_id

    sale = client.create_sale(payload)
    logger.info(
        f"[CHECKOUT] {payload['order_number']} confirmed: total={payload['total_amount']} "
        f"method={payload['payment_method']} customer={payload['customer']}"
    )
    reset_cart(cart)
    return sale

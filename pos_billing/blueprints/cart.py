"""
Cart endpoints shared by the POS and quick-sale screens.

Both screens drive the same engine; `screen` in the URL selects which
session cart is used (/pos/cart, /quick-sale/cart).
"""
from flask import Blueprint, request, session, jsonify, current_app, g, abort, Response
from typing import Any, Dict, Optional, Tuple, Union

from pos_billing.exceptions import BusinessLogicError
from pos_billing.middleware import require_login
from pos_billing.models import Cart, CartLine, Product, SaleScreen, normalize_payment_method
from pos_billing.services import cart_service
from pos_billing.services.backend_client import BackendClient
from pos_billing.services.cache_service import get_cache
from pos_billing.services.cart_totals_service import aggregate, totals_to_dict, to_cents
from pos_billing.services.catalog_service import load_catalog
from pos_billing.services.checkout_service import checkout
from pos_billing.services.pricing_service import PriceTierCatalog
from pos_billing.utils.formatters import money_in
from pos_billing.utils.number_format import parse_quantity
from pos_billing.blueprints.metrics import checkouts_total

cart_bp = Blueprint('cart', __name__, url_prefix='/<screen>/cart')


@cart_bp.url_value_preprocessor
def pull_screen(endpoint, values):
    try:
        g.screen = SaleScreen(values.pop('screen'))
    except ValueError:
        abort(404)


@cart_bp.url_defaults
def add_screen(endpoint, values):
    if 'screen' not in values and g.get('screen'):
        values['screen'] = g.screen.value


# =====================================================
# HELPERS (also used by the screen blueprints)
# =====================================================

def get_cart(screen: SaleScreen) -> Cart:
    """Get the screen's cart from the session."""
    carts = session.get('cart_by_screen') or {}
    return Cart.from_dict(carts.get(screen.value))


def save_cart(screen: SaleScreen, cart: Cart) -> None:
    """Save the screen's cart to the session (decimals as strings)."""
    carts = dict(session.get('cart_by_screen') or {})
    carts[screen.value] = cart.to_dict()
    session['cart_by_screen'] = carts
    session.modified = True


def get_backend_client() -> BackendClient:
    return BackendClient(
        current_app.config['BACKEND_API_URL'],
        access_token=g.get('access_token'),
        timeout=current_app.config.get('BACKEND_TIMEOUT', 10)
    )


def get_catalog(client: BackendClient) -> PriceTierCatalog:
    """Tier catalog snapshot for the operator's company."""
    return load_catalog(
        client,
        g.get('company_id') or 'default',
        cache=get_cache(),
        ttl=current_app.config.get('CACHE_CATALOG_TTL')
    )


def request_payload() -> Dict[str, Any]:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def _line_to_dict(line: CartLine) -> Dict[str, Any]:
    symbol = current_app.config.get('CURRENCY_SYMBOL', '₹')
    data = line.to_dict()
    data['line_total'] = str(to_cents(line.unit_price * line.quantity))
    data['display'] = {
        'unit_price': money_in(line.unit_price, symbol),
        'selling_price': money_in(line.selling_price, symbol),
        'line_total': money_in(line.unit_price * line.quantity, symbol),
    }
    return data


def cart_response(
    cart: Cart,
    message: Optional[str] = None,
    warning: Optional[str] = None,
    status_code: int = 200,
    **extra
) -> Tuple[Response, int]:
    """JSON view of a cart with freshly aggregated totals."""
    totals = aggregate(cart.lines, cart.discount_percentage)
    body = {
        'status': 'ok',
        'cart': {
            'lines': [_line_to_dict(line) for line in cart.lines],
            'tier_id': cart.tier_id,
            'customer_id': cart.customer_id,
            'customer_name': cart.customer_name or 'Walk-in Customer',
            'discount_percentage': str(cart.discount_percentage),
            'billing_state_id': cart.billing_state_id,
        },
        'totals': totals_to_dict(totals, current_app.config.get('CURRENCY_SYMBOL', '₹')),
    }
    if message:
        body['message'] = message
    if warning:
        body['warning'] = warning
    body.update(extra)
    return jsonify(body), status_code


def add_product_to_cart(screen: SaleScreen, client: BackendClient, product: Product) -> Tuple[Cart, CartLine]:
    """Add a product to the screen's cart and persist it in the session."""
    cart = get_cart(screen)
    catalog = get_catalog(client) if cart.tier_id is not None else PriceTierCatalog()
    line = cart_service.add_to_cart(cart, product, catalog)
    save_cart(screen, cart)
    return cart, line


def _optional_int(value) -> Optional[int]:
    if value in (None, '', 'null'):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'Invalid id: {value}')


# =====================================================
# ROUTES
# =====================================================

@cart_bp.route('', methods=['GET'])
@require_login
def view_cart() -> Union[Response, Tuple[Response, int]]:
    """Cart with totals."""
    return cart_response(get_cart(g.screen))


@cart_bp.route('', methods=['DELETE'])
@require_login
def cancel_cart() -> Union[Response, Tuple[Response, int]]:
    """Operator cancelled the sale: reset the cart."""
    cart = get_cart(g.screen)
    cart_service.reset_cart(cart)
    save_cart(g.screen, cart)
    return cart_response(cart, message='Sale cancelled')


@cart_bp.route('/items', methods=['POST'])
@require_login
def add_item() -> Union[Response, Tuple[Response, int]]:
    """Add one unit of a product."""
    payload = request_payload()
    product_id = _optional_int(payload.get('product_id'))
    if product_id is None:
        raise BusinessLogicError('product_id is required')

    client = get_backend_client()
    product = Product.from_api(client.get_product(product_id))
    cart, line = add_product_to_cart(g.screen, client, product)

    current_app.logger.info(
        f"[{g.screen.value}] cart_add: product_id={product_id}, "
        f"line_id={line.line_id}, qty={line.quantity}, cart_size={len(cart.lines)}"
    )
    return cart_response(cart, message=f'"{product.name}" added to cart')


@cart_bp.route('/items/<int:line_id>', methods=['PATCH', 'POST'])
@require_login
def update_item(line_id: int) -> Union[Response, Tuple[Response, int]]:
    """Change a line's quantity; out-of-range values leave it unchanged."""
    payload = request_payload()
    try:
        quantity = parse_quantity(payload.get('quantity'))
    except ValueError:
        raise BusinessLogicError('Invalid quantity')

    cart = get_cart(g.screen)
    if cart_service.change_quantity(cart, line_id, quantity):
        save_cart(g.screen, cart)
        return cart_response(cart)

    line = cart.find_line(line_id)
    if quantity < 1:
        warning = 'Quantity must be at least 1'
    else:
        warning = f'Only {line.stock_ceiling} of "{line.name}" available'
    return cart_response(cart, warning=warning)


@cart_bp.route('/items/<int:line_id>', methods=['DELETE'])
@require_login
def remove_item(line_id: int) -> Union[Response, Tuple[Response, int]]:
    cart = get_cart(g.screen)
    cart_service.remove_line(cart, line_id)
    save_cart(g.screen, cart)
    return cart_response(cart, message='Item removed from cart')


@cart_bp.route('/tier', methods=['PUT'])
@require_login
def change_tier() -> Union[Response, Tuple[Response, int]]:
    """Select a pricing tier (null for none) and re-price the cart."""
    tier_id = _optional_int(request_payload().get('tier_id'))
    client = get_backend_client()
    cart = get_cart(g.screen)
    cart_service.change_tier(cart, tier_id, get_catalog(client))
    save_cart(g.screen, cart)
    return cart_response(cart)


@cart_bp.route('/discount', methods=['PUT'])
@require_login
def set_discount() -> Union[Response, Tuple[Response, int]]:
    cart = get_cart(g.screen)
    cart_service.set_discount(cart, request_payload().get('discount_percentage'))
    save_cart(g.screen, cart)
    return cart_response(cart)


@cart_bp.route('/customer', methods=['PUT'])
@require_login
def set_customer() -> Union[Response, Tuple[Response, int]]:
    payload = request_payload()
    cart = get_cart(g.screen)
    cart_service.set_customer(cart, _optional_int(payload.get('customer_id')), payload.get('customer_name') or '')
    save_cart(g.screen, cart)
    return cart_response(cart)


@cart_bp.route('/billing-state', methods=['PUT'])
@require_login
def set_billing_state() -> Union[Response, Tuple[Response, int]]:
    cart = get_cart(g.screen)
    cart_service.set_billing_state(cart, _optional_int(request_payload().get('state_id')))
    save_cart(g.screen, cart)
    return cart_response(cart)


@cart_bp.route('/checkout', methods=['POST'])
@require_login
def checkout_cart() -> Union[Response, Tuple[Response, int]]:
    """Submit the cart as a paid sale."""
    payload = request_payload()
    return submit_sale(g.screen, payload.get('payment_method'), payload.get('guest_name'), payload.get('guest_phone'))


def submit_sale(
    screen: SaleScreen,
    payment_method: Optional[str],
    guest_name: Optional[str] = None,
    guest_phone: Optional[str] = None
) -> Tuple[Response, int]:
    """Run checkout for a screen's cart and answer with the created sale."""
    cart = get_cart(screen)
    try:
        sale = checkout(cart, get_backend_client(), payment_method, screen, guest_name, guest_phone)
    finally:
        # A guest customer created before a failed submission is kept for the retry
        save_cart(screen, cart)

    checkouts_total.labels(screen=screen.value, payment_method=normalize_payment_method(payment_method)).inc()
    current_app.logger.info(f"[{screen.value}] Sale completed: {sale.get('order_number')}")
    return cart_response(cart, message='Sale completed', status_code=201, sale=sale)

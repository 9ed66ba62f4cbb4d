"""Full POS screen: session bootstrap and product search."""
from flask import Blueprint, request, jsonify, current_app, Response
from flask_wtf.csrf import generate_csrf
from typing import Tuple, Union

from pos_billing.middleware import require_login
from pos_billing.models import Product, SaleScreen
from pos_billing.blueprints.cart import get_backend_client, get_cart, get_catalog
from pos_billing.services.cart_totals_service import aggregate, totals_to_dict

pos_bp = Blueprint('pos', __name__, url_prefix='/pos')


@pos_bp.route('/', methods=['GET'])
@require_login
def bootstrap() -> Union[Response, Tuple[Response, int]]:
    """Everything the POS screen loads on entry: tiers, customers, states, cart."""
    client = get_backend_client()
    catalog = get_catalog(client)
    cart = get_cart(SaleScreen.POS)

    customers = client.list_customers()
    states = client.list_states()

    current_app.logger.info(
        f"[pos] bootstrap: {len(catalog.active_tiers())} tiers, "
        f"{len(customers)} customers, {len(cart.lines)} lines in cart"
    )
    return jsonify({
        'status': 'ok',
        'tiers': [
            {'id': t.id, 'name': t.name, 'default_percentage': str(t.default_percentage)}
            for t in catalog.active_tiers()
        ],
        'customers': customers,
        'states': states,
        'csrf_token': generate_csrf(),
        'cart': cart.to_dict(),
        'totals': totals_to_dict(
            aggregate(cart.lines, cart.discount_percentage),
            current_app.config.get('CURRENCY_SYMBOL', '₹')
        ),
    })


@pos_bp.route('/products', methods=['GET'])
@require_login
def product_search() -> Union[Response, Tuple[Response, int]]:
    """Search products by name, SKU or barcode."""
    search_query = request.args.get('q', '').strip()[:100]
    products = [Product.from_api(p) for p in get_backend_client().list_products(search_query or None)]
    return jsonify({
        'status': 'ok',
        'products': [p.to_dict() for p in products],
    })

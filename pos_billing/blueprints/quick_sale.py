"""Quick-sale screen: scanner-first search and one-click payment."""
from flask import Blueprint, request, jsonify, current_app, Response
from flask_wtf.csrf import generate_csrf
from typing import List, Tuple, Union

from pos_billing.middleware import require_login
from pos_billing.models import Product, SaleScreen
from pos_billing.blueprints.cart import (
    add_product_to_cart, cart_response, get_backend_client, get_cart, request_payload, submit_sale
)
from pos_billing.services.backend_client import BackendClient

quick_sale_bp = Blueprint('quick_sale', __name__, url_prefix='/quick-sale')


@quick_sale_bp.route('/', methods=['GET'])
@require_login
def bootstrap() -> Union[Response, Tuple[Response, int]]:
    """Current quick-sale cart and the CSRF token for its mutations."""
    return cart_response(get_cart(SaleScreen.QUICK_SALE), csrf_token=generate_csrf())


def _in_stock_products(client: BackendClient, search_query: str) -> List[Product]:
    products = [Product.from_api(p) for p in client.list_products(search_query)]
    return [p for p in products if p.stock_quantity > 0]


@quick_sale_bp.route('/products', methods=['GET'])
@require_login
def product_search() -> Union[Response, Tuple[Response, int]]:
    """In-stock products matching the typed text; nothing for an empty query."""
    search_query = request.args.get('q', '').strip()[:100]
    if not search_query:
        return jsonify({'status': 'ok', 'products': []})

    products = _in_stock_products(get_backend_client(), search_query)
    return jsonify({'status': 'ok', 'products': [p.to_dict() for p in products]})


@quick_sale_bp.route('/scan', methods=['POST'])
@require_login
def scan() -> Union[Response, Tuple[Response, int]]:
    """
    Scanner input: an exact SKU or barcode match is added to the cart.

    Without an exact match the search results are returned so the operator
    can pick one.
    """
    code = str(request_payload().get('code') or '').strip()[:100]
    if not code:
        return jsonify({'status': 'ok', 'added': False, 'products': []})

    client = get_backend_client()
    products = _in_stock_products(client, code)
    match = next((p for p in products if p.matches_code(code)), None)

    if match is None:
        return jsonify({'status': 'ok', 'added': False, 'products': [p.to_dict() for p in products]})

    cart, line = add_product_to_cart(SaleScreen.QUICK_SALE, client, match)
    current_app.logger.info(f"[quick-sale] scan '{code}' -> product {match.id}, qty={line.quantity}")
    return cart_response(cart, message=f'"{match.name}" added to cart', added=True)


@quick_sale_bp.route('/pay/<method>', methods=['POST'])
@require_login
def pay(method: str) -> Union[Response, Tuple[Response, int]]:
    """One-click payment for the current quick-sale cart."""
    payload = request_payload()
    return submit_sale(SaleScreen.QUICK_SALE, method, payload.get('guest_name'), payload.get('guest_phone'))

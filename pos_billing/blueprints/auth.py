"""
Operator session hand-off.

Login itself happens against the backend; the front end posts the issued
access token and company here so the cart endpoints can use them.
"""

from flask import Blueprint, request, session, jsonify, current_app, g, Response
from flask_wtf.csrf import generate_csrf
from typing import Tuple, Union
import logging

from pos_billing.exceptions import BusinessLogicError
from pos_billing.services.backend_client import BackendClient

logger = logging.getLogger(__name__)


auth_bp = Blueprint('auth', __name__, url_prefix='/session')


@auth_bp.route('', methods=['GET'])
def current_session() -> Union[Response, Tuple[Response, int]]:
    """Whether an operator is signed in, plus the CSRF token for the POST below."""
    return jsonify({
        'status': 'ok',
        'authenticated': bool(g.get('access_token')),
        'company_id': g.get('company_id'),
        'user_id': g.get('user_id'),
        'csrf_token': generate_csrf(),
    })


@auth_bp.route('', methods=['POST'])
def start_session() -> Union[Response, Tuple[Response, int]]:
    """
    Store a backend-issued token and company in the session.

    The token is checked with one authenticated backend call first; a
    rejected token answers 401 and leaves the session untouched.
    """
    payload = request.get_json(silent=True) or request.form.to_dict()
    access_token = str(payload.get('access_token') or '').strip()
    company_id = payload.get('company_id')

    if not access_token:
        raise BusinessLogicError('access_token is required')
    if company_id in (None, ''):
        raise BusinessLogicError('company_id is required')

    client = BackendClient(
        current_app.config['BACKEND_API_URL'],
        access_token=access_token,
        timeout=current_app.config.get('BACKEND_TIMEOUT', 10)
    )
    client.list_states()

    session.clear()
    session['access_token'] = access_token
    session['company_id'] = company_id
    session['user_id'] = payload.get('user_id')
    session.permanent = True

    logger.info(f"[AUTH] Session started: company={company_id} user={payload.get('user_id')}")
    return jsonify({'status': 'ok', 'csrf_token': generate_csrf()}), 201


@auth_bp.route('', methods=['DELETE'])
def end_session() -> Union[Response, Tuple[Response, int]]:
    """Logout: drop the token and both screens' carts."""
    session.clear()
    return jsonify({'status': 'ok'})

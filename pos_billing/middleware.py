"""Middleware for operator session context."""
from functools import wraps
from flask import session, g, jsonify


def load_operator_context():
    """
    Load the operator's backend credentials into g.

    Login happens against the backend; its tokens and the operator's
    company are stored in the session by the login flow.
    """
    g.access_token = session.get('access_token')
    g.company_id = session.get('company_id')
    g.user_id = session.get('user_id')


def require_login(f):
    """Decorator: answer 401 when no backend token is in the session."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not g.get('access_token'):
            return jsonify({'status': 'error', 'message': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function

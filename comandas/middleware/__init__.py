"""Middleware for bearer-token authentication."""
from functools import wraps
from flask import g, request, current_app
from comandas.exceptions import AuthenticationError


def _bearer_token():
    """Token from 'Authorization: Bearer <token>', or None."""
    auth_header = request.headers.get('Authorization', '')
    parts = auth_header.split(' ', 1)
    if len(parts) == 2 and parts[0].lower() == 'bearer' and parts[1].strip():
        return parts[1].strip()
    return None


def load_current_user():
    """
    Load the caller's claims into g (Flask's per-request global).

    Called before each request. Sets g.user to the token claims
    ({'id', 'username', 'role'}) when a valid token is present. A present but
    invalid token is remembered in g.auth_error so protected routes answer 403
    instead of 401.
    """
    g.user = None
    g.auth_error = None

    token = _bearer_token()
    if token is None:
        return

    from comandas.services.auth_service import verify_token
    try:
        g.user = verify_token(token)
    except AuthenticationError as e:
        current_app.logger.warning(f"Rejected bearer token: {e.message}")
        g.auth_error = e


def require_auth(f):
    """
    Decorator: Require a valid bearer token.

    401 when no token was sent, 403 when the token is invalid or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('auth_error') is not None:
            raise g.auth_error
        if g.get('user') is None:
            raise AuthenticationError('No autorizado')
        return f(*args, **kwargs)
    return decorated_function

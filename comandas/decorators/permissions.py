"""
Permission decorators for role-based access control.
Extends require_auth with role checks.
"""

from functools import wraps
from flask import g, current_app
from comandas.middleware import require_auth
from comandas.exceptions import AuthorizationError


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Authentication is checked first, so a missing or invalid token still
    answers 401/403 before the role is looked at.

    Usage:
        @require_role('admin')
        @require_role('admin', 'waiter')

    Args:
        *allowed_roles: Variable number of role strings (admin, waiter)

    Returns:
        Decorator function
    """
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            user_role = g.user.get('role')

            if not user_role or user_role not in allowed_roles:
                current_app.logger.warning(
                    f"Authorization denied for user {g.user.get('username')} "
                    f"(role: {user_role}) on {f.__name__}"
                )
                raise AuthorizationError()

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def admin_only(f):
    """
    Shortcut decorator for admin-only routes.

    Usage:
        @admin_only
        def delete_user(user_id):
            ...
    """
    return require_role('admin')(f)

"""
Authentication service.

Handles login and the bearer tokens (JWT) carried by every authenticated
request.
"""
from datetime import datetime, timedelta, timezone
import logging

import jwt
from flask import current_app

from comandas.models import User
from comandas.exceptions import ValidationError, AuthenticationError

logger = logging.getLogger(__name__)


def authenticate(username, password, session):
    """
    Check username/password and return the user.

    Raises:
        ValidationError: Missing username or password
        AuthenticationError: Unknown user or wrong password (401)
    """
    if not username or not password:
        raise ValidationError('Se requiere nombre de usuario y contraseña.')

    user = session.query(User).filter_by(username=username).first()
    if not user:
        logger.warning(f"Login failed: user not found ({username})")
        raise AuthenticationError('Credenciales inválidas.')

    if not user.check_password(password):
        logger.warning(f"Login failed: invalid password for user {username}")
        raise AuthenticationError('Credenciales inválidas.')

    logger.info(f"User {username} logged in")
    return user


def issue_token(user):
    """Sign a bearer token carrying id, username and role."""
    config = current_app.config
    payload = {
        'id': user.id,
        'username': user.username,
        'role': user.role,
        'exp': datetime.now(timezone.utc) + timedelta(seconds=config['JWT_EXPIRES_SECONDS'])
    }
    return jwt.encode(payload, config['JWT_SECRET'], algorithm=config['JWT_ALGORITHM'])


def verify_token(token):
    """
    Decode a bearer token.

    Returns:
        dict: Claims {'id', 'username', 'role', 'exp'}

    Raises:
        AuthenticationError: Expired or invalid token (403)
    """
    config = current_app.config
    try:
        claims = jwt.decode(token, config['JWT_SECRET'], algorithms=[config['JWT_ALGORITHM']])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Token expirado.', status_code=403)
    except jwt.InvalidTokenError as e:
        logger.warning(f"JWT verification error: {e}")
        raise AuthenticationError('Token inválido.', status_code=403)

    if not claims.get('id') or not claims.get('role'):
        raise AuthenticationError('Token inválido.', status_code=403)
    return claims

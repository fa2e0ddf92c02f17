"""Staff user management: validate, check username, write."""
import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from comandas.models import User, UserRole
from comandas.exceptions import (
    ValidationError, AuthorizationError, NotFoundError, ConflictError, UpstreamError
)

logger = logging.getLogger(__name__)

USERNAME_TAKEN = 'El nombre de usuario ya existe.'


def _username_taken(session, username, exclude_id=None):
    query = session.query(User.id).filter(func.lower(User.username) == username.lower())
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _text_field(data, key, strip=True):
    """data[key] as a string, '' when absent."""
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f"El campo '{key}' debe ser un texto.")
    return value.strip() if strip else value


def _validate_role(role):
    if role not in UserRole.values():
        raise ValidationError(f"Rol inválido. Valores permitidos: {', '.join(UserRole.values())}.")


def _commit(session, action):
    """Commit, mapping unique-index violations to a conflict."""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.warning(f"Integrity error on user {action}: {e}")
        raise ConflictError(USERNAME_TAKEN)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error on user {action}: {e}")
        raise UpstreamError(str(e)) from e


def list_users(session, actor):
    """Admins see every user; anyone else only sees themselves."""
    query = session.query(User).order_by(User.created_at.desc())
    if actor.get('role') != UserRole.ADMIN.value:
        query = query.filter(User.id == actor.get('id'))
    return query.all()


def get_user(user_id, session, actor):
    if actor.get('role') != UserRole.ADMIN.value and str(actor.get('id')) != str(user_id):
        raise AuthorizationError('Acceso denegado.')

    user = session.get(User, str(user_id))
    if user is None:
        raise NotFoundError('Usuario no encontrado.')
    return user


def create_user(data, session):
    """
    Create a staff user. Role defaults to waiter.

    Raises:
        ValidationError: Missing username/password or unknown role
        ConflictError: Username already taken (case-insensitive)
    """
    username = _text_field(data, 'username')
    password = _text_field(data, 'password', strip=False)
    role = data.get('role') or UserRole.WAITER.value

    if not username or not password:
        raise ValidationError('Nombre de usuario y contraseña son requeridos.')
    _validate_role(role)

    if _username_taken(session, username):
        raise ConflictError(USERNAME_TAKEN)

    user = User(username=username, role=role)
    user.set_password(password)
    session.add(user)
    _commit(session, 'create')
    session.refresh(user)

    logger.info(f"User {user.username} created with role {user.role}")
    return user


def update_user(user_id, data, session, actor):
    """
    Update username, password and/or role.

    Only the user themselves or an admin may update; only an admin may change
    a role.
    """
    is_admin = actor.get('role') == UserRole.ADMIN.value
    if not is_admin and str(actor.get('id')) != str(user_id):
        raise AuthorizationError('Acceso denegado.')

    role = data.get('role')
    if role and not is_admin:
        raise AuthorizationError('No tienes permiso para cambiar el rol.')

    user = session.get(User, str(user_id))
    if user is None:
        raise NotFoundError('Usuario no encontrado.')

    username = _text_field(data, 'username')
    password = _text_field(data, 'password', strip=False)

    if username:
        if _username_taken(session, username, exclude_id=user.id):
            raise ConflictError(USERNAME_TAKEN)
        user.username = username

    if password:
        user.set_password(password)

    if role:
        _validate_role(role)
        user.role = role

    _commit(session, 'update')
    session.refresh(user)
    return user


def delete_user(user_id, session):
    user = session.get(User, str(user_id))
    if user is None:
        raise NotFoundError('Usuario no encontrado.')

    try:
        session.delete(user)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting user {user_id}: {e}")
        raise UpstreamError(str(e)) from e

    logger.info(f"User {user_id} deleted")

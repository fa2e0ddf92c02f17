"""
Push subscription registry.

A user keeps at most one subscription: registering replaces every previous
row of that user. Rows reported gone by the push service are pruned by
endpoint.
"""
import logging
from typing import Any, Dict
from sqlalchemy.exc import SQLAlchemyError
from comandas.models import PushSubscription
from comandas.exceptions import ValidationError, UpstreamError

logger = logging.getLogger(__name__)


def register_push_subscription(user_id: str, subscription: Dict[str, Any], session) -> Dict[str, str]:
    """
    Register (or replace) the push subscription of a user.

    Args:
        user_id: Owner of the subscription (taken from the bearer token)
        subscription: {'endpoint': ..., 'keys': {'p256dh': ..., 'auth': ...}}
        session: SQLAlchemy session

    Returns:
        Acknowledgement message

    Raises:
        ValidationError: Missing user or subscription field
        UpstreamError: The new row could not be stored
    """
    keys = subscription.get('keys') if isinstance(subscription, dict) else None
    if not isinstance(keys, dict):
        keys = {}

    endpoint = subscription.get('endpoint') if isinstance(subscription, dict) else None
    p256dh = keys.get('p256dh')
    auth = keys.get('auth')

    fields = (endpoint, p256dh, auth)
    if not user_id or not all(isinstance(f, str) and f.strip() for f in fields):
        raise ValidationError('Suscripción inválida: faltan datos esenciales.')

    # Step 1: drop previous subscriptions of this user. Not fatal.
    try:
        deleted = session.query(PushSubscription).filter(
            PushSubscription.user_id == user_id
        ).delete(synchronize_session=False)
        session.commit()
        logger.info(f"[PUSH] Removed {deleted} previous subscription(s) for user {user_id}")
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[PUSH] Error removing previous subscriptions for user {user_id}: {e}")

    # Step 2: store the new one
    try:
        session.add(PushSubscription(
            user_id=user_id,
            endpoint=endpoint,
            p256dh=p256dh,
            auth=auth
        ))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[PUSH] Error saving subscription for user {user_id}: {e}")
        raise UpstreamError(f'Error al guardar la suscripción: {e}') from e

    logger.info(f"[PUSH] Subscription stored for user {user_id}")
    return {'message': 'Suscripción recibida y guardada con éxito.'}


def prune_push_subscription(endpoint: str, session) -> int:
    """
    Delete the subscription registered for an endpoint.

    The owner is not needed: the push service only tells us the endpoint.
    Failures are logged and reported as zero rows deleted.
    """
    try:
        deleted = session.query(PushSubscription).filter(
            PushSubscription.endpoint == endpoint
        ).delete(synchronize_session=False)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[PUSH] Error deleting invalid subscription {endpoint}: {e}")
        return 0

    if deleted:
        logger.info(f"[PUSH] Invalid subscription removed: {endpoint}")
    return deleted

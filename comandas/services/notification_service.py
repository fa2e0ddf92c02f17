"""
Order-closed notification fan-out.

When an order is closed every stored push subscription receives the same
payload. Deliveries run concurrently on a thread pool; each one fails on its
own, and subscriptions the push service reports as gone are pruned once all
deliveries have settled.
"""
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from comandas.models import PushSubscription
from comandas.exceptions import PushSubscriptionGoneError
from comandas.services.subscription_service import prune_push_subscription

logger = logging.getLogger(__name__)

ORDER_CLOSED_TITLE = 'Orden Cerrada'
ORDER_CLOSED_TYPE = 'order_closed'


def build_order_closed_payload(order_id: str, icon: str = '/firebase-logo.png', url: str = '/dashboard') -> Dict[str, Any]:
    """
    Build the push payload for a closed order.

    'notification' is what the OS displays; the top-level 'data' block is what
    the service worker reads from the push event to route the click.
    """
    order_id = str(order_id)
    order_label = f"Orden #{order_id[:8]}..."
    return {
        'notification': {
            'title': ORDER_CLOSED_TITLE,
            'body': f"La {order_label} ha sido cerrada.",
            'icon': icon,
            'data': {'url': url, 'orderId': order_id},
        },
        'data': {
            'url': url,
            'orderId': order_id,
            'type': ORDER_CLOSED_TYPE,
        },
    }


def notify_order_closed(
    order_id: str,
    session,
    push_client,
    max_workers: int = 10,
    icon: str = '/firebase-logo.png',
    url: str = '/dashboard'
) -> Optional[Dict[str, int]]:
    """
    Send the order-closed notification to every stored subscription.

    Args:
        order_id: Closed order
        session: SQLAlchemy session (used on this thread only)
        push_client: Object with send(subscription_info, payload)
        max_workers: Upper bound of concurrent deliveries

    Returns:
        Summary dict {'total', 'sent', 'failed', 'pruned'}, or None when the
        subscriptions could not be loaded.
    """
    from comandas.blueprints.metrics import push_notifications_total

    try:
        subscriptions = session.query(PushSubscription).all()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[PUSH] Error fetching push subscriptions: {e}")
        return None

    summary = {'total': len(subscriptions), 'sent': 0, 'failed': 0, 'pruned': 0}
    logger.info(f"[PUSH] Order {order_id} closed. {len(subscriptions)} subscription(s) found.")

    if not subscriptions:
        logger.warning("[PUSH] No push subscriptions found. Notifications will not be sent.")
        return summary

    payload = json.dumps(build_order_closed_payload(order_id, icon=icon, url=url))

    # Workers get plain dicts; ORM objects stay on this thread
    targets = [s.to_subscription_info() for s in subscriptions]
    gone_endpoints = []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(targets)))) as executor:
        futures = {
            executor.submit(push_client.send, target, payload): target['endpoint']
            for target in targets
        }
        for future in as_completed(futures):
            endpoint = futures[future]
            try:
                future.result()
            except PushSubscriptionGoneError:
                logger.info(f"[PUSH] Subscription {endpoint} is gone and will be deleted.")
                gone_endpoints.append(endpoint)
                summary['failed'] += 1
                push_notifications_total.labels(result='gone').inc()
            except Exception as e:
                logger.error(f"[PUSH] Error sending push notification to {endpoint}: {e}")
                summary['failed'] += 1
                push_notifications_total.labels(result='failed').inc()
            else:
                logger.info(f"[PUSH] Notification sent to {endpoint}")
                summary['sent'] += 1
                push_notifications_total.labels(result='sent').inc()

    for endpoint in gone_endpoints:
        summary['pruned'] += prune_push_subscription(endpoint, session)

    logger.info(
        f"[PUSH] Fan-out for order {order_id} done: "
        f"sent={summary['sent']} failed={summary['failed']} pruned={summary['pruned']}"
    )
    return summary


def _fanout(app, order_id: str) -> None:
    """Run the fan-out inside an active app context; never raises."""
    from comandas.database import get_session
    from comandas.services.push_client import get_push_client

    try:
        notify_order_closed(
            order_id,
            get_session(),
            get_push_client(),
            max_workers=app.config.get('PUSH_MAX_WORKERS', 10),
            icon=app.config.get('NOTIFICATION_ICON', '/firebase-logo.png'),
            url=app.config.get('NOTIFICATION_URL', '/dashboard')
        )
    except Exception as e:
        logger.exception(f"[PUSH] Fan-out for order {order_id} failed: {e}")


def _run_fanout_in_background(app, order_id: str) -> None:
    # Fresh app context: its teardown removes this thread's scoped session
    with app.app_context():
        _fanout(app, order_id)


def dispatch_order_closed(order_id: str) -> None:
    """
    Fire-and-forget trigger used once an order has been closed.

    With PUSH_FANOUT_ASYNC the fan-out runs on a daemon thread with its own
    app context and scoped session; otherwise it runs inline on the caller's
    session. Either way no error reaches the caller.
    """
    app = current_app._get_current_object()
    try:
        if app.config.get('PUSH_FANOUT_ASYNC', True):
            worker = threading.Thread(
                target=_run_fanout_in_background,
                args=(app, order_id),
                name=f'push-fanout-{str(order_id)[:8]}',
                daemon=True
            )
            worker.start()
        else:
            _fanout(app, order_id)
    except Exception as e:
        logger.error(f"[PUSH] Could not start fan-out for order {order_id}: {e}")

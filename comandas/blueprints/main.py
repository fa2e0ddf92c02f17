"""Main blueprint with health check endpoints."""
from flask import Blueprint, jsonify
from sqlalchemy import text
from comandas.database import get_session

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.

    Returns:
        200: Healthy (DB connected)
        500: Unhealthy (DB error)
    """
    try:
        session = get_session()
        # Execute simple query to test connection
        result = session.execute(text("SELECT 1 as health_check"))
        row = result.fetchone()

        if row and row[0] == 1:
            return jsonify({
                'status': 'healthy',
                'database': 'connected',
                'message': 'Database connection successful'
            }), 200
        else:
            return jsonify({
                'status': 'unhealthy',
                'database': 'error',
                'message': 'Unexpected query result'
            }), 500

    except Exception as e:
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
            'message': 'Failed to connect to database'
        }), 500


@main_bp.route('/health/push')
def health_push():
    """
    Push notification health check.

    Reports whether VAPID credentials are configured and how many
    subscriptions would receive an order-closed notification.

    Note:
        This endpoint NEVER returns 500, push is not required to take orders.
    """
    from comandas.models import PushSubscription
    from comandas.services.push_client import get_push_client

    try:
        configured = get_push_client().is_configured()
        subscriptions = get_session().query(PushSubscription).count()
        return jsonify({
            'status': 'ok' if configured else 'degraded',
            'vapid': 'configured' if configured else 'missing',
            'subscriptions': subscriptions
        }), 200
    except Exception as e:
        return jsonify({
            'status': 'degraded',
            'vapid': 'unknown',
            'error': str(e),
            'message': 'Push health check failed (orders keep working)'
        }), 200

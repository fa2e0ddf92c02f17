"""Push notification subscription blueprint."""
from flask import Blueprint, jsonify, g, current_app
from comandas.database import get_session
from comandas.middleware import require_auth
from comandas.services.subscription_service import register_push_subscription
from comandas.utils.http import get_json_body

push_bp = Blueprint('push', __name__)


@push_bp.route('/subscribe-push', methods=['POST'])
@require_auth
def subscribe_push():
    """
    Register the caller's browser push subscription, replacing any previous one.

    Body: {'endpoint': ..., 'keys': {'p256dh': ..., 'auth': ...}}
    """
    result = register_push_subscription(g.user.get('id'), get_json_body(), get_session())
    return jsonify(result), 201


@push_bp.route('/vapid-public-key', methods=['GET'])
def vapid_public_key():
    """Public VAPID key the browser needs to subscribe."""
    return jsonify({'publicKey': current_app.config.get('VAPID_PUBLIC_KEY', '')}), 200

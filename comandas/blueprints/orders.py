"""
Orders blueprint.

Any authenticated user can read and create orders; admins and waiters can
change the status (closing notifies every push subscriber); only admins
delete.
"""
from flask import Blueprint, jsonify, g, current_app
from comandas.database import get_session
from comandas.middleware import require_auth
from comandas.decorators.permissions import require_role, admin_only
from comandas.services import order_service
from comandas.utils.http import get_json_body

orders_bp = Blueprint('orders', __name__, url_prefix='/orders')


@orders_bp.route('', methods=['GET'])
@require_auth
def list_orders():
    """All orders with their items and product names."""
    orders = order_service.list_orders(get_session())
    return jsonify([o.to_dict(include_items=True) for o in orders]), 200


@orders_bp.route('/<order_id>', methods=['GET'])
@require_auth
def get_order(order_id):
    order = order_service.get_order(order_id, get_session())
    return jsonify(order.to_dict(include_items=True)), 200


@orders_bp.route('', methods=['POST'])
@require_auth
def create_order():
    """
    Create an open order from {'items': [{'product_id', 'quantity'}]}.

    Returns:
        201: {'order': {...}, 'items': [...]}
    """
    data = get_json_body()
    order, items = order_service.create_order(data.get('items'), get_session())
    current_app.logger.info(f"Order {order.id} created by {g.user.get('username')}")

    from comandas.blueprints.metrics import orders_created_total
    orders_created_total.inc()

    return jsonify({
        'order': order.to_dict(),
        'items': [item.to_dict() for item in items]
    }), 201


@orders_bp.route('/<order_id>', methods=['PUT'])
@require_role('admin', 'waiter')
def update_order(order_id):
    """Update {'status'}. Closing an order triggers the push fan-out."""
    data = get_json_body()
    order = order_service.update_order_status(order_id, data.get('status'), get_session())
    return jsonify(order.to_dict()), 200


@orders_bp.route('/<order_id>', methods=['DELETE'])
@admin_only
def delete_order(order_id):
    order_service.delete_order(order_id, get_session())
    return '', 204

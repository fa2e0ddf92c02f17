"""
User management blueprint.
Admins manage every user; a waiter can read and edit only their own account.
"""

from flask import Blueprint, jsonify, g
from comandas.database import get_session
from comandas.middleware import require_auth
from comandas.decorators.permissions import admin_only
from comandas.services import user_service
from comandas.utils.http import get_json_body


users_bp = Blueprint('users', __name__, url_prefix='/users')


@users_bp.route('', methods=['POST'])
@admin_only
def create_user():
    """Create a user. Only accessible by admin."""
    user = user_service.create_user(get_json_body(), get_session())
    return jsonify(user.to_dict()), 201


@users_bp.route('', methods=['GET'])
@require_auth
def list_users():
    users = user_service.list_users(get_session(), g.user)
    return jsonify([u.to_dict() for u in users]), 200


@users_bp.route('/<user_id>', methods=['GET'])
@require_auth
def get_user(user_id):
    user = user_service.get_user(user_id, get_session(), g.user)
    return jsonify(user.to_dict()), 200


@users_bp.route('/<user_id>', methods=['PUT'])
@require_auth
def update_user(user_id):
    """Update a user. Self or admin; only admin may change the role."""
    user = user_service.update_user(user_id, get_json_body(), get_session(), g.user)
    return jsonify(user.to_dict()), 200


@users_bp.route('/<user_id>', methods=['DELETE'])
@admin_only
def delete_user(user_id):
    user_service.delete_user(user_id, get_session())
    return '', 204

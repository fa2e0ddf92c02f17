"""Authentication blueprint: login."""
from flask import Blueprint, jsonify
from comandas.database import get_session
from comandas.services.auth_service import authenticate, issue_token
from comandas.utils.http import get_json_body

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Issue a bearer token for {username, password}.

    Returns:
        200: {'token': ..., 'user': {'id', 'username', 'role'}}
        400: Missing fields
        401: Invalid credentials
    """
    data = get_json_body()
    user = authenticate(data.get('username'), data.get('password'), get_session())

    return jsonify({
        'token': issue_token(user),
        'user': {'id': user.id, 'username': user.username, 'role': user.role}
    }), 200

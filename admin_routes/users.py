"""
User management API for administrators.
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from decorators import admin_required
from error_handler import ValidationError, get_payload
from services.users import (
    list_users,
    get_user,
    create_user,
    update_user,
    delete_user,
    send_password_reset,
    serialize_user,
)

bp = Blueprint('users', __name__)


@bp.route('', methods=['GET'])
@admin_required
def list_users_api():
    return jsonify({'success': True, 'users': [serialize_user(u) for u in list_users()]})


@bp.route('', methods=['POST'])
@admin_required
def create_user_api():
    """Create an account; the user receives an email to set their password."""
    user = create_user(get_payload(), current_user)
    return jsonify({
        'success': True,
        'message': f'User {user.email} created. A password setup email has been sent.',
        'user': serialize_user(user),
    }), 201


@bp.route('/<int:user_id>', methods=['PUT', 'PATCH'])
@admin_required
def update_user_api(user_id):
    user = update_user(user_id, get_payload(), current_user)
    return jsonify({'success': True, 'message': 'User updated.', 'user': serialize_user(user)})


@bp.route('/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user_api(user_id):
    delete_user(user_id, current_user)
    return jsonify({'success': True, 'message': 'User deleted.'})


@bp.route('/<int:user_id>/reset-password', methods=['POST'])
@admin_required
def reset_password_api(user_id):
    user = get_user(user_id)
    if not send_password_reset(user.email, actor=current_user):
        raise ValidationError('The password reset email could not be sent.')
    return jsonify({'success': True, 'message': f'Password reset email sent to {user.email}.'})

"""
Category management API for administrators.
"""

from flask import Blueprint, jsonify
from flask_login import current_user

from decorators import admin_required
from error_handler import get_payload
from services.categories import (
    list_categories,
    add_category,
    update_category,
    delete_category,
    serialize_category,
)

bp = Blueprint('categories', __name__)


@bp.route('', methods=['GET'])
@admin_required
def list_categories_api():
    """All categories, inactive ones included."""
    return jsonify({'success': True, 'categories': [serialize_category(c) for c in list_categories()]})


@bp.route('', methods=['POST'])
@admin_required
def add_category_api():
    category = add_category(get_payload(), current_user)
    return jsonify({'success': True, 'message': 'Category added.', 'category': serialize_category(category)}), 201


@bp.route('/<value>', methods=['PUT', 'PATCH'])
@admin_required
def update_category_api(value):
    category = update_category(value, get_payload(), current_user)
    return jsonify({'success': True, 'message': 'Category updated.', 'category': serialize_category(category)})


@bp.route('/<value>', methods=['DELETE'])
@admin_required
def delete_category_api(value):
    delete_category(value, current_user)
    return jsonify({'success': True, 'message': 'Category removed.'})

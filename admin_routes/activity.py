"""
Activity log API for administrators.
"""

from flask import Blueprint, jsonify, request, current_app

from decorators import admin_required
from error_handler import ValidationError
from services.activity_log import get_activity_logs, serialize_log
from utils.calendar_views import parse_iso_date

bp = Blueprint('activity', __name__)

MAX_LIMIT = 1000


def _int_arg(name, default=None):
    raw = request.args.get(name)
    if raw in (None, ''):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f'{name} must be a number.')


def _date_arg(name):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f'{name} must be in YYYY-MM-DD format.')


@bp.route('', methods=['GET'])
@admin_required
def list_activity_logs_api():
    limit = _int_arg('limit', current_app.config.get('ACTIVITY_LOG_LIMIT', 100))
    limit = max(1, min(limit, MAX_LIMIT))
    start_date = _date_arg('start_date')
    end_date = _date_arg('end_date')
    logs = get_activity_logs(
        limit=limit,
        user_id=_int_arg('user_id'),
        action=request.args.get('action') or None,
        target=request.args.get('target') or None,
        start_date=start_date,
        end_date=end_date,
    )
    return jsonify({'success': True, 'logs': [serialize_log(entry) for entry in logs]})

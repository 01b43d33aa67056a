"""
Event API. Everybody signed in can read; writes need the editor or admin role.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from decorators import editor_required
from error_handler import ValidationError, get_payload
from services.events import (
    list_events,
    get_event,
    create_event,
    update_event,
    delete_event,
    move_event,
    serialize_event,
)
from utils.calendar_views import parse_iso_date

bp = Blueprint('events', __name__)


def _date_arg(name):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f'{name} must be in YYYY-MM-DD format.')


@bp.route('', methods=['GET'])
@login_required
def list_events_api():
    categories = [v for item in request.args.getlist('category') for v in item.split(',') if v]
    events = list_events(
        start=_date_arg('start'),
        end=_date_arg('end'),
        category=categories or None,
        query=request.args.get('q'),
    )
    return jsonify({'success': True, 'events': [serialize_event(e) for e in events]})


@bp.route('', methods=['POST'])
@editor_required
def create_event_api():
    event = create_event(get_payload(), current_user)
    return jsonify({'success': True, 'message': 'Event created.', 'event': serialize_event(event)}), 201


@bp.route('/<int:event_id>', methods=['GET'])
@login_required
def get_event_api(event_id):
    return jsonify({'success': True, 'event': serialize_event(get_event(event_id))})


@bp.route('/<int:event_id>', methods=['PUT', 'PATCH'])
@editor_required
def update_event_api(event_id):
    event = update_event(event_id, get_payload(), current_user)
    return jsonify({'success': True, 'message': 'Event updated.', 'event': serialize_event(event)})


@bp.route('/<int:event_id>', methods=['DELETE'])
@editor_required
def delete_event_api(event_id):
    delete_event(event_id, current_user)
    return jsonify({'success': True, 'message': 'Event deleted.'})


@bp.route('/<int:event_id>/move', methods=['POST'])
@editor_required
def move_event_api(event_id):
    """Drag-and-drop target: {"start_date": "YYYY-MM-DD"}."""
    data = get_payload()
    new_start = data.get('start_date') or data.get('new_start')
    if not new_start:
        raise ValidationError('start_date is required.')
    event = move_event(event_id, new_start, current_user)
    return jsonify({'success': True, 'message': 'Event moved.', 'event': serialize_event(event)})

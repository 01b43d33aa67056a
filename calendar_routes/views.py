"""
Calendar pages (month, week, agenda) and their JSON counterparts.
"""

from datetime import date

from flask import Blueprint, render_template, request, jsonify, url_for, abort
from flask_login import login_required, current_user

from error_handler import ValidationError, get_payload
from models import EVENT_TYPES, EVENT_TYPE_LABELS
from services.categories import list_categories, serialize_category
from services.events import list_events, serialize_event
from utils.calendar_views import (
    VIEWS,
    build_view,
    events_for_date,
    filter_events,
    normalize_view,
    parse_iso_date,
    shift,
    view_range,
)
from .filters import selected_categories, save_selected_categories

bp = Blueprint('calendar', __name__)


def _load_view(view, anchor):
    """Events of the displayed range after search and category filters, plus the view structure."""
    start, end = view_range(view, anchor)
    selected = selected_categories()
    query = request.args.get('q', '').strip()
    events = filter_events(list_events(start=start, end=end), query=query, selected_categories=selected)
    return build_view(view, events, anchor), selected, query


def _parse_or_404(date_str):
    try:
        return parse_iso_date(date_str)
    except ValueError:
        abort(404)


def _parse_or_400(date_str):
    try:
        return parse_iso_date(date_str)
    except ValueError:
        raise ValidationError('Date must be in YYYY-MM-DD format.')


def _nav_urls(view, anchor, query):
    params = {'q': query} if query else {}
    return {
        direction: url_for('calendar.calendar_view', view=view, date_str=shift(anchor, view, direction).isoformat(), **params)
        for direction in ('prev', 'next', 'today')
    }


def _render(view, anchor):
    view = normalize_view(view)
    data, selected, query = _load_view(view, anchor)
    categories = list_categories(active_only=True)
    return render_template(
        'calendar.html',
        data=data,
        view=view,
        views=VIEWS,
        anchor=anchor,
        query=query,
        categories=categories,
        selected=selected,
        nav=_nav_urls(view, anchor, query),
        event_types=EVENT_TYPES,
        event_type_labels=EVENT_TYPE_LABELS,
        can_edit=current_user.can_edit,
    )


@bp.route('/')
@login_required
def index():
    """Current month."""
    return _render('month', date.today())


@bp.route('/<any(month, week, agenda):view>/<date_str>')
@login_required
def calendar_view(view, date_str):
    return _render(view, _parse_or_404(date_str))


def _serialize_cell(cell):
    return {
        'date': cell['date'].isoformat(),
        'day': cell['day'],
        'weekday': cell['weekday'],
        'in_month': cell['in_month'],
        'is_today': cell['is_today'],
        'special_type': cell['special_type'],
        'events': [serialize_event(e) for e in cell['events']],
        'hidden_count': cell['hidden_count'],
    }


def serialize_view(data):
    result = {
        'view': data['view'],
        'date': data['date'].isoformat(),
        'title': data['title'],
    }
    if data['view'] == 'month':
        result['weekdays'] = data['weekdays']
        result['weeks'] = [[_serialize_cell(c) for c in week] for week in data['weeks']]
    elif data['view'] == 'week':
        result['weekdays'] = data['weekdays']
        result['days'] = [_serialize_cell(c) for c in data['days']]
    else:
        result['is_today'] = data['is_today']
        result['events'] = [serialize_event(e) for e in data['events']]
    return result


@bp.route('/api/calendar/<any(month, week, agenda):view>/<date_str>')
@login_required
def calendar_view_api(view, date_str):
    anchor = _parse_or_400(date_str)
    data, selected, query = _load_view(view, anchor)
    return jsonify({
        'success': True,
        'calendar': serialize_view(data),
        'selected_categories': selected,
        'query': query,
        'prev': shift(anchor, view, 'prev').isoformat(),
        'next': shift(anchor, view, 'next').isoformat(),
    })


@bp.route('/api/calendar/day/<date_str>')
@login_required
def day_events_api(date_str):
    """Every event on one day, filtered and sorted by title."""
    day = _parse_or_400(date_str)
    selected = selected_categories()
    query = request.args.get('q', '').strip()
    events = filter_events(list_events(start=day, end=day), query=query)
    day_events = events_for_date(events, day, selected_categories=selected, sort_by_title=True)
    return jsonify({
        'success': True,
        'date': day.isoformat(),
        'events': [serialize_event(e) for e in day_events],
    })


@bp.route('/api/calendar/filters', methods=['POST'])
@login_required
def save_filters_api():
    data = get_payload()
    raw = data.get('categories') if request.is_json else request.form.getlist('categories')
    if raw is None:
        raise ValidationError('categories is required.')
    if isinstance(raw, str):
        raw = [v for v in raw.split(',') if v]
    if not isinstance(raw, list):
        raise ValidationError('categories must be a list.')
    kept = save_selected_categories([str(v) for v in raw])
    return jsonify({'success': True, 'selected_categories': kept})


@bp.route('/api/categories')
@login_required
def categories_api():
    include_inactive = request.args.get('all') in ('1', 'true') and current_user.is_admin
    categories = list_categories(active_only=not include_inactive)
    return jsonify({'success': True, 'categories': [serialize_category(c) for c in categories]})

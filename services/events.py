"""
Event queries and mutations.

Every mutation validates its input, commits, writes an activity log entry and
then emails the change notification. Mail failures are logged by the
notification service and never roll back the change.
"""

from flask import current_app
from sqlalchemy import or_, and_
from extensions import db
from models import Event, Category, EVENT_TYPES, EVENT_TYPE_LABELS
from error_handler import ValidationError, NotFoundError, clean_text
from services.activity_log import log_activity
from services.notifications import send_event_notification
from utils.calendar_views import parse_iso_date

MAX_TITLE_LENGTH = 200


def list_events(start=None, end=None, category=None, query=None):
    """
    Events ordered by start date then title.

    A date window selects every event overlapping [start, end], so multi-day
    events that began before the window are included.
    """
    q = Event.query
    if start is not None:
        q = q.filter(or_(
            Event.start_date >= start,
            and_(Event.end_date.isnot(None), Event.end_date >= start),
        ))
    if end is not None:
        q = q.filter(Event.start_date <= end)
    if category:
        if isinstance(category, (list, tuple, set)):
            q = q.filter(Event.category.in_(list(category)))
        else:
            q = q.filter(Event.category == category)
    if query:
        needle = query.strip()
        q = q.filter(or_(
            Event.title.icontains(needle, autoescape=True),
            Event.description.icontains(needle, autoescape=True),
        ))
    return q.order_by(Event.start_date, Event.title).all()


def get_events_by_date_range(start, end):
    return list_events(start=start, end=end)


def get_events_by_category(category):
    return list_events(category=category)


def get_event(event_id):
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFoundError('Event not found.')
    return event


def serialize_event(event):
    category = event.category_info
    return {
        'id': event.id,
        'title': event.title,
        'description': event.description,
        'start_date': event.start_date.isoformat(),
        'end_date': event.end_date.isoformat() if event.end_date else None,
        'category': event.category,
        'category_label': category.label if category else event.category,
        'category_color': category.color if category else None,
        'event_type': event.event_type,
        'event_type_label': EVENT_TYPE_LABELS.get(event.event_type, event.event_type),
        'created_by': event.created_by,
        'created_at': event.created_at.isoformat() if event.created_at else None,
        'updated_at': event.updated_at.isoformat() if event.updated_at else None,
    }


def _parse_date_field(data, field, label, required):
    raw = data.get(field)
    if raw in (None, ''):
        if required:
            raise ValidationError(f'{label} is required.')
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f'{label} must be a valid date (YYYY-MM-DD).')


def validate_event_data(data, existing=None):
    """
    Validate incoming event fields and return the cleaned values.

    With existing set this is a partial update: only the fields present in
    data are validated and returned, but the date order check uses the
    event's current dates for whatever is missing.
    """
    if not isinstance(data, dict):
        raise ValidationError('Invalid event data.')
    cleaned = {}
    partial = existing is not None

    if not partial or 'title' in data:
        title = clean_text(data.get('title'), 'Title')
        if not title:
            raise ValidationError('Title is required.')
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(f'Title must be at most {MAX_TITLE_LENGTH} characters.')
        cleaned['title'] = title

    if not partial or 'description' in data:
        description = clean_text(data.get('description'), 'Description')
        cleaned['description'] = description or None

    if not partial or 'start_date' in data:
        cleaned['start_date'] = _parse_date_field(data, 'start_date', 'Start date', required=True)

    if not partial or 'end_date' in data:
        cleaned['end_date'] = _parse_date_field(data, 'end_date', 'End date', required=False)

    start = cleaned.get('start_date', existing.start_date if partial else None)
    end = cleaned.get('end_date', existing.end_date if partial else None)
    if end is not None and end < start:
        raise ValidationError('End date cannot be before the start date.')

    if not partial or 'event_type' in data:
        event_type = data.get('event_type') or 'normal'
        if event_type not in EVENT_TYPES:
            raise ValidationError(f'Event type must be one of: {", ".join(EVENT_TYPES)}.')
        cleaned['event_type'] = event_type

    if not partial or 'category' in data:
        value = clean_text(data.get('category'), 'Category')
        if not value:
            raise ValidationError('Category is required.')
        category = Category.query.filter_by(value=value).first()
        if not category:
            raise ValidationError(f'Unknown category "{value}".')
        # Old events may keep a deactivated category, but nothing new is assigned to one
        if not category.is_active and not (partial and existing.category == value):
            raise ValidationError(f'Category "{category.label}" is inactive.')
        cleaned['category'] = value

    return cleaned


def create_event(data, actor):
    cleaned = validate_event_data(data)
    event = Event(created_by=getattr(actor, 'id', None), **cleaned)
    db.session.add(event)
    db.session.commit()
    current_app.logger.info(f"Event {event.id} created by {actor.email}")

    payload = serialize_event(event)
    log_activity(actor, 'create', 'event', event.id, f'Event "{event.title}" created for {event.start_date.isoformat()}')
    send_event_notification(payload, 'created', actor)
    return event


def update_event(event_id, data, actor):
    event = get_event(event_id)
    cleaned = validate_event_data(data, existing=event)
    for field, value in cleaned.items():
        setattr(event, field, value)
    db.session.commit()
    current_app.logger.info(f"Event {event.id} updated by {actor.email}: {sorted(cleaned)}")

    payload = serialize_event(event)
    log_activity(actor, 'update', 'event', event.id, f'Event "{event.title}" updated')
    send_event_notification(payload, 'updated', actor)
    return event


def delete_event(event_id, actor):
    event = get_event(event_id)
    payload = serialize_event(event)
    db.session.delete(event)
    db.session.commit()
    current_app.logger.info(f"Event {event_id} deleted by {actor.email}")

    log_activity(actor, 'delete', 'event', event_id, f'Event "{payload["title"]}" deleted')
    send_event_notification(payload, 'deleted', actor)
    return payload


def move_event(event_id, new_start, actor):
    """Reschedule an event to start on new_start, keeping its duration."""
    event = get_event(event_id)
    try:
        new_start = parse_iso_date(new_start)
    except ValueError:
        raise ValidationError('New start date must be a valid date (YYYY-MM-DD).')

    old_start = event.start_date
    if new_start == old_start:
        return event
    if event.end_date is not None:
        event.end_date = new_start + (event.end_date - old_start)
    event.start_date = new_start
    db.session.commit()
    current_app.logger.info(f"Event {event.id} moved from {old_start} to {new_start} by {actor.email}")

    payload = serialize_event(event)
    log_activity(
        actor, 'update', 'event', event.id,
        f'Event "{event.title}" moved from {old_start.isoformat()} to {new_start.isoformat()}'
    )
    send_event_notification(payload, 'updated', actor)
    return event

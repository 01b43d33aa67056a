"""
Activity logging for auditing administrative changes.
"""

from datetime import datetime, time

from flask import current_app
from extensions import db
from models import ActivityLog
from error_handler import get_client_info


def _actor_name(actor):
    if actor is None:
        return 'system'
    return getattr(actor, 'display_name', None) or getattr(actor, 'email', None) or 'unknown'


def log_activity(actor, action, target, target_id, description):
    """
    Log one activity entry.

    The entry is committed on its own; a failure here is logged and never
    propagated, so the change being audited is not lost.
    """
    try:
        client = get_client_info()
        log_entry = ActivityLog()
        log_entry.user_id = getattr(actor, 'id', None)
        log_entry.user_name = _actor_name(actor)
        log_entry.action = action
        log_entry.target = target
        log_entry.target_id = str(target_id)
        log_entry.description = description
        log_entry.ip_address = client['ip_address']
        log_entry.user_agent = client['user_agent']
        db.session.add(log_entry)
        db.session.commit()
        return log_entry
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to log activity: {str(e)}")
        return None


def get_activity_logs(limit=100, user_id=None, action=None, target=None, start_date=None, end_date=None):
    """Retrieve activity log entries with optional filters, newest first."""
    query = ActivityLog.query
    if user_id:
        query = query.filter_by(user_id=user_id)
    if action:
        query = query.filter_by(action=action)
    if target:
        query = query.filter_by(target=target)
    if start_date:
        query = query.filter(ActivityLog.timestamp >= start_date)
    if end_date:
        if not isinstance(end_date, datetime):
            # A bare date includes that whole day
            end_date = datetime.combine(end_date, time.max)
        query = query.filter(ActivityLog.timestamp <= end_date)
    return query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit).all()


def serialize_log(entry):
    return {
        'id': entry.id,
        'user_id': entry.user_id,
        'user_name': entry.user_name,
        'action': entry.action,
        'target': entry.target,
        'target_id': entry.target_id,
        'description': entry.description,
        'ip_address': entry.ip_address,
        'timestamp': entry.timestamp.isoformat() if entry.timestamp else None,
    }

"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .activity_log import log_activity, get_activity_logs, serialize_log
from .notifications import send_event_notification, send_password_email
from .categories import (
    list_categories,
    get_category,
    add_category,
    update_category,
    delete_category,
    seed_default_categories,
)
from .events import (
    list_events,
    get_event,
    create_event,
    update_event,
    delete_event,
    move_event,
    serialize_event,
)
from .users import (
    authenticate,
    list_users,
    get_user,
    create_user,
    update_user,
    delete_user,
    send_password_reset,
)

__all__ = [
    'log_activity',
    'get_activity_logs',
    'serialize_log',
    'send_event_notification',
    'send_password_email',
    'list_categories',
    'get_category',
    'add_category',
    'update_category',
    'delete_category',
    'seed_default_categories',
    'list_events',
    'get_event',
    'create_event',
    'update_event',
    'delete_event',
    'move_event',
    'serialize_event',
    'authenticate',
    'list_users',
    'get_user',
    'create_user',
    'update_user',
    'delete_user',
    'send_password_reset',
]

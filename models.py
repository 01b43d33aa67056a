from datetime import datetime, timezone

from flask_login import UserMixin
from extensions import db

ROLES = ('admin', 'editor', 'viewer')
EDITOR_ROLES = ('admin', 'editor')

# 'normal' is an ordinary activity; the other three get special rendering
EVENT_TYPES = ('normal', 'evento', 'feriado', 'recesso')
EVENT_TYPE_LABELS = {
    'normal': 'Normal',
    'evento': 'Special Event',
    'feriado': 'Holiday',
    'recesso': 'Recess',
}

LOG_ACTIONS = ('create', 'update', 'delete', 'category_add', 'category_update', 'category_remove')
LOG_TARGETS = ('event', 'category', 'user')


def utcnow():
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model, UserMixin):
    """
    Calendar user. The email address is the login identifier and the role
    decides what the user may do: viewers read, editors also write events,
    admins also manage users and categories.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='viewer')

    # Password management flags
    is_temporary_password = db.Column(db.Boolean, default=False, nullable=False)
    password_changed_at = db.Column(db.DateTime, nullable=True)

    # Login tracking
    login_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def display_name(self):
        if self.name:
            return self.name
        return self.email.split('@')[0] if self.email else 'User'

    @property
    def is_admin(self):
        return self.role == 'admin'

    @property
    def can_edit(self):
        return self.role in EDITOR_ROLES

    def __repr__(self):
        return f"User('{self.email}', '{self.role}')"


class Category(db.Model):
    """
    Event category (school segment). Tags events and gives them their colour.
    Inactive categories stay attached to old events but disappear from filters
    and from the event form.
    """
    __tablename__ = 'event_categories'
    id = db.Column(db.Integer, primary_key=True)
    value = db.Column(db.String(50), unique=True, nullable=False)  # slug, e.g. 'fundamental1'
    label = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(50), nullable=False)  # 'hsl(215, 100%, 50%)' or '#1E3A8A'
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"Category('{self.value}', active={self.is_active})"


class Event(db.Model):
    """
    Calendar event. Single-day events leave end_date empty; a date is covered
    by the event when start_date <= date <= (end_date or start_date).
    """
    __tablename__ = 'events'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.Date, nullable=False, index=True)
    end_date = db.Column(db.Date, nullable=True)
    category = db.Column(db.String(50), db.ForeignKey('event_categories.value'), nullable=False, index=True)
    event_type = db.Column(db.String(20), nullable=False, default='normal')
    created_by = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category_info = db.relationship('Category', backref='events', lazy=True)
    creator = db.relationship('User', backref='created_events', lazy=True)

    def __repr__(self):
        return f"Event('{self.title}' - {self.event_type} on {self.start_date})"


class ActivityLog(db.Model):
    """
    Append-only audit trail of administrative changes (events, categories,
    users). user_name is a snapshot so entries survive user deletion.
    """
    __tablename__ = 'activity_logs'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True)
    user_name = db.Column(db.String(120), nullable=False)
    action = db.Column(db.String(30), nullable=False)
    target = db.Column(db.String(20), nullable=False)
    target_id = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    user = db.relationship('User', backref='activity_logs', lazy=True)

    def __repr__(self):
        return f"ActivityLog(User: {self.user_name}, Action: {self.action}, Target: {self.target})"

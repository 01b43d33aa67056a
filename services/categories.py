"""
Event categories: listing, admin CRUD and the default seed set.
"""

import re
import unicodedata

from flask import current_app
from extensions import db
from models import Category, Event
from error_handler import ValidationError, NotFoundError, ConflictError, clean_text, parse_flag
from services.activity_log import log_activity

DEFAULT_CATEGORIES = [
    {'value': 'geral', 'label': 'General', 'color': 'hsl(215, 20%, 45%)'},
    {'value': 'infantil', 'label': 'Early Childhood', 'color': 'hsl(330, 80%, 60%)'},
    {'value': 'fundamental1', 'label': 'Elementary I', 'color': 'hsl(142, 70%, 40%)'},
    {'value': 'fundamental2', 'label': 'Elementary II', 'color': 'hsl(200, 85%, 45%)'},
    {'value': 'medio', 'label': 'High School', 'color': 'hsl(262, 70%, 55%)'},
    {'value': 'pastoral', 'label': 'Pastoral', 'color': 'hsl(45, 95%, 50%)'},
    {'value': 'esportes', 'label': 'Sports', 'color': 'hsl(25, 95%, 53%)'},
    {'value': 'robotica', 'label': 'Robotics', 'color': 'hsl(185, 80%, 40%)'},
    {'value': 'biblioteca', 'label': 'Library', 'color': 'hsl(15, 60%, 40%)'},
    {'value': 'nap', 'label': 'NAP', 'color': 'hsl(0, 75%, 55%)'},
]

MAX_LABEL_LENGTH = 100


def slugify(label):
    """'Robótica Avançada' -> 'robotica-avancada'."""
    normalized = unicodedata.normalize('NFKD', label or '')
    ascii_only = normalized.encode('ascii', 'ignore').decode('ascii').lower()
    cleaned = re.sub(r'[^a-z0-9 ]', '', ascii_only).strip()
    return re.sub(r'\s+', '-', cleaned)


def list_categories(active_only=False):
    query = Category.query
    if active_only:
        query = query.filter_by(is_active=True)
    return query.order_by(Category.label).all()


def get_category(value):
    category = Category.query.filter_by(value=value).first()
    if not category:
        raise NotFoundError(f'Category "{value}" not found.')
    return category


def active_category_values():
    return [c.value for c in list_categories(active_only=True)]


def serialize_category(category):
    return {
        'id': category.id,
        'value': category.value,
        'label': category.label,
        'color': category.color,
        'is_active': category.is_active,
    }


def _clean_label(label):
    label = clean_text(label, 'Category label')
    if not label:
        raise ValidationError('Category label is required.')
    if len(label) > MAX_LABEL_LENGTH:
        raise ValidationError(f'Category label must be at most {MAX_LABEL_LENGTH} characters.')
    return label


def _clean_color(color):
    color = clean_text(color, 'Category color')
    if not color:
        raise ValidationError('Category color is required.')
    return color


def add_category(data, actor):
    """Create a category; the value is derived from the label when not given."""
    label = _clean_label(data.get('label'))
    color = _clean_color(data.get('color'))
    value = slugify(clean_text(data.get('value'), 'Category value') or label)
    is_active = parse_flag(data['is_active'], 'is_active') if 'is_active' in data else True
    if not value:
        raise ValidationError('Category value must contain letters or digits.')
    if Category.query.filter_by(value=value).first():
        raise ConflictError(f'A category with value "{value}" already exists.')

    category = Category(value=value, label=label, color=color, is_active=is_active)
    db.session.add(category)
    db.session.commit()
    current_app.logger.info(f"Category {value} created by {getattr(actor, 'email', 'system')}")
    log_activity(actor, 'category_add', 'category', value, f'Category "{label}" added')
    return category


def update_category(value, data, actor):
    """Update label, color and active flag. The value never changes."""
    category = get_category(value)
    if 'value' in data and data['value'] != category.value:
        raise ValidationError('The category value cannot be changed.')

    label = _clean_label(data['label']) if 'label' in data else None
    color = _clean_color(data['color']) if 'color' in data else None
    is_active = parse_flag(data['is_active'], 'is_active') if 'is_active' in data else None

    changes = []
    if label is not None:
        category.label = label
        changes.append('label')
    if color is not None:
        category.color = color
        changes.append('color')
    if is_active is not None:
        category.is_active = is_active
        changes.append('activated' if category.is_active else 'deactivated')
    db.session.commit()

    summary = ', '.join(changes) if changes else 'no changes'
    log_activity(actor, 'category_update', 'category', value, f'Category "{category.label}" updated ({summary})')
    return category


def delete_category(value, actor):
    category = get_category(value)
    in_use = Event.query.filter_by(category=value).count()
    if in_use:
        raise ConflictError(
            f'Category "{category.label}" is used by {in_use} event(s). Deactivate it instead.'
        )
    label = category.label
    db.session.delete(category)
    db.session.commit()
    current_app.logger.info(f"Category {value} deleted by {getattr(actor, 'email', 'system')}")
    log_activity(actor, 'category_remove', 'category', value, f'Category "{label}" removed')


def seed_default_categories():
    """Insert the default categories when the table is empty. Returns how many were added."""
    if Category.query.first():
        return 0
    for item in DEFAULT_CATEGORIES:
        db.session.add(Category(**item))
    db.session.commit()
    return len(DEFAULT_CATEGORIES)

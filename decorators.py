from functools import wraps
from flask import abort
from flask_login import current_user

from models import EDITOR_ROLES


def has_role(user, *roles):
    """Check a user's role, treating anonymous users as having none."""
    if not user or not user.is_authenticated:
        return False
    role = str(user.role).strip() if user.role else None
    return role in roles


def admin_required(f):
    """Restricts access to users with the 'admin' role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)  # Unauthorized - not logged in
        if not has_role(current_user, 'admin'):
            abort(403)  # Forbidden - wrong role
        return f(*args, **kwargs)
    return decorated_function


def editor_required(f):
    """Restricts access to users who may change events ('admin' or 'editor')."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)  # Unauthorized - not logged in
        if not has_role(current_user, *EDITOR_ROLES):
            abort(403)  # Forbidden - wrong role
        return f(*args, **kwargs)
    return decorated_function

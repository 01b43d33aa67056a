"""
Admin Routes Package

The administrative panel and its JSON API, organized by functional area.
Every route in this package requires the 'admin' role.
"""

from flask import Blueprint, render_template
from flask_login import current_user

from decorators import admin_required
from models import ROLES, LOG_ACTIONS, LOG_TARGETS

# Create the main admin blueprint
admin_blueprint = Blueprint('admin', __name__)


@admin_blueprint.route('')
@admin_required
def panel():
    """Admin panel page; the tabs load their data from the API below."""
    return render_template(
        'admin.html',
        roles=ROLES,
        log_actions=LOG_ACTIONS,
        log_targets=LOG_TARGETS,
        current_user_id=current_user.id,
    )


# Import all route modules to register their routes
from . import users, categories, activity  # noqa: E402

# Register all blueprints with the main admin blueprint
admin_blueprint.register_blueprint(users.bp, url_prefix='/api/users')
admin_blueprint.register_blueprint(categories.bp, url_prefix='/api/categories')
admin_blueprint.register_blueprint(activity.bp, url_prefix='/api/activity-logs')

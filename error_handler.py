"""
Error handling for the calendar app.
Defines the application exceptions raised by the services layer and registers
the handlers that turn them (and HTTP errors) into JSON or flash + redirect.
"""

import json
import logging
import traceback

from flask import request, jsonify, flash, redirect, url_for, render_template
from flask_login import current_user
from flask_wtf.csrf import CSRFError

from extensions import db

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = ('password', 'password_hash', 'csrf_token', 'secret', 'token')


class AppError(Exception):
    """Base class for errors the user can act on."""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class PermissionDeniedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


def wants_json():
    """True for API calls and clients that asked for JSON."""
    if request.path.startswith('/api/') or request.path.startswith('/admin/api/'):
        return True
    if request.is_json:
        return True
    best = request.accept_mimetypes.best_match(['application/json', 'text/html'])
    return best == 'application/json' and request.accept_mimetypes[best] > request.accept_mimetypes['text/html']


def get_client_info():
    """Extract client information from the request."""
    try:
        user_agent = request.headers.get('User-Agent', 'Unknown')
        ip_address = request.environ.get('HTTP_X_FORWARDED_FOR', request.environ.get('REMOTE_ADDR', 'Unknown'))
        return {'user_agent': user_agent, 'ip_address': ip_address}
    except RuntimeError:
        # Outside a request context (CLI scripts, background work)
        return {'user_agent': None, 'ip_address': None}


def get_request_data():
    """Safely extract request data for error logs, without secrets."""
    data = {}
    if request.form:
        for key, value in request.form.items():
            if key.lower() not in SENSITIVE_FIELDS:
                data[f'form_{key}'] = str(value)[:500]  # Limit length
    if request.is_json:
        json_data = request.get_json(silent=True)
        if isinstance(json_data, dict):
            filtered_json = {k: v for k, v in json_data.items() if k.lower() not in SENSITIVE_FIELDS}
            data['json_data'] = str(filtered_json)[:1000]
    if request.args:
        data['query_params'] = dict(request.args)
    return json.dumps(data) if data else None


def error_response(message, status_code):
    """JSON body for API callers, flash + redirect for page requests."""
    if wants_json():
        return jsonify({'success': False, 'message': message}), status_code
    flash(message, 'danger')
    if status_code == 401 or not current_user.is_authenticated:
        return redirect(url_for('auth.login'))
    return redirect(request.referrer or url_for('calendar.index'))


def register_error_handlers(app):
    """Attach the error handlers to the application."""

    @app.errorhandler(AppError)
    def handle_app_error(error):
        app.logger.info(f"{type(error).__name__} on {request.method} {request.path}: {error.message}")
        return error_response(error.message, error.status_code)

    @app.errorhandler(400)
    def bad_request_error(error):
        return error_response('Invalid request.', 400)

    @app.errorhandler(401)
    def unauthorized_error(error):
        """Handle 401 Unauthorized errors by redirecting to login page."""
        if wants_json():
            return jsonify({'success': False, 'message': 'Authentication required.'}), 401
        flash('Please log in to access this page.', 'warning')
        return redirect(url_for('auth.login', next=request.path))

    @app.errorhandler(403)
    def forbidden_error(error):
        return error_response('You do not have permission to perform this action.', 403)

    @app.errorhandler(404)
    def not_found_error(error):
        if wants_json():
            return jsonify({'success': False, 'message': 'Not found.'}), 404
        return render_template('errors/404.html'), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return error_response('Method not allowed.', 405)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server errors."""
        db.session.rollback()
        original = getattr(error, 'original_exception', None) or error
        app.logger.error(
            f"Server Error on {request.method} {request.path}: {original}\n"
            f"Request data: {get_request_data()}\n{traceback.format_exc()}"
        )
        if wants_json():
            return jsonify({'success': False, 'message': 'Internal server error.'}), 500
        return render_template('errors/500.html'), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        """Handle CSRF errors."""
        app.logger.warning(f"CSRF failure on {request.path}: {error.description}")
        if wants_json():
            return jsonify({'success': False, 'message': 'Invalid or missing CSRF token.'}), 400
        flash('Invalid request. Please try again.', 'danger')
        return redirect(url_for('auth.login'))


def get_payload():
    """JSON body for API clients, form data for HTML forms."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form


TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off')


def clean_text(value, label):
    """Stripped string for a submitted field; None becomes ''."""
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError(f'{label} must be text.')
    return value.strip()


def parse_flag(value, label):
    """JSON booleans as they are; form strings such as 'false' or 'on' by their meaning."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ValidationError(f'{label} must be true or false.')

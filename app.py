import os
import logging

from flask import Flask, redirect, url_for, request, jsonify, flash
from config import ProductionConfig, DevelopmentConfig, TestingConfig

# Import extensions to avoid circular imports
from extensions import db, login_manager, csrf, migrate, mail

# Import models here so every table is registered before create_all()
from models import User, EVENT_TYPE_LABELS
from error_handler import register_error_handlers, wants_json
from utils.colors import to_hex


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)
    if not app.debug and not app.testing and not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
        )


def create_app(config_class=None):
    """
    Factory function to create the Flask application.
    Automatically selects configuration based on environment.
    """
    if config_class is None:
        # Auto-detect environment and select appropriate config
        env = os.environ.get('FLASK_ENV', 'production').lower()
        if env == 'development':
            config_class = DevelopmentConfig
        elif env == 'testing':
            config_class = TestingConfig
        else:
            config_class = ProductionConfig  # Default to production for security

    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # Initialize extensions with the app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    mail.init_app(app)

    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'warning'

    # Initialize database schema
    with app.app_context():
        try:
            db.create_all()
            if app.config.get('SEED_DEFAULT_CATEGORIES'):
                from services.categories import seed_default_categories
                added = seed_default_categories()
                if added:
                    app.logger.info(f"Seeded {added} default event categories")
        except Exception as e:
            app.logger.critical(f"FATAL DATABASE ERROR DURING INITIALIZATION: {e}")
            raise

    # User loader function for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        if wants_json():
            return jsonify({'success': False, 'message': 'Authentication required.'}), 401
        flash(login_manager.login_message, login_manager.login_message_category)
        return redirect(url_for('auth.login', next=request.path))

    register_error_handlers(app)

    # Import and register blueprints
    from authroutes import auth_blueprint
    from calendar_routes import calendar_blueprint, events_blueprint, export_blueprint
    from admin_routes import admin_blueprint

    app.register_blueprint(auth_blueprint)
    app.register_blueprint(calendar_blueprint)
    app.register_blueprint(events_blueprint, url_prefix='/api/events')
    app.register_blueprint(export_blueprint, url_prefix='/export')
    app.register_blueprint(admin_blueprint, url_prefix='/admin')

    # Custom template filters
    @app.template_filter('hex_color')
    def hex_color_filter(value):
        """Category colour as '#rrggbb' for inline styles."""
        return to_hex(value)

    @app.template_filter('event_type_label')
    def event_type_label_filter(value):
        return EVENT_TYPE_LABELS.get(value, value)

    @app.template_filter('br_date')
    def br_date_filter(value):
        """dd/mm/yyyy, the format used across the calendar."""
        return value.strftime('%d/%m/%Y') if value else ''

    @app.after_request
    def add_security_headers(response):
        response.headers['Content-Security-Policy'] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
            "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
            "img-src 'self' data:; "
            "font-src 'self' https://cdn.jsdelivr.net; "
            "connect-src 'self';"
        )
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        return response

    return app

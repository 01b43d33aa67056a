import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def _database_url():
    url = os.environ.get('DATABASE_URL')
    if not url:
        # Relative SQLite paths are resolved inside the Flask instance folder
        return 'sqlite:///calendar.db'
    # Hosted Postgres providers still hand out the legacy scheme
    if url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    return url


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a-very-secret-key'
    APP_NAME = os.environ.get('APP_NAME') or 'School Calendar'

    # CSRF Protection
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # 1 hour
    WTF_CSRF_CHECK_DEFAULT = True

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seed the default event categories when the table is empty
    SEED_DEFAULT_CATEGORIES = True

    # Debug mode - only enable in development environment
    # NEVER set DEBUG=True in production for security reasons
    DEBUG = _env_flag('FLASK_DEBUG')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Outgoing mail (event notifications, password setup/reset links)
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 25))
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS')
    MAIL_USE_SSL = _env_flag('MAIL_USE_SSL')
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or 'calendar@localhost'
    EVENT_NOTIFICATIONS_ENABLED = _env_flag('EVENT_NOTIFICATIONS_ENABLED', 'True')

    # Password reset links stay valid for one day
    PASSWORD_RESET_MAX_AGE = int(os.environ.get('PASSWORD_RESET_MAX_AGE', 24 * 3600))
    MIN_PASSWORD_LENGTH = 8

    # Activity log page size for the admin panel
    ACTIVITY_LOG_LIMIT = 100


class ProductionConfig(Config):
    """Production configuration with enhanced security."""
    DEBUG = False  # Always False in production
    TESTING = False

    # Additional security settings for production
    SESSION_COOKIE_SECURE = True  # Only send cookies over HTTPS
    SESSION_COOKIE_HTTPONLY = True  # Prevent XSS attacks
    SESSION_COOKIE_SAMESITE = 'Lax'  # CSRF protection
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour session timeout


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = True
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # In-memory database for tests
    WTF_CSRF_ENABLED = False
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = 'calendar@example.com'

"""
Database initialization script.
Creates the tables, seeds the default event categories and, when the
INITIAL_ADMIN_EMAIL / INITIAL_ADMIN_PASSWORD environment variables are set
and no admin exists yet, the first administrator account.
"""

import os

from app import create_app
from error_handler import AppError
from models import User
from services.categories import seed_default_categories
from services.users import create_user


def init_database(app=None):
    """Initialize the database. Returns True on success."""
    app = app or create_app()
    with app.app_context():
        added = seed_default_categories()
        if added:
            print(f"Seeded {added} default categories")
        else:
            print("Categories already present, nothing to seed")

        email = os.environ.get('INITIAL_ADMIN_EMAIL')
        password = os.environ.get('INITIAL_ADMIN_PASSWORD')
        if User.query.filter_by(role='admin').first():
            print("Admin account already exists")
            return True
        if not email or not password:
            print("No admin account yet; set INITIAL_ADMIN_EMAIL and INITIAL_ADMIN_PASSWORD to create one")
            return True

        try:
            user = create_user(
                {'email': email, 'password': password, 'role': 'admin',
                 'name': os.environ.get('INITIAL_ADMIN_NAME')},
                actor=None,
                send_email=False,
            )
        except AppError as e:
            print(f"Database initialization error: {e.message}")
            return False
        print(f"Created admin account {user.email}")
        return True


if __name__ == '__main__':
    raise SystemExit(0 if init_database() else 1)

"""
Shared pytest fixtures: an app on an in-memory SQLite database with the
default categories seeded, one user per role, and logged-in clients.

The app context is not held open between requests, so every request loads
its user from the session cookie like it would in production. Tests that
touch the database directly open their own `with app.app_context():`.
"""

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config import TestingConfig
from extensions import db
from models import User

PASSWORD = 'password123'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def users(app):
    """One account per role; maps role to user id."""
    ids = {}
    with app.app_context():
        for role in ('admin', 'editor', 'viewer'):
            user = User(
                name=f'{role.capitalize()} User',
                email=f'{role}@school.test',
                password_hash=generate_password_hash(PASSWORD),
                role=role,
            )
            db.session.add(user)
            db.session.flush()
            ids[role] = user.id
        db.session.commit()
    return ids


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email, password=PASSWORD):
    return client.post('/login', json={'email': email, 'password': password})


def _logged_in_client(app, role):
    client = app.test_client()
    response = login(client, f'{role}@school.test')
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(app, users):
    return _logged_in_client(app, 'admin')


@pytest.fixture
def editor_client(app, users):
    return _logged_in_client(app, 'editor')


@pytest.fixture
def viewer_client(app, users):
    return _logged_in_client(app, 'viewer')


@pytest.fixture
def event_payload():
    return {
        'title': 'Science Fair',
        'description': 'Projects from every grade',
        'start_date': '2025-03-10',
        'end_date': '2025-03-12',
        'category': 'geral',
        'event_type': 'evento',
    }

import pytest

from extensions import db, mail
from models import User
from services.notifications import notification_recipients, send_event_notification, send_password_email

EVENT = {
    'title': 'Graduation',
    'description': 'Main hall',
    'start_date': '2025-12-12',
    'end_date': None,
    'category': 'medio',
    'event_type': 'evento',
}


def test_recipients_are_every_user(app, users):
    with app.app_context():
        assert notification_recipients() == ['admin@school.test', 'editor@school.test', 'viewer@school.test']


def test_nothing_sent_without_users(app):
    with app.app_context(), mail.record_messages() as outbox:
        assert send_event_notification(EVENT, 'created', None) == 0
    assert outbox == []


def test_message_content(app, users):
    with app.app_context(), mail.record_messages() as outbox:
        actor = db.session.get(User, users['admin'])
        assert send_event_notification(EVENT, 'deleted', actor) == 3
    message = outbox[0]
    assert message.subject == 'School Calendar - Event Deleted: Graduation'
    assert message.sender == 'calendar@example.com'
    assert 'Category: High School' in message.body
    assert 'Type: Special Event' in message.body
    assert 'Admin User' in message.body
    assert 'Graduation' in message.html


def test_mail_failure_is_reported_not_raised(app, users, monkeypatch):
    def broken_send(message):
        raise ConnectionRefusedError('smtp down')

    monkeypatch.setattr(mail, 'send', broken_send)
    with app.app_context():
        assert send_event_notification(EVENT, 'created', None) == 0


def test_disabled(app, users):
    app.config['EVENT_NOTIFICATIONS_ENABLED'] = False
    with app.app_context(), mail.record_messages() as outbox:
        assert send_event_notification(EVENT, 'created', None) == 0
    assert outbox == []


@pytest.mark.parametrize('welcome, subject', [
    (True, 'School Calendar - Set up your account'),
    (False, 'School Calendar - Password reset'),
])
def test_password_email(app, users, welcome, subject):
    with app.test_request_context(), mail.record_messages() as outbox:
        user = db.session.get(User, users['viewer'])
        assert send_password_email(user, 'abc123', welcome=welcome) is True
    assert outbox[0].subject == subject
    assert 'http://localhost/reset-password/abc123' in outbox[0].body
    assert 'valid for 24 hours' in outbox[0].body


def test_password_email_failure(app, users, monkeypatch):
    def broken_send(message):
        raise ConnectionRefusedError('smtp down')

    monkeypatch.setattr(mail, 'send', broken_send)
    with app.test_request_context():
        user = db.session.get(User, users['viewer'])
        assert send_password_email(user, 'abc123') is False

"""
Email notifications sent through Flask-Mail.
"""

from flask import current_app, render_template, url_for
from flask_mail import Message

from extensions import mail
from models import User, EVENT_TYPE_LABELS, Category

ACTION_LABELS = {
    'created': 'Created',
    'updated': 'Updated',
    'deleted': 'Deleted',
}


def notification_recipients():
    """Email addresses of every user that has one."""
    users = User.query.filter(User.email.isnot(None), User.email != '').all()
    return sorted({u.email for u in users})


def _event_context(event_data):
    category = Category.query.filter_by(value=event_data.get('category')).first()
    return {
        'category_label': category.label if category else event_data.get('category'),
        'event_type_label': EVENT_TYPE_LABELS.get(event_data.get('event_type'), event_data.get('event_type')),
    }


def send_event_notification(event_data, action, actor):
    """
    Email every user about an event change.

    All recipients go in BCC of a single message. Returns the number of
    recipients, or 0 when notifications are disabled, nobody has an email
    address, or sending failed.
    """
    if not current_app.config.get('EVENT_NOTIFICATIONS_ENABLED', True):
        return 0

    try:
        recipients = notification_recipients()
        if not recipients:
            current_app.logger.info('No recipients for event notification')
            return 0

        app_name = current_app.config.get('APP_NAME', 'School Calendar')
        action_label = ACTION_LABELS.get(action, action.capitalize())
        context = dict(
            app_name=app_name,
            event=event_data,
            action=action,
            action_label=action_label,
            actor_name=getattr(actor, 'display_name', None) or 'System',
            **_event_context(event_data),
        )
        msg = Message(
            subject=f"{app_name} - Event {action_label}: {event_data.get('title')}",
            recipients=[],
            bcc=recipients,
        )
        msg.body = render_template('emails/event_notification.txt', **context)
        msg.html = render_template('emails/event_notification.html', **context)
        mail.send(msg)
        current_app.logger.info(f"Event notification ({action}) sent to {len(recipients)} recipient(s)")
        return len(recipients)
    except Exception as e:
        current_app.logger.error(f"Failed to send event notification: {str(e)}")
        return 0


def send_password_email(user, token, welcome=False):
    """
    Send the password setup (welcome) or password reset link to a user.

    Returns True when the message was handed to the mail server.
    """
    app_name = current_app.config.get('APP_NAME', 'School Calendar')
    max_age_hours = current_app.config.get('PASSWORD_RESET_MAX_AGE', 86400) // 3600
    subject = f'{app_name} - Set up your account' if welcome else f'{app_name} - Password reset'
    try:
        context = dict(
            app_name=app_name,
            user=user,
            reset_url=url_for('auth.reset_password', token=token, _external=True),
            welcome=welcome,
            max_age_hours=max_age_hours,
        )
        msg = Message(subject=subject, recipients=[user.email])
        msg.body = render_template('emails/password_reset.txt', **context)
        msg.html = render_template('emails/password_reset.html', **context)
        mail.send(msg)
        current_app.logger.info(f"Password {'setup' if welcome else 'reset'} email sent to {user.email}")
        return True
    except Exception as e:
        current_app.logger.error(f"Failed to send password email to {user.email}: {str(e)}")
        return False

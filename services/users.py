"""
User accounts: authentication, admin management and password reset tokens.
"""

import re
import secrets
import string

from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from models import User, ROLES, utcnow
from error_handler import ValidationError, NotFoundError, ConflictError, PermissionDeniedError, clean_text
from services.activity_log import log_activity
from services.notifications import send_password_email

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
RESET_SALT = 'password-reset'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=RESET_SALT)


def _clean_email(email):
    email = clean_text(email, 'Email').lower()
    if not email:
        raise ValidationError('Email is required.')
    if not EMAIL_PATTERN.match(email):
        raise ValidationError('Email address is not valid.')
    return email


def _clean_role(role):
    if role not in ROLES:
        raise ValidationError(f'Role must be one of: {", ".join(ROLES)}.')
    return role


def generate_temporary_password(length=12):
    alphabet = string.ascii_letters + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def serialize_user(user):
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'display_name': user.display_name,
        'role': user.role,
        'is_temporary_password': user.is_temporary_password,
        'login_count': user.login_count,
        'created_at': user.created_at.isoformat() if user.created_at else None,
        'updated_at': user.updated_at.isoformat() if user.updated_at else None,
    }


def authenticate(email, password):
    """Return the user for valid credentials, otherwise None."""
    if not email or not password:
        return None
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user and check_password_hash(user.password_hash, password):
        return user
    return None


def list_users():
    return User.query.order_by(User.name, User.email).all()


def get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found.')
    return user


def _admin_count():
    return User.query.filter_by(role='admin').count()


def create_user(data, actor, send_email=True):
    """
    Create an account with a random temporary password and email the user a
    link to choose their own.
    """
    email = _clean_email(data.get('email'))
    role = _clean_role(data.get('role') or 'viewer')
    name = clean_text(data.get('name'), 'Name') or None
    if User.query.filter_by(email=email).first():
        raise ConflictError('A user with this email already exists.')

    password = data.get('password')
    if password:
        validate_password(password)
    user = User(
        name=name,
        email=email,
        role=role,
        password_hash=generate_password_hash(password or generate_temporary_password()),
        is_temporary_password=not password,
    )
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"User {email} ({role}) created by {getattr(actor, 'email', 'system')}")
    log_activity(actor, 'create', 'user', user.id, f'User {email} created with role {role}')

    if send_email:
        send_password_email(user, generate_reset_token(user), welcome=True)
    return user


def update_user(user_id, data, actor):
    user = get_user(user_id)

    email = _clean_email(data['email']) if 'email' in data else user.email
    role = _clean_role(data['role']) if 'role' in data else user.role
    if email != user.email and User.query.filter(User.email == email, User.id != user.id).first():
        raise ConflictError('A user with this email already exists.')
    if user.role == 'admin' and role != 'admin' and _admin_count() <= 1:
        raise ConflictError('The last administrator cannot be demoted.')

    changes = []
    if 'name' in data:
        user.name = clean_text(data.get('name'), 'Name') or None
        changes.append('name')
    if email != user.email:
        changes.append(f'email {user.email} -> {email}')
        user.email = email
    if role != user.role:
        changes.append(f'role {user.role} -> {role}')
        user.role = role
    db.session.commit()

    summary = ', '.join(changes) if changes else 'no changes'
    log_activity(actor, 'update', 'user', user.id, f'User {user.email} updated ({summary})')
    return user


def delete_user(user_id, actor):
    user = get_user(user_id)
    if actor is not None and user.id == actor.id:
        raise PermissionDeniedError('You cannot delete your own account.')
    if user.role == 'admin' and _admin_count() <= 1:
        raise ConflictError('The last administrator cannot be deleted.')

    email = user.email
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info(f"User {email} deleted by {getattr(actor, 'email', 'system')}")
    log_activity(actor, 'delete', 'user', user_id, f'User {email} deleted')


def validate_password(password):
    min_length = current_app.config.get('MIN_PASSWORD_LENGTH', 8)
    if not isinstance(password, str) or len(password) < min_length:
        raise ValidationError(f'Password must be at least {min_length} characters long.')


def set_password(user, password):
    validate_password(password)
    user.password_hash = generate_password_hash(password)
    user.is_temporary_password = False
    user.password_changed_at = utcnow()
    db.session.commit()


def generate_reset_token(user):
    # Tied to the current hash, so a token stops working once it has been used
    return _serializer().dumps({'user_id': user.id, 'stamp': user.password_hash[-16:]})


def verify_reset_token(token):
    """Return the user a reset token belongs to, or None when it is invalid or expired."""
    max_age = current_app.config.get('PASSWORD_RESET_MAX_AGE', 86400)
    try:
        data = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        current_app.logger.info('Expired password reset token')
        return None
    except BadSignature:
        current_app.logger.warning('Invalid password reset token')
        return None
    user = db.session.get(User, data.get('user_id'))
    if not user or user.password_hash[-16:] != data.get('stamp'):
        return None
    return user


def send_password_reset(email, actor=None):
    """
    Email a password reset link. Unknown addresses are ignored so the
    response does not reveal which emails have accounts.
    """
    user = User.query.filter_by(email=(email or '').strip().lower()).first()
    if not user:
        current_app.logger.info('Password reset requested for unknown email')
        return False
    sent = send_password_email(user, generate_reset_token(user))
    if actor is not None:
        log_activity(actor, 'update', 'user', user.id, f'Password reset sent to {user.email}')
    return sent

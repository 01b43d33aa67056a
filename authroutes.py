# Core Flask imports
from flask import Blueprint, render_template, redirect, url_for, flash, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user

# Database and model imports
from models import db
from services.users import (
    authenticate,
    send_password_reset,
    verify_reset_token,
    set_password,
    serialize_user,
)
from error_handler import ValidationError, get_payload, clean_text, parse_flag

auth_blueprint = Blueprint('auth', __name__)


def _safe_next(target):
    # Only local paths, never an absolute URL from the query string
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


@auth_blueprint.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        if request.is_json:
            return jsonify({'success': True, 'user': serialize_user(current_user)})
        return redirect(url_for('auth.dashboard'))

    if request.method == 'POST':
        data = get_payload()
        email = clean_text(data.get('email'), 'Email')
        password = data.get('password') or ''
        if not isinstance(password, str):
            raise ValidationError('Password must be text.')
        remember = parse_flag(data['remember'], 'remember') if data.get('remember') else False

        if not email or not password:
            if request.is_json:
                return jsonify({'success': False, 'message': 'Email and password are required.'}), 400
            flash('Email and password are required.', 'danger')
            return render_template('login.html', email=email), 400

        user = authenticate(email, password)
        if user is None:
            current_app.logger.warning(f"Failed login for {email} from {request.remote_addr}")
            if request.is_json:
                return jsonify({'success': False, 'message': 'Invalid email or password.'}), 401
            flash('Invalid email or password.', 'danger')
            return render_template('login.html', email=email), 401

        login_user(user, remember=remember)

        # Increment login count
        user.login_count += 1
        db.session.commit()
        current_app.logger.info(f"User {user.email} logged in (login #{user.login_count})")

        if request.is_json:
            return jsonify({'success': True, 'user': serialize_user(user)})

        if user.is_temporary_password:
            flash('You are using a temporary password. Use "Forgot password" to choose your own.', 'warning')
        else:
            flash('Logged in successfully.', 'success')
        return redirect(_safe_next(request.args.get('next')) or url_for('auth.dashboard'))

    return render_template('login.html')


@auth_blueprint.route('/logout')
@login_required
def logout():
    current_app.logger.info(f"User {current_user.email} logged out")
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('auth.login'))


@auth_blueprint.route('/api/me')
@login_required
def me():
    return jsonify({'success': True, 'user': serialize_user(current_user)})


@auth_blueprint.route('/dashboard')
@login_required
def dashboard():
    """Every role lands on the calendar."""
    return redirect(url_for('calendar.index'))


@auth_blueprint.route('/forgot-password', methods=['GET', 'POST'])
def forgot_password():
    if request.method == 'POST':
        data = get_payload()
        email = clean_text(data.get('email'), 'Email')
        if not email:
            if request.is_json:
                return jsonify({'success': False, 'message': 'Email is required.'}), 400
            flash('Email is required.', 'danger')
            return render_template('forgot_password.html'), 400

        send_password_reset(email)
        message = 'If an account exists for that email, a reset link has been sent.'
        if request.is_json:
            return jsonify({'success': True, 'message': message})
        flash(message, 'info')
        return redirect(url_for('auth.login'))

    return render_template('forgot_password.html')


@auth_blueprint.route('/reset-password/<token>', methods=['GET', 'POST'])
def reset_password(token):
    user = verify_reset_token(token)
    if user is None:
        if request.is_json:
            return jsonify({'success': False, 'message': 'This reset link is invalid or has expired.'}), 400
        flash('This reset link is invalid or has expired.', 'danger')
        return redirect(url_for('auth.forgot_password'))

    if request.method == 'POST':
        data = get_payload()
        new_password = data.get('new_password') or ''
        confirm_password = data.get('confirm_password') or ''

        try:
            if new_password != confirm_password:
                raise ValidationError('Passwords do not match.')
            set_password(user, new_password)
        except ValidationError as e:
            if request.is_json:
                return jsonify({'success': False, 'message': e.message}), 400
            flash(e.message, 'danger')
            return render_template('reset_password.html', token=token), 400

        current_app.logger.info(f"Password reset completed for {user.email}")
        if request.is_json:
            return jsonify({'success': True, 'message': 'Password updated. You can now log in.'})
        flash('Password updated. You can now log in.', 'success')
        return redirect(url_for('auth.login'))

    return render_template('reset_password.html', token=token, user=user)

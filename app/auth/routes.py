"""
Auth Routes - Signup, login, logout, profile, password change and reset.
"""

import logging
import os
from datetime import datetime

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from app.exceptions import ApplicationError, ConflictError, ValidationError
from app.limiter import limiter
from app.models import db, User
from app.utils import is_blank, is_valid_email, json_body
from config import config

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__)

RESET_REQUESTED = 'If an account with that email exists, a reset link has been sent.'


def _check_new_password(password, confirm=None):
    if not isinstance(password, str) or len(password) < config.PASSWORD_MIN_LENGTH:
        raise ValidationError(f'Password must be at least {config.PASSWORD_MIN_LENGTH} characters')
    if confirm is not None and password != confirm:
        raise ValidationError('Passwords do not match')


@bp.route('/api/auth/signup', methods=['POST'])
@limiter.limit("3 per minute")
def signup():
    """Create a new user account."""
    data = json_body()

    email = str(data.get('email', '')).strip()
    password = data.get('password', '')
    name = str(data.get('name', '')).strip()

    if not email or not is_valid_email(email):
        raise ValidationError('Email is not valid')
    _check_new_password(password, data.get('confirm_password', ''))

    if User.query.filter_by(email=email).first():
        raise ConflictError('Account with that email address already exists')

    user = User(email=email, name=name[:100], role='user')
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    logger.info('User %s signed up', user.id)
    return jsonify({'data': user.to_dict()}), 201


@bp.route('/api/auth/login', methods=['POST'])
@limiter.limit("5 per minute")
def login():
    """Login with email and password."""
    data = json_body()

    email = str(data.get('email', '')).strip()
    password = data.get('password', '')

    if not email or not is_valid_email(email):
        raise ValidationError('Email is not valid')
    if is_blank(password):
        raise ValidationError('Password cannot be blank')

    user = User.query.filter_by(email=email).first()
    if not user:
        raise ApplicationError('Invalid email or password', 401)

    check = user.compare_password(password).result()
    if check.error:
        logger.warning('Password check for user %s failed: %s', user.id, check.error)
    if not check.is_match:
        raise ApplicationError('Invalid email or password', 401)

    login_user(user)
    return jsonify({'data': user.to_dict()})


@bp.route('/api/auth/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return jsonify({'data': True})


@bp.route('/api/auth/me', methods=['GET'])
@login_required
def me():
    """Get current user profile."""
    return jsonify({'data': current_user.to_dict()})


@bp.route('/api/auth/password/change', methods=['POST'])
@login_required
@limiter.limit("3 per minute")
def change_password():
    """Change current user's password."""
    data = json_body()

    if not current_user.check_password(data.get('current_password', '')):
        raise ValidationError('Current password is incorrect')
    _check_new_password(data.get('new_password', ''), data.get('confirm_password'))

    current_user.set_password(data['new_password'])
    db.session.commit()
    return jsonify({'data': True})


@bp.route('/api/auth/profile', methods=['PATCH'])
@login_required
def update_profile():
    """Update current user's public profile fields."""
    data = json_body()

    for field in User.PROFILE_FIELDS:
        if field not in data:
            continue
        value = str(data[field] or '').strip()
        limit = User.__table__.c[field].type.length
        if len(value) > limit:
            raise ValidationError(f'{field.capitalize()} is too long')
        setattr(current_user, field, value)

    current_user.updated_at = datetime.utcnow()
    db.session.commit()
    return jsonify({'data': current_user.to_dict()})


@bp.route('/api/auth/password/reset/request', methods=['POST'])
@limiter.limit("3 per minute")
def request_password_reset():
    """Request a password reset link."""
    data = json_body()
    email = str(data.get('email', '')).strip()

    if not email:
        raise ValidationError('Email is required')

    # Always return success to prevent email enumeration
    user = User.query.filter_by(email=email).first()
    if not user:
        return jsonify({'data': RESET_REQUESTED})

    plain_token = user.issue_password_reset()
    db.session.commit()

    reset_url = f"{config.BASE_URL}/?reset_token={plain_token}"
    _send_reset_email(user, reset_url)

    return jsonify({'data': RESET_REQUESTED})


@bp.route('/api/auth/password/reset/confirm', methods=['POST'])
@limiter.limit("10 per minute")
def confirm_password_reset():
    """Confirm password reset with token."""
    data = json_body()
    token = str(data.get('token', '')).strip()

    if not token:
        raise ValidationError('Reset token is required')
    _check_new_password(data.get('new_password', ''))

    user = User.find_by_reset_token(token)
    if not user:
        raise ValidationError('Invalid or expired reset token')

    user.set_password(data['new_password'])
    user.clear_password_reset()
    db.session.commit()

    logger.info('Password reset completed for user %s', user.id)
    return jsonify({'data': 'Password has been reset. You can now log in.'})


def _send_reset_email(user, reset_url):
    """Send password reset email via SMTP, or log the link as fallback."""
    import smtplib
    from email.mime.text import MIMEText

    smtp_host = os.getenv('SMTP_HOST')
    smtp_port = int(os.getenv('SMTP_PORT', '587'))
    smtp_user = os.getenv('SMTP_USER')
    smtp_password = os.getenv('SMTP_PASSWORD')

    if not smtp_host or not smtp_user or not smtp_password:
        logger.info('SMTP not configured; password reset link for %s: %s', user.email, reset_url)
        return

    msg = MIMEText(
        f"You requested a password reset for your Trackbox account.\n\n"
        f"Reset your password here:\n{reset_url}\n\n"
        f"This link expires in {config.PASSWORD_RESET_TTL_HOURS} hour(s). "
        f"If you didn't request this, ignore this email.\n"
    )
    msg['Subject'] = 'Trackbox password reset'
    msg['From'] = smtp_user
    msg['To'] = user.email

    try:
        with smtplib.SMTP(smtp_host, smtp_port) as server:
            server.starttls()
            server.login(smtp_user, smtp_password)
            server.sendmail(smtp_user, user.email, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.warning('Failed to send password reset email to %s: %s', user.email, e)

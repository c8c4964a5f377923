"""
Trackbox - track sharing backend

Flask application factory and initialization.
"""

import logging
import os

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import config


def _bootstrap_admin(app):
    """Create initial admin account from env vars if no users exist."""
    admin_email = os.getenv('TRACKBOX_ADMIN_EMAIL')
    admin_password = os.getenv('TRACKBOX_ADMIN_PASSWORD')
    admin_name = os.getenv('TRACKBOX_ADMIN_NAME', 'Admin')

    with app.app_context():
        from app.models import db, User

        if User.query.count() > 0:
            return

        if not admin_email or not admin_password:
            app.logger.warning(
                'No users exist and TRACKBOX_ADMIN_EMAIL/TRACKBOX_ADMIN_PASSWORD not set'
            )
            return

        admin = User(name=admin_name, email=admin_email.strip(), role='admin')
        admin.set_password(admin_password)
        db.session.add(admin)
        db.session.commit()
        app.logger.info('Admin account created for %s', admin.email)


def _register_error_handlers(app):
    """Translate application and HTTP errors into JSON ``{message}`` bodies."""
    from app.exceptions import ApplicationError
    from app.models import db

    @app.errorhandler(ApplicationError)
    def handle_application_error(error):
        return jsonify(error.to_dict()), int(error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error):
        db.session.rollback()
        app.logger.exception('Storage error: %s', error)
        return jsonify({'message': 'Storage error'}), 500


def create_app(testing=False):
    """Create and configure the Flask application."""

    app = Flask(__name__)

    app.config['TESTING'] = testing

    if not testing:
        logging.basicConfig(
            level=config.LOG_LEVEL,
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )

    # Configuration
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', config.SECRET_KEY)
    app.config['SQLALCHEMY_DATABASE_URI'] = config.SQLALCHEMY_DATABASE_URI
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Session cookie security
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['SESSION_COOKIE_SECURE'] = os.getenv('FLASK_ENV') == 'production'

    # Initialize database
    from app.models import init_db
    init_db(app)

    # Initialize authentication
    from app.auth import init_auth
    init_auth(app)

    # Initialize rate limiter
    from app.limiter import limiter
    if app.config.get('TESTING'):
        app.config['RATELIMIT_ENABLED'] = False
    limiter.init_app(app)

    _register_error_handlers(app)

    # Bootstrap admin on first run
    _bootstrap_admin(app)

    # Register blueprints
    from app.auth.routes import bp as auth_bp
    from app.routes import playlists_bp, tracks_bp, users_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(playlists_bp, url_prefix='/api')
    app.register_blueprint(tracks_bp, url_prefix='/api')
    app.register_blueprint(users_bp, url_prefix='/api')

    # Default-deny: require auth on all routes except explicit allowlist
    PUBLIC_ENDPOINTS = {
        'auth.signup',
        'auth.login',
        'auth.request_password_reset',
        'auth.confirm_password_reset',
    }

    @app.before_request
    def require_auth():
        from flask import request as req
        from flask_login import current_user as cu

        endpoint = req.endpoint
        if endpoint is None:
            return
        if endpoint in PUBLIC_ENDPOINTS:
            return
        if cu.is_authenticated:
            return
        return jsonify({'message': 'Authentication required'}), 401

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    return app


__all__ = ['create_app']

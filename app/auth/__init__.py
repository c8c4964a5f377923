"""
Authentication package for Trackbox.
Flask-Login setup and user loader.
"""

from flask_login import LoginManager

login_manager = LoginManager()


def init_auth(app):
    """Initialize authentication with Flask app."""
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from app.models import db, User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from flask import jsonify
        return jsonify({'message': 'Authentication required'}), 401

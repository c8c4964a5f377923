"""
Database initialization and SQLAlchemy instance.
"""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    module = type(dbapi_connection).__module__
    if not module.startswith('sqlite3'):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def init_db(app):
    """Initialize database with Flask app."""
    db.init_app(app)

    with app.app_context():
        # Import models to register them
        from . import user, playlist, track

        # Create all tables
        db.create_all()

"""
Auth decorators for role-based access control.
"""

from functools import wraps

from flask_login import current_user, login_required

from app.exceptions import PermissionDeniedError


def admin_required(f):
    """Decorator that requires the user to be an authenticated admin."""
    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        if not current_user.is_admin:
            raise PermissionDeniedError('Admin access required')
        return f(*args, **kwargs)
    return decorated


def owns_playlist(param_name='playlist_id'):
    """
    Decorator that checks the current user owns the playlist.
    Admins may act on any playlist.
    """
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated(*args, **kwargs):
            from app.exceptions import NotFoundError
            from app.models import db, Playlist

            playlist = db.session.get(Playlist, kwargs.get(param_name))
            if not playlist:
                raise NotFoundError('Playlist not found')

            if playlist.owner_id != current_user.id and not current_user.is_admin:
                raise PermissionDeniedError('Dont have permission')

            return f(*args, **kwargs)
        return decorated
    return decorator

"""
Routes package for Trackbox.
Registers all Flask blueprints.
"""

from .playlists import bp as playlists_bp
from .tracks import bp as tracks_bp
from .users import bp as users_bp

__all__ = ['playlists_bp', 'tracks_bp', 'users_bp']

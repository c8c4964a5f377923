"""
Models package for Trackbox.
"""

from .database import db, init_db
from .playlist import Playlist
from .track import Track, TrackLike
from .user import User, PasswordCheck, hash_password, user_followers

__all__ = [
    'db', 'init_db', 'Playlist', 'Track', 'TrackLike', 'User',
    'PasswordCheck', 'hash_password', 'user_followers',
]

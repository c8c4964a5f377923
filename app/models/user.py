"""
User model for authentication, profiles and role-based access control.
"""

import hashlib
import logging
import secrets
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from flask_login import UserMixin
from sqlalchemy import event, inspect
from werkzeug.security import generate_password_hash, check_password_hash

from config import config
from .database import db

logger = logging.getLogger(__name__)

GRAVATAR_URL = 'https://gravatar.com/avatar/{digest}?s={size}&d=retro'

# Password checks run off the request thread; results come back as futures.
_password_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix='password-check')


class PasswordCheck(NamedTuple):
    """Outcome of a password comparison. ``error`` is set when no verdict could be reached."""

    error: Optional[str]
    is_match: bool


def hash_password(plaintext, work_factor=None):
    """Salt and hash a plaintext password.

    The work factor is the log2 cost of the underlying scrypt KDF,
    offset so that 10 maps to werkzeug's n=16384 block count.
    """
    work_factor = work_factor or config.PASSWORD_WORK_FACTOR
    method = f'scrypt:{2 ** (work_factor + 4)}:8:1'
    return generate_password_hash(plaintext, method=method, salt_length=16)


def _compare(candidate, stored_hash):
    if not stored_hash:
        return PasswordCheck('No password set for this account', False)
    if not isinstance(candidate, str):
        return PasswordCheck('Candidate password must be a string', False)
    try:
        return PasswordCheck(None, check_password_hash(stored_hash, candidate))
    except Exception as e:
        logger.warning('Password comparison failed: %s', e)
        return PasswordCheck(str(e), False)


user_followers = db.Table(
    'user_followers',
    db.Column('user_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    db.Column('follower_id', db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)


class User(UserMixin, db.Model):
    """Application user with a public profile and role-based access."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=True, unique=True, index=True)
    password = db.Column(db.String(255), nullable=True)
    password_reset_token = db.Column(db.String(64), nullable=True, unique=True)
    password_reset_expires = db.Column(db.DateTime, nullable=True)
    role = db.Column(db.String(10), nullable=False, default='user')

    # Profile
    name = db.Column(db.String(100), nullable=False, default='')
    gender = db.Column(db.String(30), nullable=False, default='')
    location = db.Column(db.String(120), nullable=False, default='')
    website = db.Column(db.String(255), nullable=False, default='')
    picture = db.Column(db.String(500), nullable=False, default='')

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    followers = db.relationship(
        'User',
        secondary=user_followers,
        primaryjoin=lambda: User.id == user_followers.c.user_id,
        secondaryjoin=lambda: User.id == user_followers.c.follower_id,
        backref=db.backref('following', lazy='dynamic'),
        lazy='dynamic',
    )

    PROFILE_FIELDS = ('name', 'gender', 'location', 'website', 'picture')

    @property
    def is_admin(self):
        return self.role == 'admin'

    def set_password(self, password):
        """Store a new plaintext password; it is hashed when the user is flushed."""
        self.password = password

    def compare_password(self, candidate) -> Future:
        """Compare ``candidate`` with the stored hash without blocking.

        The returned future always resolves to a :class:`PasswordCheck`;
        mismatches and internal errors never raise.
        """
        return _password_pool.submit(_compare, candidate, self.password)

    def check_password(self, candidate) -> bool:
        """Blocking convenience wrapper around :meth:`compare_password`."""
        result = self.compare_password(candidate).result()
        return result.error is None and result.is_match

    def gravatar(self, size=None):
        """Avatar URL derived from the email exactly as stored."""
        size = size or config.GRAVATAR_SIZE
        if not self.email:
            return GRAVATAR_URL.format(digest='', size=size)
        digest = hashlib.md5(self.email.encode('utf-8')).hexdigest()
        return GRAVATAR_URL.format(digest=digest, size=size)

    def is_following(self, other):
        return other.followers.filter_by(id=self.id).first() is not None

    # ---- password reset ----

    @staticmethod
    def _hash_reset_token(token):
        return hashlib.sha256(token.encode('utf-8')).hexdigest()

    def issue_password_reset(self):
        """Generate a reset token, store its hash and expiry. Returns the plain token."""
        plain_token = secrets.token_urlsafe(32)
        self.password_reset_token = self._hash_reset_token(plain_token)
        self.password_reset_expires = datetime.utcnow() + timedelta(hours=config.PASSWORD_RESET_TTL_HOURS)
        return plain_token

    def clear_password_reset(self):
        self.password_reset_token = None
        self.password_reset_expires = None

    @classmethod
    def find_by_reset_token(cls, plain_token):
        """Return the user owning an unexpired reset token, or None."""
        if not plain_token:
            return None
        user = cls.query.filter_by(password_reset_token=cls._hash_reset_token(plain_token)).first()
        if not user or not user.password_reset_expires:
            return None
        if user.password_reset_expires < datetime.utcnow():
            return None
        return user

    # ---- serialization ----

    def profile(self):
        return {field: getattr(self, field) or '' for field in self.PROFILE_FIELDS}

    def to_public_dict(self):
        """Public summary embedded in listings. Never exposes credentials, email or relations."""
        return {
            'id': self.id,
            'role': self.role,
            'profile': self.profile(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_dict(self):
        """Serialize own account for API responses. Never expose the password hash."""
        data = self.to_public_dict()
        data.update({
            'email': self.email,
            'gravatar': self.gravatar(),
            'followers_count': self.followers.count(),
            'following_count': self.following.count(),
        })
        return data


@event.listens_for(User, 'before_insert')
@event.listens_for(User, 'before_update')
def _hash_changed_password(mapper, connection, target):
    """Replace a freshly assigned plaintext password with its hash."""
    history = inspect(target).attrs.password.history
    if not history.has_changes() or not target.password:
        return
    target.password = hash_password(target.password)

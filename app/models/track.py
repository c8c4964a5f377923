"""
Track and TrackLike models.
"""

from datetime import datetime

from .database import db


MAX_NAME_LENGTH = 200


class Track(db.Model):
    """A named track attached to a playlist by its author."""

    __tablename__ = 'tracks'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(MAX_NAME_LENGTH), nullable=False)
    img = db.Column(db.String(500), nullable=False, default='')
    author_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    playlist_id = db.Column(
        db.Integer,
        db.ForeignKey('playlists.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    author = db.relationship('User', backref=db.backref('tracks', lazy='dynamic'))
    playlist = db.relationship('Playlist', back_populates='tracks')
    likes = db.relationship(
        'TrackLike',
        back_populates='track',
        cascade='all, delete-orphan',
        passive_deletes=True,
        lazy='dynamic',
    )

    def liker_ids(self):
        return [like.user_id for like in self.likes]

    def to_dict(self):
        """Serialize the stored document (no per-requester fields)."""
        return {
            'id': self.id,
            'name': self.name,
            'img': self.img,
            'author': self.author_id,
            'playlist': self.playlist_id,
            'liked': self.liker_ids(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class TrackLike(db.Model):
    """Membership of one user in a track's like set."""

    __tablename__ = 'track_likes'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'track_id', name='uq_track_like'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    track_id = db.Column(
        db.Integer,
        db.ForeignKey('tracks.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    track = db.relationship('Track', back_populates='likes')
    user = db.relationship('User', backref=db.backref('track_likes', lazy='dynamic'))

"""
Playlist model grouping tracks in insertion order.
"""

from datetime import datetime

from .database import db


class Playlist(db.Model):
    """User-created playlist; tracks inherit its image."""

    __tablename__ = 'playlists'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, index=True)
    img = db.Column(db.String(500), nullable=False, default='')
    owner_id = db.Column(
        db.Integer,
        db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    tracks = db.relationship(
        'Track',
        back_populates='playlist',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='[Track.position, Track.id]',
        lazy='dynamic',
    )
    owner = db.relationship('User', backref=db.backref('playlists', lazy='dynamic'))

    def next_position(self):
        """Position for a track appended at the end of the sequence."""
        from .track import Track
        last = db.session.query(db.func.max(Track.position)).filter(
            Track.playlist_id == self.id
        ).scalar()
        return 0 if last is None else last + 1

    def to_dict(self):
        """Serialize playlist for API responses."""
        return {
            'id': self.id,
            'name': self.name,
            'img': self.img,
            'owner_id': self.owner_id,
            'tracks': [track.id for track in self.tracks],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

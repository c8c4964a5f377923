"""
Track Service - ranked listings and track mutations.

Listings are a single declarative query per scope: the like count is a
correlated subquery, the requester's own like is an EXISTS test, and the
author is inner-joined so tracks without an author row are dropped.
"""

import logging
from http import HTTPStatus

from sqlalchemy import case, exists, func, select
from sqlalchemy.exc import IntegrityError

from app.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models import db, Playlist, Track, TrackLike, User
from app.models.track import MAX_NAME_LENGTH
from app.utils import is_blank, normalize_page

logger = logging.getLogger(__name__)


def _like_count():
    return (
        select(func.count(TrackLike.id))
        .where(TrackLike.track_id == Track.id)
        .correlate(Track)
        .scalar_subquery()
    )


def _liked_by(user_id):
    return exists().where(TrackLike.track_id == Track.id, TrackLike.user_id == user_id)


def _serialize(track, author, like_count, liked):
    return {
        'id': track.id,
        'name': track.name,
        'img': track.img,
        'playlist': track.playlist_id,
        'author': author.to_public_dict(),
        'liked': bool(liked),
        'like_count': like_count or 0,
        'created_at': track.created_at.isoformat() if track.created_at else None,
    }


def list_tracks(user_id, page=None, limit=None, playlist_id=None, author_id=None, liked_only=False):
    """
    Return one page of tracks for the requesting user.

    Scopes: global (no filter), ``playlist_id``, ``author_id`` or
    ``liked_only``. The first three rank by like count, then the
    requester's own like, then newest. The liked scope keeps only tracks
    the requester likes and orders them newest first.

    Args:
        user_id: Requesting user's id
        page: 1-based page number (default 1)
        limit: Page size (default 10, capped at MAX_PAGE_SIZE)
        playlist_id: Restrict to one playlist
        author_id: Restrict to one author
        liked_only: Restrict to tracks the requester likes

    Returns:
        List of serialized track dicts with embedded author summaries
    """
    page, limit, skip = normalize_page(page, limit)

    like_count = _like_count().label('like_count')
    liked = case((_liked_by(user_id), 1), else_=0).label('liked')

    query = (
        db.session.query(Track, User, like_count, liked)
        .join(User, Track.author_id == User.id)
    )

    if liked_only:
        query = query.filter(_liked_by(user_id)).order_by(
            Track.created_at.desc(),
            Track.id.desc(),
        )
    else:
        if playlist_id is not None:
            query = query.filter(Track.playlist_id == playlist_id)
        if author_id is not None:
            query = query.filter(Track.author_id == author_id)
        query = query.order_by(
            like_count.desc(),
            liked.desc(),
            Track.created_at.desc(),
            Track.id.desc(),
        )

    rows = query.offset(skip).limit(limit).all()
    return [_serialize(*row) for row in rows]


def add_track(user, playlist_id, name):
    """Create a track in a playlist, inheriting the playlist image."""
    if is_blank(name):
        raise ValidationError('Name is not valid', HTTPStatus.NOT_FOUND)
    if len(name.strip()) > MAX_NAME_LENGTH:
        raise ValidationError('Name is too long', HTTPStatus.NOT_FOUND)

    playlist = db.session.get(Playlist, playlist_id)
    if not playlist:
        raise NotFoundError('Playlist not found')

    track = Track(
        name=name.strip(),
        img=playlist.img,
        author_id=user.id,
        playlist_id=playlist.id,
        position=playlist.next_position(),
    )
    db.session.add(track)
    db.session.commit()

    logger.info('User %s added track %s to playlist %s', user.id, track.id, playlist.id)
    return track


def toggle_like(user, track_id):
    """Flip the requester's membership in a track's like set. Returns the new state."""
    track = db.session.get(Track, track_id)
    if not track:
        raise NotFoundError('Track not found')

    removed = TrackLike.query.filter_by(user_id=user.id, track_id=track.id).delete()
    if removed:
        db.session.commit()
        logger.info('User %s unliked track %s', user.id, track.id)
        return False

    try:
        db.session.add(TrackLike(user_id=user.id, track_id=track.id))
        db.session.commit()
    except IntegrityError:
        # A concurrent request already inserted the same like.
        db.session.rollback()
    logger.info('User %s liked track %s', user.id, track.id)
    return True


def delete_track(user, track_id):
    """Delete a track owned by the requester (or any track, for admins)."""
    track = db.session.get(Track, track_id)
    if not track:
        raise NotFoundError('Track not found')

    if track.author_id != user.id and not user.is_admin:
        raise PermissionDeniedError('Dont have permission')

    data = track.to_dict()
    db.session.delete(track)
    db.session.commit()

    logger.info('User %s deleted track %s', user.id, track_id)
    return data

"""
Playlist Routes - create, view and delete playlists.
"""

import logging

from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from app.auth.decorators import owns_playlist
from app.exceptions import NotFoundError, ValidationError
from app.models import db, Playlist
from app.utils import json_body

logger = logging.getLogger(__name__)

bp = Blueprint('playlists', __name__)


@bp.route('/playlists', methods=['POST'])
@login_required
def create_playlist():
    """Create a new playlist."""
    data = json_body()
    name = str(data.get('name') or '').strip()
    img = str(data.get('img') or '').strip()

    if not name:
        raise ValidationError('Playlist name is required')
    if len(name) > 120:
        raise ValidationError('Playlist name is too long')
    if len(img) > 500:
        raise ValidationError('Image URL is too long')

    playlist = Playlist(name=name, img=img, owner_id=current_user.id)
    db.session.add(playlist)
    db.session.commit()

    logger.info('User %s created playlist %s', current_user.id, playlist.id)
    return jsonify({'data': playlist.to_dict()}), 201


@bp.route('/playlists/<int:playlist_id>', methods=['GET'])
@login_required
def get_playlist(playlist_id):
    """Return a playlist with its ordered track ids."""
    playlist = db.session.get(Playlist, playlist_id)
    if not playlist:
        raise NotFoundError('Playlist not found')
    return jsonify({'data': playlist.to_dict()})


@bp.route('/playlists/<int:playlist_id>', methods=['DELETE'])
@owns_playlist('playlist_id')
def delete_playlist(playlist_id):
    """Delete playlist together with its tracks."""
    playlist = db.session.get(Playlist, playlist_id)
    data = playlist.to_dict()

    db.session.delete(playlist)
    db.session.commit()

    logger.info('User %s deleted playlist %s', current_user.id, playlist_id)
    return jsonify({'data': data})

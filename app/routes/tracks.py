"""
Track Routes - ranked listings, adding tracks to playlists, likes and deletion.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from app.services import track_service
from app.utils import json_body

bp = Blueprint('tracks', __name__)


def _page_args():
    return {
        'page': request.args.get('page', type=int),
        'limit': request.args.get('limit', type=int),
    }


# ==================== Listings ====================

@bp.route('/tracks', methods=['GET'])
@login_required
def get_tracks():
    """Popular tracks across all playlists."""
    tracks = track_service.list_tracks(current_user.id, **_page_args())
    return jsonify({'data': tracks})


@bp.route('/tracks/playlist/<int:playlist_id>', methods=['GET'])
@login_required
def get_tracks_in_playlist(playlist_id):
    """Tracks in one playlist, most liked first."""
    tracks = track_service.list_tracks(current_user.id, playlist_id=playlist_id, **_page_args())
    return jsonify({'data': tracks})


@bp.route('/tracks/liked', methods=['GET'])
@login_required
def get_tracks_liked():
    """Tracks the current user likes, newest first."""
    tracks = track_service.list_tracks(current_user.id, liked_only=True, **_page_args())
    return jsonify({'data': tracks})


@bp.route('/tracks/author/<int:author_id>', methods=['GET'])
@login_required
def get_tracks_by_author(author_id):
    """Tracks by one author, most liked first."""
    tracks = track_service.list_tracks(current_user.id, author_id=author_id, **_page_args())
    return jsonify({'data': tracks})


# ==================== Mutations ====================

@bp.route('/track/<int:playlist_id>', methods=['POST'])
@login_required
def post_track(playlist_id):
    """Add a track to a playlist."""
    data = json_body()
    track = track_service.add_track(current_user, playlist_id, data.get('name'))
    return jsonify({'data': track.to_dict()})


@bp.route('/track/like/<int:track_id>', methods=['PUT'])
@login_required
def put_track_like(track_id):
    """Like or unlike a track."""
    liked = track_service.toggle_like(current_user, track_id)
    return jsonify({'data': liked})


@bp.route('/track/<int:track_id>', methods=['DELETE'])
@login_required
def delete_track(track_id):
    """Delete a track (author or admin)."""
    track = track_service.delete_track(current_user, track_id)
    return jsonify({'data': track})

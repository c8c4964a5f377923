"""
Ranked track listings.

Covers:
  - Global, playlist and author scopes ranked by like count, own like, recency
  - Liked scope membership and newest-first ordering
  - Pagination offsets, defaults and the page-size cap
  - Author summaries never leaking credentials, email or relations
"""

import os
import sys
from datetime import datetime, timedelta

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)
HIDDEN_AUTHOR_FIELDS = {
    'password', 'email', 'followers', 'liked_playlists', 'liked_tracks',
    'password_reset_token', 'password_reset_expires',
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope='module')
def app():
    """Create a fresh app with an in-memory database."""
    os.environ['TRACKBOX_ADMIN_EMAIL'] = 'admin@test.com'
    os.environ['TRACKBOX_ADMIN_PASSWORD'] = 'adminpass1'
    os.environ['SECRET_KEY'] = 'test-secret-key-fixed'

    from config import config
    config.SQLALCHEMY_DATABASE_URI = 'sqlite://'

    from app import create_app
    application = create_app(testing=True)
    yield application


@pytest.fixture(scope='module')
def viewer_client(app):
    """Authenticated user whose likes drive the ranking."""
    client = app.test_client()
    resp = client.post('/api/auth/signup', json={
        'name': 'Viewer',
        'email': 'viewer@test.com',
        'password': 'viewerpass1',
        'confirm_password': 'viewerpass1',
    })
    assert resp.status_code == 201, f"Viewer signup failed: {resp.get_json()}"
    return client


@pytest.fixture(scope='module')
def dataset(app, viewer_client):
    """
    Five tracks with like counts [5, 5, 3, 1, 0].

    The viewer likes ``second5`` (older of the two 5-like tracks) and ``one``.
    """
    with app.app_context():
        from app.models import db, Playlist, Track, TrackLike, User

        viewer = User.query.filter_by(email='viewer@test.com').first()
        alice = User(name='Alice', email='alice@test.com', gender='f', location='Oslo')
        bob = User(name='Bob', email='bob@test.com')
        likers = [User(name=f'Liker {i}', email=f'liker{i}@test.com') for i in range(5)]
        db.session.add_all([alice, bob] + likers)
        db.session.flush()

        p1 = Playlist(name='Morning', img='morning.png', owner_id=alice.id)
        p2 = Playlist(name='Evening', img='evening.png', owner_id=bob.id)
        db.session.add_all([p1, p2])
        db.session.flush()

        def make_track(name, author, playlist, minutes, fans):
            track = Track(
                name=name,
                img=playlist.img,
                author_id=author.id,
                playlist_id=playlist.id,
                created_at=BASE_TIME + timedelta(minutes=minutes),
            )
            db.session.add(track)
            db.session.flush()
            for fan in fans:
                db.session.add(TrackLike(user_id=fan.id, track_id=track.id))
            return track

        second5 = make_track('second5', bob, p1, 0, likers[:4] + [viewer])
        first5 = make_track('first5', alice, p1, 1, likers)
        three = make_track('three', bob, p2, 2, likers[:3])
        one = make_track('one', alice, p2, 3, [viewer])
        zero = make_track('zero', alice, p1, 4, [])
        db.session.commit()

        return {
            'viewer': viewer.id,
            'alice': alice.id,
            'bob': bob.id,
            'p1': p1.id,
            'p2': p2.id,
            'second5': second5.id,
            'first5': first5.id,
            'three': three.id,
            'one': one.id,
            'zero': zero.id,
        }


def _names(resp):
    assert resp.status_code == 200, resp.get_json()
    return [t['name'] for t in resp.get_json()['data']]


# ===========================================================================
# 1. Global listing
# ===========================================================================

class TestGlobalListing:

    def test_ranked_by_likes_then_own_like_then_newest(self, viewer_client, dataset):
        resp = viewer_client.get('/api/tracks')
        assert _names(resp) == ['second5', 'first5', 'three', 'one', 'zero']

    def test_first_page_of_two(self, viewer_client, dataset):
        resp = viewer_client.get('/api/tracks?page=1&limit=2')
        data = resp.get_json()['data']
        assert [t['name'] for t in data] == ['second5', 'first5']
        assert data[0]['liked'] is True
        assert data[1]['liked'] is False
        assert data[0]['like_count'] == data[1]['like_count'] == 5

    def test_pages_are_consecutive_slices(self, viewer_client, dataset):
        full = _names(viewer_client.get('/api/tracks?limit=50'))
        for limit in (1, 2, 3):
            collected = []
            page = 1
            while True:
                chunk = _names(viewer_client.get(f'/api/tracks?page={page}&limit={limit}'))
                assert len(chunk) <= limit
                if not chunk:
                    break
                collected.extend(chunk)
                page += 1
            assert collected == full

    def test_page_past_end_is_empty(self, viewer_client, dataset):
        assert _names(viewer_client.get('/api/tracks?page=4&limit=2')) == []

    def test_defaults_when_params_missing_or_invalid(self, viewer_client, dataset):
        assert _names(viewer_client.get('/api/tracks')) == \
            _names(viewer_client.get('/api/tracks?page=0&limit=-3'))
        assert _names(viewer_client.get('/api/tracks?page=abc&limit=xyz')) == \
            _names(viewer_client.get('/api/tracks?page=1&limit=10'))

    def test_like_count_exposed(self, viewer_client, dataset):
        data = viewer_client.get('/api/tracks').get_json()['data']
        assert [t['like_count'] for t in data] == [5, 5, 3, 1, 0]

    def test_tiebreak_follows_requester(self, app, dataset):
        """A user who liked neither 5-like track sees the newer one first."""
        client = app.test_client()
        client.post('/api/auth/signup', json={
            'email': 'stranger@test.com',
            'password': 'strangerpass1',
            'confirm_password': 'strangerpass1',
        })
        names = _names(client.get('/api/tracks?limit=2'))
        assert names == ['first5', 'second5']


# ===========================================================================
# 2. Scoped listings
# ===========================================================================

class TestScopedListings:

    def test_playlist_scope(self, viewer_client, dataset):
        resp = viewer_client.get(f"/api/tracks/playlist/{dataset['p1']}")
        assert _names(resp) == ['second5', 'first5', 'zero']
        resp = viewer_client.get(f"/api/tracks/playlist/{dataset['p2']}")
        assert _names(resp) == ['three', 'one']

    def test_playlist_scope_unknown_playlist_is_empty(self, viewer_client, dataset):
        assert _names(viewer_client.get('/api/tracks/playlist/9999')) == []

    def test_author_scope(self, viewer_client, dataset):
        resp = viewer_client.get(f"/api/tracks/author/{dataset['alice']}")
        data = resp.get_json()['data']
        assert [t['name'] for t in data] == ['first5', 'one', 'zero']
        assert all(t['author']['id'] == dataset['alice'] for t in data)

    def test_author_scope_paginates(self, viewer_client, dataset):
        resp = viewer_client.get(f"/api/tracks/author/{dataset['alice']}?page=2&limit=2")
        assert _names(resp) == ['zero']

    def test_liked_scope(self, viewer_client, dataset):
        data = viewer_client.get('/api/tracks/liked').get_json()['data']
        assert [t['name'] for t in data] == ['one', 'second5']
        assert all(t['liked'] is True for t in data)

    def test_liked_scope_ignores_like_count(self, viewer_client, dataset):
        """Newest first even though 'second5' has more likes."""
        data = viewer_client.get('/api/tracks/liked?limit=1').get_json()['data']
        assert data[0]['name'] == 'one'

    def test_liked_scope_empty_for_user_without_likes(self, app, dataset):
        client = app.test_client()
        client.post('/api/auth/signup', json={
            'email': 'nolikes@test.com',
            'password': 'nolikespass1',
            'confirm_password': 'nolikespass1',
        })
        assert _names(client.get('/api/tracks/liked')) == []


# ===========================================================================
# 3. Author summaries
# ===========================================================================

class TestAuthorSummary:

    @pytest.mark.parametrize('path', [
        '/api/tracks',
        '/api/tracks/liked',
    ])
    def test_hidden_fields_absent(self, viewer_client, dataset, path):
        data = viewer_client.get(path).get_json()['data']
        assert data
        for track in data:
            assert not HIDDEN_AUTHOR_FIELDS & set(track['author'])

    def test_profile_exposed(self, viewer_client, dataset):
        resp = viewer_client.get(f"/api/tracks/author/{dataset['alice']}")
        author = resp.get_json()['data'][0]['author']
        assert author['profile']['name'] == 'Alice'
        assert author['profile']['location'] == 'Oslo'
        assert 'alice@test.com' not in str(author)


# ===========================================================================
# 4. Service-level pagination cap
# ===========================================================================

class TestPageSizeCap:

    @pytest.mark.parametrize('path', [
        '/api/tracks',
        '/api/tracks/liked',
    ])
    def test_huge_page_is_empty(self, viewer_client, dataset, path):
        resp = viewer_client.get(f'{path}?page=100000000000000000000&limit=10')
        assert resp.status_code == 200
        assert resp.get_json() == {'data': []}

    def test_limit_clamped(self, app, dataset, monkeypatch):
        from config import config
        from app.services import track_service

        monkeypatch.setattr(config, 'MAX_PAGE_SIZE', 3)
        with app.app_context():
            tracks = track_service.list_tracks(dataset['viewer'], page=1, limit=1000)
        assert [t['name'] for t in tracks] == ['second5', 'first5', 'three']

    def test_guest_rejected(self, app, dataset):
        resp = app.test_client().get('/api/tracks')
        assert resp.status_code == 401

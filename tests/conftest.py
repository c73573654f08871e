"""
Pytest configuration and shared fixtures for NeoSynth tests.

This module provides common fixtures used across all test modules,
including sample playlists, an in-memory history client, and Flask apps
backed by in-memory SQLite.
"""

import pytest

from neosynth.models.db import db
from neosynth.models.playlist import Playlist, Track
from neosynth.schemas import ShuffleStatistics
from neosynth.shuffle.history_client import HistoryClient
from neosynth.shuffle.weights import HistoryEntry


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_tracks():
    """Three tracks, A, B and C."""
    return [
        Track(url='http://music.example.com/a.mp3', name='Track A'),
        Track(url='http://music.example.com/b.mp3', name='Track B'),
        Track(url='http://music.example.com/c.mp3', name='Track C'),
    ]


@pytest.fixture
def sample_playlist(sample_tracks):
    """A Playlist wrapping sample_tracks."""
    return Playlist(name='Test Playlist', tracks=sample_tracks)


# =============================================================================
# History Client Fixtures
# =============================================================================

class FakeHistoryClient(HistoryClient):
    """
    In-memory history client.

    Records every call name in `calls`. Set `fail_with` to an exception
    instance to make every call raise it.
    """

    def __init__(self):
        self.records = {}
        self.calls = []
        self.reset_session_ids = []
        self.fail_with = None

    def _check(self, name):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def _user_records(self, user_id):
        return {
            url: record
            for (uid, url), record in self.records.items()
            if uid == user_id
        }

    async def record_play(self, user_id, track_url, track_name, session_id):
        self._check('record_play')
        record = self.records.setdefault(
            (user_id, track_url),
            {'play_count': 0, 'played': False, 'session_id': None},
        )
        record['play_count'] += 1
        record['played'] = True
        record['session_id'] = session_id
        return record['play_count']

    async def get_play_history(self, user_id, track_urls):
        self._check('get_play_history')
        return {
            url: HistoryEntry(
                play_count=record['play_count'],
                played_in_current_session=record['played'],
            )
            for url, record in self._user_records(user_id).items()
            if url in track_urls
        }

    async def reset_session(self, user_id, session_id):
        self._check('reset_session')
        self.reset_session_ids.append(session_id)
        for record in self._user_records(user_id).values():
            record['played'] = False
            record['session_id'] = session_id

    async def get_statistics(self, user_id):
        self._check('get_statistics')
        counts = [r['play_count'] for r in self._user_records(user_id).values()]
        if not counts:
            return ShuffleStatistics.empty()
        return ShuffleStatistics(
            total_tracks=len(counts),
            total_plays=sum(counts),
            avg_plays_per_track=sum(counts) / len(counts),
            max_plays=max(counts),
            min_plays=min(counts),
            tracks_played_in_session=sum(
                1 for r in self._user_records(user_id).values() if r['played']
            ),
        )

    async def clear_history(self, user_id):
        self._check('clear_history')
        urls = list(self._user_records(user_id))
        for url in urls:
            del self.records[(user_id, url)]
        return len(urls)


@pytest.fixture
def fake_history_client():
    """A fresh in-memory history client."""
    return FakeHistoryClient()


# =============================================================================
# Flask App Fixtures
# =============================================================================

@pytest.fixture
def db_app():
    """Create a Flask app with in-memory SQLite, inside an app context."""
    from neosynth import create_app

    app = create_app('testing')

    with app.app_context():
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(db_app):
    """Flask test client bound to db_app."""
    with db_app.test_client() as client:
        yield client


@pytest.fixture
def local_app():
    """
    Create a Flask app with in-memory SQLite, without an active context.

    For code that pushes its own app contexts, such as LocalHistoryClient.
    """
    from neosynth import create_app

    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()

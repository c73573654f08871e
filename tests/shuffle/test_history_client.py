"""Tests for HttpHistoryClient and LocalHistoryClient."""

import asyncio
import threading
from unittest.mock import MagicMock, patch

import pytest
import requests
from flask import has_app_context

from neosynth.schemas import ShuffleStatistics
from neosynth.services import PlayHistoryError, PlayHistoryService
from neosynth.shuffle.exceptions import ContractMismatchError, TransportError
from neosynth.shuffle.history_client import (
    HttpHistoryClient,
    LocalHistoryClient,
)
from neosynth.shuffle.weights import HistoryEntry

BASE_URL = 'http://testserver/api'
URL_A = 'http://music.example.com/a.mp3'
URL_B = 'http://music.example.com/b.mp3'


# =========================================================================
# Helpers
# =========================================================================


def _mock_response(status_code=200, json_data=None, headers=None):
    """Create a mock response object."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = json_data if json_data is not None else {}
    resp.headers = headers or {}
    resp.text = str(json_data) if json_data else ""
    return resp


@pytest.fixture
def session():
    """A mock requests.Session."""
    return MagicMock(spec=requests.Session, headers={})


@pytest.fixture
def client(session):
    return HttpHistoryClient(BASE_URL, timeout=2.0, session=session)


# =========================================================================
# Initialization
# =========================================================================


class TestInit:
    """Tests for HttpHistoryClient construction."""

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            HttpHistoryClient('')

    def test_strips_trailing_slash(self, session):
        client = HttpHistoryClient(BASE_URL + '/', session=session)

        assert client.base_url == BASE_URL

    def test_sets_json_headers(self, client, session):
        assert session.headers['Accept'] == 'application/json'
        assert session.headers['Content-Type'] == 'application/json'

    def test_from_config(self):
        with patch('neosynth.shuffle.history_client.requests.Session'):
            client = HttpHistoryClient.from_config({
                'HISTORY_API_BASE_URL': BASE_URL,
                'HISTORY_REQUEST_TIMEOUT': '5',
            })

        assert client.base_url == BASE_URL
        assert client._timeout == 5.0

    def test_close(self, client, session):
        client.close()

        session.close.assert_called_once()


# =========================================================================
# Contract operations
# =========================================================================


class TestRecordPlay:
    """Tests for record_play()."""

    def test_posts_camel_case_body(self, client, session):
        session.request.return_value = _mock_response(
            200, {'success': True, 'playCount': 3, 'lastPlayed': None}
        )

        count = asyncio.run(
            client.record_play('user123', URL_A, 'Track A', 'shuffle_1_ab')
        )

        assert count == 3
        session.request.assert_called_once_with(
            'POST',
            f'{BASE_URL}/users/user123/shuffle/play',
            params=None,
            json={
                'trackUrl': URL_A,
                'trackName': 'Track A',
                'sessionId': 'shuffle_1_ab',
            },
            timeout=2.0,
        )

    def test_missing_play_count(self, client, session):
        session.request.return_value = _mock_response(200, {'success': True})

        with pytest.raises(ContractMismatchError):
            asyncio.run(client.record_play('user123', URL_A, 'A', None))

    def test_user_id_is_quoted(self, client, session):
        session.request.return_value = _mock_response(200, {'playCount': 1})

        asyncio.run(client.record_play('a b/c', URL_A, 'A', None))

        url = session.request.call_args[0][1]
        assert url == f'{BASE_URL}/users/a%20b%2Fc/shuffle/play'


class TestGetPlayHistory:
    """Tests for get_play_history()."""

    def test_returns_entries(self, client, session):
        session.request.return_value = _mock_response(200, {
            URL_A: {
                'playCount': 4,
                'playedInCurrentSession': True,
                'lastPlayed': '2026-01-01T00:00:00',
            },
        })

        history = asyncio.run(
            client.get_play_history('user123', [URL_A, URL_B])
        )

        assert history == {URL_A: HistoryEntry(4, True)}
        session.request.assert_called_once_with(
            'GET',
            f'{BASE_URL}/users/user123/shuffle/history',
            params={'tracks': f'{URL_A},{URL_B}'},
            json=None,
            timeout=2.0,
        )

    def test_empty_request_skips_network(self, client, session):
        assert asyncio.run(client.get_play_history('user123', [])) == {}
        session.request.assert_not_called()

    def test_ignores_unrequested_urls(self, client, session):
        session.request.return_value = _mock_response(200, {
            URL_B: {'playCount': 1, 'playedInCurrentSession': False},
        })

        assert asyncio.run(client.get_play_history('user123', [URL_A])) == {}

    def test_negative_play_count(self, client, session):
        session.request.return_value = _mock_response(200, {
            URL_A: {'playCount': -1, 'playedInCurrentSession': False},
        })

        with pytest.raises(ContractMismatchError):
            asyncio.run(client.get_play_history('user123', [URL_A]))

    def test_non_object_payload(self, client, session):
        session.request.return_value = _mock_response(200, [URL_A])

        with pytest.raises(ContractMismatchError):
            asyncio.run(client.get_play_history('user123', [URL_A]))

    def test_non_object_entry(self, client, session):
        session.request.return_value = _mock_response(200, {URL_A: 4})

        with pytest.raises(ContractMismatchError):
            asyncio.run(client.get_play_history('user123', [URL_A]))


class TestOtherOperations:
    """Tests for reset_session(), get_statistics() and clear_history()."""

    def test_reset_session(self, client, session):
        session.request.return_value = _mock_response(
            200, {'success': True, 'resetCount': 2}
        )

        asyncio.run(client.reset_session('user123', 'shuffle_2_cd'))

        session.request.assert_called_once_with(
            'POST',
            f'{BASE_URL}/users/user123/shuffle/reset-session',
            params=None,
            json={'sessionId': 'shuffle_2_cd'},
            timeout=2.0,
        )

    def test_get_statistics(self, client, session):
        session.request.return_value = _mock_response(200, {
            'totalTracks': 2,
            'totalPlays': 5,
            'avgPlaysPerTrack': 2.5,
            'maxPlays': 4,
            'minPlays': 1,
            'tracksPlayedInSession': 1,
        })

        stats = asyncio.run(client.get_statistics('user123'))

        assert stats == ShuffleStatistics(
            total_tracks=2,
            total_plays=5,
            avg_plays_per_track=2.5,
            max_plays=4,
            min_plays=1,
            tracks_played_in_session=1,
        )

    def test_clear_history(self, client, session):
        session.request.return_value = _mock_response(
            200, {'success': True, 'deletedCount': 7}
        )

        assert asyncio.run(client.clear_history('user123')) == 7
        assert session.request.call_args[0][0] == 'DELETE'


# =========================================================================
# Error handling
# =========================================================================


class TestErrors:
    """Tests for transport and contract failures."""

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.ConnectionError('refused'),
            requests.exceptions.Timeout('slow'),
            requests.exceptions.RequestException('other'),
        ],
    )
    def test_network_failure(self, client, session, exc):
        session.request.side_effect = exc

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.get_statistics('user123'))

        assert exc_info.value.status_code is None

    def test_error_status_uses_message(self, client, session):
        session.request.return_value = _mock_response(
            503, {'success': False, 'message': 'Database is unavailable.'}
        )

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.clear_history('user123'))

        assert exc_info.value.status_code == 503
        assert 'Database is unavailable.' in str(exc_info.value)

    def test_error_status_without_json(self, client, session):
        resp = _mock_response(502)
        resp.json.side_effect = ValueError('no json')
        resp.text = 'Bad Gateway'
        session.request.return_value = resp

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.get_statistics('user123'))

        assert exc_info.value.status_code == 502
        assert 'Bad Gateway' in str(exc_info.value)

    def test_non_json_success_body(self, client, session):
        resp = _mock_response(200)
        resp.json.side_effect = ValueError('no json')
        session.request.return_value = resp

        with pytest.raises(ContractMismatchError):
            asyncio.run(client.get_statistics('user123'))

    def test_requests_are_not_retried(self, client, session):
        session.request.side_effect = requests.exceptions.Timeout('slow')

        with pytest.raises(TransportError):
            asyncio.run(client.record_play('user123', URL_A, 'A', None))

        assert session.request.call_count == 1


# =========================================================================
# LocalHistoryClient
# =========================================================================


class TestLocalHistoryClient:
    """Tests for the in-process client backed by PlayHistoryService."""

    def test_record_and_fetch(self, local_app):
        client = LocalHistoryClient(local_app)

        async def scenario():
            await client.record_play('user123', URL_A, 'Track A', 's1')
            count = await client.record_play('user123', URL_A, 'Track A', 's1')
            history = await client.get_play_history('user123', [URL_A, URL_B])
            return count, history

        count, history = asyncio.run(scenario())

        assert count == 2
        assert history == {URL_A: HistoryEntry(2, True)}

    def test_reset_and_statistics(self, local_app):
        client = LocalHistoryClient(local_app)

        async def scenario():
            await client.record_play('user123', URL_A, 'Track A', 's1')
            await client.record_play('user123', URL_B, 'Track B', 's1')
            before = await client.get_statistics('user123')
            await client.reset_session('user123', 's2')
            after = await client.get_statistics('user123')
            return before, after

        before, after = asyncio.run(scenario())

        assert before.total_plays == 2
        assert before.tracks_played_in_session == 2
        assert after.total_plays == 2
        assert after.tracks_played_in_session == 0

    def test_clear_history(self, local_app):
        client = LocalHistoryClient(local_app)

        async def scenario():
            await client.record_play('user123', URL_A, 'Track A', None)
            return await client.clear_history('user123')

        assert asyncio.run(scenario()) == 1

    def test_empty_request(self, local_app):
        client = LocalHistoryClient(local_app)

        assert asyncio.run(client.get_play_history('user123', [])) == {}

    def test_store_error_becomes_transport_error(self, local_app):
        client = LocalHistoryClient(local_app)

        with patch.object(
            PlayHistoryService,
            'get_statistics',
            side_effect=PlayHistoryError('disk full'),
        ):
            with pytest.raises(TransportError):
                asyncio.run(client.get_statistics('user123'))

    def test_service_runs_in_worker_thread_with_app_context(self, local_app):
        client = LocalHistoryClient(local_app)
        seen = []

        def fake_statistics(user_id):
            seen.append((threading.get_ident(), has_app_context()))
            return ShuffleStatistics.empty().model_dump()

        with patch.object(
            PlayHistoryService, 'get_statistics', side_effect=fake_statistics
        ):
            stats = asyncio.run(client.get_statistics('user123'))

        assert stats == ShuffleStatistics.empty()
        assert len(seen) == 1
        worker_thread, in_app_context = seen[0]
        assert worker_thread != threading.get_ident()
        assert in_app_context is True

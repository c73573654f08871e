"""
Tests for Track and Playlist models.

Track identity is its url; Playlist keeps display order and exposes
sequence access for the weight calculator.
"""

import pytest

from neosynth.models.playlist import Playlist, Track


class TestTrack:
    """Tests for Track."""

    def test_requires_url(self):
        with pytest.raises(ValueError):
            Track(url="", name="Nameless")

    def test_from_dict(self):
        track = Track.from_dict(
            {"url": "http://music.example.com/a.mp3", "name": "Track A"}
        )

        assert track == Track("http://music.example.com/a.mp3", "Track A")

    def test_from_dict_without_name(self):
        track = Track.from_dict({"url": "http://music.example.com/a.mp3"})

        assert track.name == ""

    def test_to_dict(self, sample_tracks):
        assert sample_tracks[0].to_dict() == {
            "url": "http://music.example.com/a.mp3",
            "name": "Track A",
        }

    def test_is_immutable(self, sample_tracks):
        with pytest.raises(AttributeError):
            sample_tracks[0].url = "http://elsewhere.example.com/x.mp3"

    def test_str(self, sample_tracks):
        assert str(sample_tracks[0]) == (
            "Track A <http://music.example.com/a.mp3>"
        )


class TestPlaylist:
    """Tests for Playlist."""

    def test_sequence_access(self, sample_playlist, sample_tracks):
        assert len(sample_playlist) == 3
        assert sample_playlist[1] == sample_tracks[1]
        assert list(sample_playlist) == sample_tracks

    def test_urls_in_order(self, sample_playlist):
        assert sample_playlist.urls() == [
            "http://music.example.com/a.mp3",
            "http://music.example.com/b.mp3",
            "http://music.example.com/c.mp3",
        ]

    def test_from_dicts_round_trip(self, sample_playlist):
        rebuilt = Playlist.from_dicts(
            sample_playlist.name, sample_playlist.to_dict()["tracks"]
        )

        assert rebuilt == sample_playlist

    def test_empty_by_default(self):
        playlist = Playlist(name="Empty")

        assert len(playlist) == 0
        assert playlist.urls() == []

    def test_duplicate_names_allowed(self):
        playlist = Playlist.from_dicts("Dupes", [
            {"url": "http://music.example.com/1.mp3", "name": "Intro"},
            {"url": "http://music.example.com/2.mp3", "name": "Intro"},
        ])

        assert len(set(playlist.urls())) == 2

    def test_str(self, sample_playlist):
        assert str(sample_playlist) == "Test Playlist - 3 tracks"

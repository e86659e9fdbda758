"""Test utilities and helpers"""

import pytest

from lavaspot.core.exceptions import InvalidReferenceError, MissingReferenceError
from lavaspot.utils import format_duration, parse_spotify_reference


class TestHelpers:
    """Test helper functions"""

    def test_format_duration(self):
        """Test duration formatting"""
        assert format_duration(225000) == "3:45"
        assert format_duration(3750000) == "1:02:30"
        assert format_duration(999) == "0:00"
        assert format_duration(-10) == "0:00"


class TestParseReference:
    """Test Spotify URL/URI parsing"""

    @pytest.mark.parametrize("reference, expected", [
        ("https://open.spotify.com/track/4cOdK2wGLETKBW3PvgPWqT", ("track", "4cOdK2wGLETKBW3PvgPWqT")),
        ("https://open.spotify.com/album/1DFixLWuPkv3KT3TnV35m3?si=abc", ("album", "1DFixLWuPkv3KT3TnV35m3")),
        ("https://open.spotify.com/intl-de/playlist/37i9dQZF1DXcBWIGoYBM5M", ("playlist", "37i9dQZF1DXcBWIGoYBM5M")),
        ("spotify:track:4cOdK2wGLETKBW3PvgPWqT", ("track", "4cOdK2wGLETKBW3PvgPWqT")),
        ("spotify:user:someone:playlist:37i9dQZF1DXcBWIGoYBM5M", ("playlist", "37i9dQZF1DXcBWIGoYBM5M")),
        ("  spotify:album:xyz  ", ("album", "xyz")),
    ])
    def test_supported_references(self, reference, expected):
        """Tracks, albums and playlists in every common form"""
        assert parse_spotify_reference(reference) == expected

    def test_empty_reference(self):
        """Empty input is a missing reference"""
        with pytest.raises(MissingReferenceError):
            parse_spotify_reference("")

    @pytest.mark.parametrize("reference", [
        "https://example.com/track/abc",
        "https://open.spotify.com/artist/0gxyHStUsqpMadRV0Di1Qt",
        "spotify:show:abc",
        "https://open.spotify.com/track/",
    ])
    def test_unsupported_references(self, reference):
        """Non-Spotify and unsupported entity kinds are rejected"""
        with pytest.raises(InvalidReferenceError):
            parse_spotify_reference(reference)

"""Test configuration and fixtures"""

import pytest

from lavaspot.lavalink.models import Node
from lavaspot.spotify.models import Artist, CatalogTrack


@pytest.fixture
def node():
    """Lavalink node used across tests"""
    return Node(host="localhost", port=2333, password="youshallnotpass")


@pytest.fixture
def catalog_track():
    """The Song X / Artist A track at 200000 ms"""
    return CatalogTrack(
        name="Song X",
        artists=(Artist("Artist A"),),
        duration_ms=200000,
        spotify_id="track1",
    )


@pytest.fixture
def sample_track_data():
    """Sample Spotify API track data for testing"""
    return {
        "id": "4cOdK2wGLETKBW3PvgPWqT",
        "name": "Never Gonna Give You Up",
        "artists": [
            {"id": "0gxyHStUsqpMadRV0Di1Qt", "name": "Rick Astley"},
            {"id": "x", "name": "Featured Artist"},
        ],
        "duration_ms": 213573,
        "explicit": False,
        "popularity": 80,
    }

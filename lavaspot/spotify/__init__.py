"""
Spotify integration module for lavaspot.

This module provides everything needed to read the Spotify catalog:
    - CredentialManager: client-credentials token with automatic renewal
    - CatalogClient: async client for track/album/playlist endpoints
    - CatalogTrack, Artist: data models for catalog tracks

Usage:
    from lavaspot.spotify import CatalogClient, CredentialManager, CatalogTrack

    credentials = CredentialManager(session, client_id, client_secret)
    await credentials.start()
    client = CatalogClient(session, credentials)
    track = CatalogTrack.from_spotify_api(await client.track(track_id))
"""

from lavaspot.spotify.auth import Credential, CredentialManager
from lavaspot.spotify.client import CatalogClient
from lavaspot.spotify.models import Artist, CatalogTrack

__all__ = [
    # Auth
    "Credential",
    "CredentialManager",
    # Client
    "CatalogClient",
    # Models
    "Artist",
    "CatalogTrack",
]

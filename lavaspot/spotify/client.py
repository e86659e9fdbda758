"""
Async Spotify Web API client for lavaspot.

A thin wrapper over the four read-only catalog endpoints used to resolve
tracks, albums and playlists. Each request reads the current bearer token
from the CredentialManager at send time, so a renewal that happens while
other requests are in flight is picked up by the next request.

Endpoints:
    GET /tracks/{id}
    GET /albums/{id}/tracks?limit=50
    GET /playlists/{id}
    GET /playlists/{id}/tracks?limit=&offset=

Usage:
    client = CatalogClient(session, credentials)
    track_data = await client.track("4cOdK2wGLETKBW3PvgPWqT")
    page = await client.playlist_items(playlist_id, limit=100, offset=0)

Errors:
    Every failure is reported as SpotifyError. HTTP 401 sets
    is_auth_error, HTTP 429 sets is_rate_limit; the status is always in
    details["http_status"].
"""

import asyncio
from typing import Any

import aiohttp

from lavaspot.core.exceptions import SpotifyError
from lavaspot.core.logger import get_logger
from lavaspot.spotify.auth import CredentialManager

logger = get_logger(__name__)


BASE_URL = "https://api.spotify.com/v1"

# Maximum page size accepted by the playlist items endpoint
PLAYLIST_PAGE_SIZE = 100

# Maximum page size accepted by the album tracks endpoint
ALBUM_PAGE_SIZE = 50


class CatalogClient:
    """
    Read-only Spotify catalog client.

    Attributes:
        _session: Shared aiohttp session.
        _credentials: Token source for the Authorization header.
        _base_url: API root, overridable for tests.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        credentials: CredentialManager,
        base_url: str = BASE_URL
    ) -> None:
        self._session = session
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")

    # =========================================================================
    # Track Operations
    # =========================================================================

    async def track(self, track_id: str) -> dict[str, Any]:
        """
        Get full track metadata.

        Args:
            track_id: Spotify track ID, e.g. "4cOdK2wGLETKBW3PvgPWqT".

        Returns:
            Track object as returned by the Spotify API.

        Raises:
            SpotifyError: If the track is not found or the request fails.
        """
        return await self._get(f"/tracks/{track_id}", details={"track_id": track_id})

    # =========================================================================
    # Album Operations
    # =========================================================================

    async def album_tracks(self, album_id: str) -> dict[str, Any]:
        """
        Get the track listing of an album (a single page of ALBUM_PAGE_SIZE).

        Returns:
            Paging object whose 'items' are simplified track objects.
        """
        return await self._get(
            f"/albums/{album_id}/tracks",
            params={"limit": str(ALBUM_PAGE_SIZE)},
            details={"album_id": album_id}
        )

    # =========================================================================
    # Playlist Operations
    # =========================================================================

    async def playlist(self, playlist_id: str) -> dict[str, Any]:
        """
        Get playlist metadata, including 'tracks.total'.

        Raises:
            SpotifyError: If playlist not found, private, or network error.
        """
        return await self._get(f"/playlists/{playlist_id}", details={"playlist_id": playlist_id})

    async def playlist_items(
        self,
        playlist_id: str,
        limit: int = PLAYLIST_PAGE_SIZE,
        offset: int = 0
    ) -> dict[str, Any]:
        """
        Get one page of playlist items.

        Args:
            playlist_id: Spotify playlist ID.
            limit: Page size (max 100).
            offset: Index of the first item of the page.

        Returns:
            Paging object whose 'items' each hold a 'track' field.
        """
        return await self._get(
            f"/playlists/{playlist_id}/tracks",
            params={"limit": str(min(limit, PLAYLIST_PAGE_SIZE)), "offset": str(offset)},
            details={"playlist_id": playlist_id, "offset": offset}
        )

    # =========================================================================
    # Transport
    # =========================================================================

    async def _get(
        self,
        path: str,
        params: dict[str, str] | None = None,
        details: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        details = dict(details or {}, url=url)

        headers = {
            "Content-Type": "application/json",
            "Authorization": self._credentials.authorization_header,
        }

        try:
            async with self._session.get(url, params=params, headers=headers) as response:
                status = response.status
                if status >= 400:
                    body = await response.text()
                    raise SpotifyError(
                        f"Spotify API returned HTTP {status} for {path}",
                        details=dict(details, http_status=status, body=body[:200]),
                        is_auth_error=status == 401,
                        is_rate_limit=status == 429
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise SpotifyError(
                f"Spotify request failed for {path}: {e}",
                details=dict(details, original_error=str(e))
            ) from e

        if not isinstance(payload, dict):
            raise SpotifyError(
                f"Unexpected Spotify response for {path}",
                details=details
            )

        logger.debug(f"GET {path} -> {status}")
        return payload

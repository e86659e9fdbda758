"""
Spotify reference resolution for lavaspot.

TrackResolver is the public entry point of the library. It turns Spotify
track, album and playlist IDs into catalog tracks and, on request, into
Lavalink search candidates ready for playback.

Workflow:
    1. Validate the ID (missing and wrong-typed IDs are caller errors,
       raised before any network call)
    2. Fetch catalog metadata from the Spotify Web API
       - tracks: one request
       - albums: one request (single page)
       - playlists: total count, then pages of 100 concatenated in order
    3. If convert=True, run the matcher once per track
       - single track: errors propagate
       - albums/playlists: all tracks are matched concurrently; a track
         that fails resolves to None at its position, the rest carry on

Lifecycle:
    The resolver owns an aiohttp session (unless one is injected), the
    Spotify credential manager and its renewal task. Use it as an async
    context manager, or call start()/close() yourself.

Usage:
    node = Node(host="localhost", port=2333, password="youshallnotpass")

    async with TrackResolver(node, client_id, client_secret) as resolver:
        tracks = await resolver.get_playlist_tracks(playlist_id)
        candidates = await resolver.get_album_tracks(
            album_id,
            convert=True,
            policy=SelectionPolicy(prioritize_same_duration=True)
        )
"""

import asyncio
import math
from typing import Any

import aiohttp

from lavaspot.core.exceptions import InvalidTypeError, MissingReferenceError, ResolverStateError
from lavaspot.core.logger import get_logger
from lavaspot.lavalink.client import NodeClient
from lavaspot.lavalink.matcher import Matcher
from lavaspot.lavalink.models import Node, SearchCandidate
from lavaspot.lavalink.policy import SelectionPolicy
from lavaspot.spotify.auth import CredentialManager
from lavaspot.spotify.client import PLAYLIST_PAGE_SIZE, CatalogClient
from lavaspot.spotify.models import CatalogTrack
from lavaspot.utils import parse_spotify_reference

logger = get_logger(__name__)


DEFAULT_TIMEOUT_SECONDS = 30.0


def _require_id(value: Any, kind: str) -> None:
    """
    Validate a Spotify entity ID.

    Raises:
        MissingReferenceError: If the ID is missing or empty.
        InvalidTypeError: If the ID is not a string.
    """
    if not value:
        raise MissingReferenceError(
            f"The {kind} ID was not provided",
            details={"kind": kind}
        )
    if not isinstance(value, str):
        raise InvalidTypeError(
            f"The {kind} ID must be a string, received type {type(value).__name__}",
            details={"kind": kind}
        )


class TrackResolver:
    """
    Resolves Spotify tracks, albums and playlists into Lavalink candidates.

    Attributes:
        node: The Lavalink node searched for candidates.
        _session: aiohttp session shared by all clients.
        _owns_session: Whether close() should close the session.
        _credentials: Spotify token manager.
        _catalog: Spotify catalog client.
        _matcher: Lavalink matcher.
    """

    def __init__(
        self,
        node: Node,
        client_id: str,
        client_secret: str,
        session: aiohttp.ClientSession | None = None,
        requests_per_second: float | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        """
        Initialize the resolver. No network access happens until start().

        Args:
            node: Lavalink node connection details.
            client_id: Spotify application client ID.
            client_secret: Spotify application client secret.
            session: Optional aiohttp session to use. An injected session
                     is left open by close().
            requests_per_second: Optional throttle for node searches.
            timeout: Total timeout of each request on the owned session.
        """
        self.node = node
        self._client_id = client_id
        self._client_secret = client_secret
        self._requests_per_second = requests_per_second
        self._timeout = timeout

        self._session = session
        self._owns_session = session is None

        self._credentials: CredentialManager | None = None
        self._catalog: CatalogClient | None = None
        self._matcher: Matcher | None = None
        self._started = False

        if session is not None:
            self._build_clients(session)

    def _build_clients(self, session: aiohttp.ClientSession) -> None:
        self._credentials = CredentialManager(session, self._client_id, self._client_secret)
        self._catalog = CatalogClient(session, self._credentials)
        self._matcher = Matcher(
            NodeClient(session, self.node, requests_per_second=self._requests_per_second)
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """
        Open the session if needed, obtain a Spotify token and start renewal.

        Raises:
            SpotifyError: If the client credentials are rejected.
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
            self._build_clients(self._session)

        await self._credentials.start()
        self._started = True
        logger.debug(f"Resolver started for node {self.node.address}")

    async def close(self) -> None:
        """Stop token renewal and close the owned session."""
        self._started = False
        if self._credentials is not None:
            await self._credentials.close()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._credentials = None
            self._catalog = None
            self._matcher = None

    def _require_started(self) -> None:
        if not self._started:
            raise ResolverStateError(
                "Resolver not started; call start() or use 'async with'",
                details={"node": self.node.address}
            )

    async def __aenter__(self) -> "TrackResolver":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Catalog Operations
    # =========================================================================

    async def get_track(
        self,
        track_id: str,
        convert: bool = False,
        policy: SelectionPolicy | None = None
    ) -> CatalogTrack | SearchCandidate | None:
        """
        Fetch a track and optionally convert it to a Lavalink candidate.

        Args:
            track_id: Spotify track ID.
            convert: Return the matched SearchCandidate instead of the
                     CatalogTrack.
            policy: Selection policy for the conversion.

        Returns:
            CatalogTrack, or SearchCandidate/None when convert is True.

        Raises:
            MissingReferenceError, InvalidTypeError: Invalid ID.
            SpotifyError: If the catalog request fails.
            LavalinkError: If the search request fails (convert only).
            ResolverStateError: If start() has not been called.
        """
        _require_id(track_id, "track")
        self._require_started()

        track = CatalogTrack.from_spotify_api(await self._catalog.track(track_id))

        if convert:
            return await self._matcher.fetch_track(track, policy)
        return track

    async def get_album_tracks(
        self,
        album_id: str,
        convert: bool = False,
        policy: SelectionPolicy | None = None
    ) -> list[CatalogTrack] | list[SearchCandidate | None]:
        """
        Fetch an album's tracks and optionally convert them.

        Returns:
            The album's tracks in order, or one SearchCandidate/None per
            track when convert is True.

        Raises:
            MissingReferenceError, InvalidTypeError: Invalid ID.
            SpotifyError: If the catalog request fails.
        """
        _require_id(album_id, "album")
        self._require_started()

        response = await self._catalog.album_tracks(album_id)
        tracks = [CatalogTrack.from_spotify_api(item) for item in response.get("items") or []]
        logger.debug(f"Album {album_id}: {len(tracks)} tracks")

        if convert:
            return await self.convert_tracks(tracks, policy)
        return tracks

    async def get_playlist_tracks(
        self,
        playlist_id: str,
        convert: bool = False,
        policy: SelectionPolicy | None = None
    ) -> list[CatalogTrack | None] | list[SearchCandidate | None]:
        """
        Fetch every track of a playlist and optionally convert them.

        Pages of PLAYLIST_PAGE_SIZE items are requested one after the
        other and concatenated in page order. Playlist entries without a
        track (removed or local files) appear as None.

        Returns:
            The playlist's tracks in order, or one SearchCandidate/None per
            entry when convert is True.

        Raises:
            MissingReferenceError, InvalidTypeError: Invalid ID.
            SpotifyError: If a catalog request fails.
        """
        _require_id(playlist_id, "playlist")
        self._require_started()

        playlist = await self._catalog.playlist(playlist_id)
        total = (playlist.get("tracks") or {}).get("total") or 0
        pages = math.ceil(total / PLAYLIST_PAGE_SIZE)
        logger.debug(f"Playlist {playlist_id}: {total} tracks in {pages} pages")

        items: list[dict[str, Any]] = []
        for page in range(pages):
            response = await self._catalog.playlist_items(
                playlist_id,
                limit=PLAYLIST_PAGE_SIZE,
                offset=page * PLAYLIST_PAGE_SIZE
            )
            items.extend(response.get("items") or [])

        tracks = [
            CatalogTrack.from_spotify_api(item["track"])
            if isinstance(item, dict) and isinstance(item.get("track"), dict) else None
            for item in items
        ]

        if convert:
            return await self.convert_tracks(tracks, policy)
        return tracks

    async def fetch_track(
        self,
        track: CatalogTrack | dict | None,
        policy: SelectionPolicy | None = None
    ) -> SearchCandidate | None:
        """
        Match a single catalog track on the Lavalink node.

        See Matcher.fetch_track().
        """
        self._require_started()
        return await self._matcher.fetch_track(track, policy)

    async def resolve(
        self,
        reference: str,
        convert: bool = False,
        policy: SelectionPolicy | None = None
    ) -> CatalogTrack | SearchCandidate | list | None:
        """
        Resolve a Spotify URL or URI by dispatching on its entity kind.

        Args:
            reference: e.g. "https://open.spotify.com/playlist/ID" or
                       "spotify:track:ID".
            convert: Convert to Lavalink candidates.
            policy: Selection policy for the conversion.

        Returns:
            Whatever get_track/get_album_tracks/get_playlist_tracks returns.

        Raises:
            InvalidReferenceError: If the reference is not a supported
                                   Spotify URL/URI.
        """
        kind, spotify_id = parse_spotify_reference(reference)

        if kind == "track":
            return await self.get_track(spotify_id, convert, policy)
        if kind == "album":
            return await self.get_album_tracks(spotify_id, convert, policy)
        return await self.get_playlist_tracks(spotify_id, convert, policy)

    # =========================================================================
    # Bulk Conversion
    # =========================================================================

    async def convert_tracks(
        self,
        tracks: list[CatalogTrack | None],
        policy: SelectionPolicy | None = None
    ) -> list[SearchCandidate | None]:
        """
        Match every track concurrently, keeping positions.

        A track that is invalid or whose search fails is logged and
        yields None; it never aborts the other tracks.

        Args:
            tracks: Catalog tracks, None entries allowed.
            policy: Selection policy applied to every track.

        Returns:
            List of the same length as tracks, result[i] for tracks[i].
        """
        self._require_started()
        # gather() keeps argument order whatever the completion order
        return list(await asyncio.gather(
            *(self._fetch_or_none(index, track, policy) for index, track in enumerate(tracks))
        ))

    async def _fetch_or_none(
        self,
        index: int,
        track: CatalogTrack | None,
        policy: SelectionPolicy | None
    ) -> SearchCandidate | None:
        try:
            return await self._matcher.fetch_track(track, policy)
        except Exception as e:
            name = track.name if track is not None else None
            logger.warning(f"Matching failed for item {index} ({name}): {e}")
            return None

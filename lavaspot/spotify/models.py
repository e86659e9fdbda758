"""
Data models for Spotify catalog entities.

This module defines immutable dataclasses for the parts of a Spotify track
that matter for matching: the title, the ordered artist list and the
duration.

Design Decisions:
    - Dataclasses are frozen (immutable) once fetched
    - Parsing is lenient: a missing name or a non-list 'artists' value is
      carried through as-is so the matcher's validation can report it
      with a precise error instead of failing inside the parser
    - Fields follow the Spotify API names in snake_case

Usage:
    from lavaspot.spotify.models import CatalogTrack

    track = CatalogTrack.from_spotify_api(api_response)
    print(f"{track.primary_artist} - {track.name}")
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Artist:
    """
    A Spotify artist as it appears in a track's artist list.

    Attributes:
        name: Artist display name. Example: "Queen"
    """

    name: str

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any]) -> "Artist":
        return cls(name=data.get("name", "") if isinstance(data, dict) else "")


@dataclass(frozen=True)
class CatalogTrack:
    """
    Immutable representation of a Spotify track.

    Attributes:
        name: Track title as it appears on Spotify.
              Example: "Bohemian Rhapsody"

        artists: Ordered tuple of artists. The first one is the primary
                 artist and is the one used in the search query.

        duration_ms: Track duration in milliseconds.
                     Used by the duration fast path of the matcher.
                     Example: 354320

        spotify_id: Spotify track ID, when the API returned one.
                    Album track listings and local playlist entries may
                    lack it.

    Example:
        track = CatalogTrack(
            name="Song X",
            artists=(Artist("Artist A"),),
            duration_ms=200000,
        )
    """

    name: str
    artists: tuple[Artist, ...]
    duration_ms: int = 0
    spotify_id: str | None = None

    @classmethod
    def from_spotify_api(cls, data: dict[str, Any]) -> "CatalogTrack":
        """
        Create a CatalogTrack from a Spotify Web API track object.

        Works for full track objects (/tracks/{id}), simplified track
        objects (/albums/{id}/tracks) and the 'track' field of playlist
        items.

        Args:
            data: Track dictionary from the Spotify API.

        Returns:
            CatalogTrack populated with the response data.
        """
        artists = data.get("artists")
        if isinstance(artists, list):
            artists = tuple(Artist.from_spotify_api(a) for a in artists)

        return cls(
            name=data.get("name"),
            artists=artists,
            duration_ms=data.get("duration_ms") or 0,
            spotify_id=data.get("id"),
        )

    @property
    def primary_artist(self) -> str:
        """
        Name of the first artist, or "" when the artist list is empty.

        Example:
            track.primary_artist  # "Queen"
        """
        if not self.artists:
            return ""
        return self.artists[0].name

    @property
    def spotify_uri(self) -> str:
        """Spotify URI for the track, or "" when the id is unknown."""
        return f"spotify:track:{self.spotify_id}" if self.spotify_id else ""

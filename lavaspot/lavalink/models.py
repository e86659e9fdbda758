"""
Data models for the Lavalink audio node.

This module defines dataclasses for the node connection and for the
search results returned by the node's /loadtracks endpoint.

Design:
    Models mirror the Lavalink v3 track JSON (a base64 'track' handle plus
    an 'info' object) in snake_case. The track handle is opaque: it is
    passed back to the node for playback and never decoded here.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Node:
    """
    Connection details of a Lavalink node.

    Attributes:
        host: Hostname or IP address. Example: "localhost"
        port: HTTP port. Example: 2333
        password: Node password, sent verbatim as the Authorization header.
                  This is not the Spotify token.
    """

    host: str
    port: int
    password: str

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def address(self) -> str:
        """host:port, for log messages (never includes the password)."""
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class TrackInfo:
    """
    Metadata of a Lavalink search result.

    Attributes:
        identifier: Source identifier (the YouTube video id for ytsearch).
        is_seekable: Whether playback position can be changed.
        author: Uploader/channel name.
        length: Duration in milliseconds.
        is_stream: Whether the result is a live stream.
        position: Start position in milliseconds (0 for search results).
        title: Video title.
        uri: Playable URL. Example: "https://www.youtube.com/watch?v=..."
    """

    identifier: str
    is_seekable: bool
    author: str
    length: int
    is_stream: bool
    position: int
    title: str
    uri: str

    @classmethod
    def from_lavalink_api(cls, data: dict[str, Any]) -> "TrackInfo":
        return cls(
            identifier=data.get("identifier", ""),
            is_seekable=bool(data.get("isSeekable", False)),
            author=data.get("author", ""),
            length=int(data.get("length") or 0),
            is_stream=bool(data.get("isStream", False)),
            position=int(data.get("position") or 0),
            title=data.get("title", ""),
            uri=data.get("uri", ""),
        )


@dataclass(frozen=True)
class SearchCandidate:
    """
    One search result returned by the node for a query.

    Attributes:
        track: Opaque base64 track handle used by Lavalink for playback.
        info: Result metadata.

    Example:
        candidate = SearchCandidate.from_lavalink_api(result["tracks"][0])
        print(f"{candidate.info.title} ({candidate.duration_ms} ms)")
    """

    track: str
    info: TrackInfo

    @classmethod
    def from_lavalink_api(cls, data: dict[str, Any]) -> "SearchCandidate":
        """
        Create a SearchCandidate from one entry of the 'tracks' list.

        Args:
            data: Track dictionary from the /loadtracks response.

        Returns:
            SearchCandidate with a parsed TrackInfo.
        """
        return cls(
            track=data.get("track", ""),
            info=TrackInfo.from_lavalink_api(data.get("info") or {}),
        )

    @property
    def duration_ms(self) -> int:
        """Reported duration in milliseconds (alias of info.length)."""
        return self.info.length

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def author(self) -> str:
        return self.info.author

    @property
    def uri(self) -> str:
        return self.info.uri

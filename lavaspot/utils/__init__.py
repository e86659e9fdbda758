"""
Utility functions for lavaspot.

This module provides small helpers used by the resolver and the CLI:
    - Spotify URL/URI parsing
    - Duration formatting for console output

Usage:
    from lavaspot.utils import parse_spotify_reference, format_duration

    kind, spotify_id = parse_spotify_reference("https://open.spotify.com/album/xyz")
    # ("album", "xyz")
"""

from lavaspot.core.exceptions import InvalidReferenceError, MissingReferenceError


# Entity kinds the resolver can handle
SUPPORTED_KINDS = ("track", "album", "playlist")


def parse_spotify_reference(reference: str) -> tuple[str, str]:
    """
    Split a Spotify URL or URI into its entity kind and ID.

    Args:
        reference: A Spotify URL ("https://open.spotify.com/playlist/ID")
                   or URI ("spotify:playlist:ID").

    Returns:
        Tuple of (kind, id) where kind is one of SUPPORTED_KINDS.

    Raises:
        MissingReferenceError: If reference is empty.
        InvalidReferenceError: If it is not a Spotify URL/URI, or names an
                               entity kind other than track/album/playlist.

    Examples:
        parse_spotify_reference("spotify:album:1DFixLWuPkv3KT3TnV35m3")
        # ("album", "1DFixLWuPkv3KT3TnV35m3")
    """
    if not reference:
        raise MissingReferenceError("The Spotify reference was not provided")

    reference = reference.strip()
    if reference.startswith("spotify:"):
        parts = reference.split(":")
        # spotify:user:<name>:playlist:<id> is the legacy playlist form
        segments = parts[1:]
    elif "spotify.com/" in reference:
        path = reference.split("spotify.com/", 1)[1]
        path = path.split("?")[0].split("#")[0]
        segments = [s for s in path.split("/") if s]
    else:
        raise InvalidReferenceError(
            f"Not a Spotify URL or URI: {reference}",
            details={"reference": reference}
        )

    for index, segment in enumerate(segments[:-1]):
        if segment in SUPPORTED_KINDS and segments[index + 1]:
            return segment, segments[index + 1]

    raise InvalidReferenceError(
        f"Unsupported Spotify reference: {reference}",
        details={"reference": reference, "supported": list(SUPPORTED_KINDS)}
    )


def format_duration(milliseconds: int) -> str:
    """
    Format a duration in milliseconds as "m:ss" or "h:mm:ss".

    Examples:
        format_duration(225000)   # "3:45"
        format_duration(3750000)  # "1:02:30"
    """
    seconds = max(milliseconds, 0) // 1000
    if seconds < 3600:
        return f"{seconds // 60}:{seconds % 60:02d}"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}:{minutes:02d}:{seconds % 60:02d}"

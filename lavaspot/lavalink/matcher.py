"""
Spotify-to-Lavalink track matching.

This module finds the Lavalink search result that best corresponds to a
Spotify track. It is the only part of lavaspot that makes a decision;
everything else moves data around.

Matching Algorithm:
    1. Validate the Spotify track (name and non-empty artist list)
    2. Search the node for "<name> <primary artist>" plus a description
       filter favouring YouTube auto-generated uploads, which are the
       unedited album versions (not remixes, live takes or fan edits)
    3. No results: no match (None), not an error
    4. Duration fast path (policy.prioritize_same_duration): the first
       result whose length is within SAME_DURATION_TOLERANCE_MS of the
       Spotify duration wins outright; filter and sort are skipped
    5. Drop results rejected by policy.filter
    6. Stable-sort the rest with policy.sort, return the first or None

The matcher keeps no state between calls and never retries a search;
transport failures propagate as LavalinkError.

Usage:
    matcher = Matcher(node_client)
    candidate = await matcher.fetch_track(track, SelectionPolicy(prioritize_same_duration=True))
    if candidate is not None:
        print(candidate.uri)
"""

from functools import cmp_to_key

from lavaspot.core.exceptions import InvalidTypeError, MissingReferenceError
from lavaspot.core.logger import get_logger
from lavaspot.lavalink.client import NodeClient
from lavaspot.lavalink.models import SearchCandidate
from lavaspot.lavalink.policy import DEFAULT_POLICY, SelectionPolicy
from lavaspot.spotify.models import CatalogTrack

logger = get_logger(__name__)


# Inclusive duration tolerance of the fast path, in milliseconds
SAME_DURATION_TOLERANCE_MS = 1500

# Appended to every query. Auto-generated uploads carry this description.
AUTO_GENERATED_FILTER = 'description:("Auto-generated by YouTube.")'


def validate_catalog_track(track: CatalogTrack | None) -> None:
    """
    Check that a track can be matched.

    Raises:
        MissingReferenceError: If the track is None, or its artists or
                               name are missing/empty.
        InvalidTypeError: If artists is not a list/tuple or the name is
                          not a string.
    """
    if not track:
        raise MissingReferenceError("The Spotify track object was not provided")
    if not track.artists:
        raise MissingReferenceError(
            "The track artists array was not provided",
            details={"track_id": track.spotify_id}
        )
    if not track.name:
        raise MissingReferenceError(
            "The track name was not provided",
            details={"track_id": track.spotify_id}
        )
    if not isinstance(track.artists, (list, tuple)):
        raise InvalidTypeError(
            f"The track artists must be an array, received type {type(track.artists).__name__}",
            details={"track_id": track.spotify_id}
        )
    if not isinstance(track.name, str):
        raise InvalidTypeError(
            f"The track name must be a string, received type {type(track.name).__name__}",
            details={"track_id": track.spotify_id}
        )


def build_search_query(track: CatalogTrack) -> str:
    """
    Build the node search query for a Spotify track.

    Example:
        build_search_query(track)
        # 'Song X Artist A description:("Auto-generated by YouTube.")'
    """
    return f"{track.name} {track.primary_artist} {AUTO_GENERATED_FILTER}"


def is_same_duration(candidate: SearchCandidate, track: CatalogTrack) -> bool:
    """True if the candidate length is within the inclusive tolerance band."""
    return abs(candidate.duration_ms - track.duration_ms) <= SAME_DURATION_TOLERANCE_MS


def select_candidate(
    candidates: list[SearchCandidate],
    track: CatalogTrack,
    policy: SelectionPolicy = DEFAULT_POLICY
) -> SearchCandidate | None:
    """
    Pick one candidate out of a search result.

    Args:
        candidates: Search results in provider order.
        track: The Spotify track being matched. The same object is passed
               to every filter/sort call.
        policy: Selection policy.

    Returns:
        The selected candidate, or None if nothing survives the filter.
    """
    if not candidates:
        return None

    if policy.prioritize_same_duration:
        for candidate in candidates:
            if is_same_duration(candidate, track):
                return candidate

    candidate_filter = policy.candidate_filter
    candidate_sort = policy.candidate_sort

    kept = [c for c in candidates if candidate_filter(c, track)]
    if not kept:
        return None

    # list.sort is stable: comparator ties keep provider order
    kept.sort(key=cmp_to_key(lambda a, b: candidate_sort(a, b, track)))
    return kept[0]


class Matcher:
    """
    Matches Spotify tracks to Lavalink search results.

    Attributes:
        _node_client: Client used for searches.

    Concurrency:
        fetch_track() holds no state, so any number of calls may run
        concurrently on the same Matcher.
    """

    def __init__(self, node_client: NodeClient) -> None:
        self._node_client = node_client

    async def fetch_track(
        self,
        track: CatalogTrack | dict | None,
        policy: SelectionPolicy | None = None
    ) -> SearchCandidate | None:
        """
        Find the best Lavalink candidate for a single Spotify track.

        Args:
            track: Spotify track with name, artists and duration. A raw
                   Spotify API track dict is accepted too.
            policy: Selection policy, DEFAULT_POLICY when None.

        Returns:
            A candidate from the node's response, or None if there were
            no results or none survived the policy.

        Raises:
            MissingReferenceError, InvalidTypeError: Invalid track, raised
                before any network access.
            LavalinkError: If the search request fails.
        """
        if isinstance(track, dict):
            track = CatalogTrack.from_spotify_api(track)
        validate_catalog_track(track)
        policy = policy or DEFAULT_POLICY

        query = build_search_query(track)
        logger.debug(f"Searching node {self._node_client.node.address}: {query}")

        candidates = await self._node_client.load_tracks(query)
        if not candidates:
            logger.debug(f"No candidates for: {track.primary_artist} - {track.name}")
            return None

        selected = select_candidate(candidates, track, policy)

        if selected is None:
            logger.debug(
                f"All {len(candidates)} candidates rejected for: "
                f"{track.primary_artist} - {track.name}"
            )
        else:
            logger.debug(
                f"Selected '{selected.title}' by {selected.author} "
                f"({selected.duration_ms} ms, {len(candidates)} candidates) for: "
                f"{track.primary_artist} - {track.name}"
            )

        return selected

"""
Candidate selection policies.

A SelectionPolicy is the caller's say in how the matcher picks one
candidate out of the node's search results. It bundles three things:

    prioritize_same_duration: take the first candidate whose length is
                              within the duration tolerance, skipping
                              filter and sort entirely
    filter(candidate, track) -> bool: keep or discard a candidate
    sort(a, b, track) -> int: three-way comparator (negative: a first,
                              zero: keep order, positive: b first)

Policies are plain values: build one with the defaults and replace the
functions you care about. Nothing is subclassed.

Bundled Policies:
    DEFAULT_POLICY: accept everything, keep provider order
    closest_duration: comparator ranking by distance to the Spotify length
    similarity_policy(): rejects alternative versions (remix, live, ...)
                         and low title/artist similarity, ranks the rest by
                         similarity score (rapidfuzz)

Usage:
    policy = SelectionPolicy(
        prioritize_same_duration=True,
        filter=lambda c, t: not c.info.is_stream,
        sort=closest_duration,
    )
    candidate = await matcher.fetch_track(track, policy)
"""

import re
from dataclasses import dataclass
from typing import Callable

from rapidfuzz import fuzz

from lavaspot.lavalink.models import SearchCandidate
from lavaspot.spotify.models import CatalogTrack


CandidateFilter = Callable[[SearchCandidate, CatalogTrack], bool]
CandidateSort = Callable[[SearchCandidate, SearchCandidate, CatalogTrack], int]


# Minimum similarity score (0-100) accepted by similarity_policy()
MIN_SIMILARITY_SCORE = 70.0

# Weights for title/artist similarity, summing to 1.0
TITLE_WEIGHT = 0.65
ARTIST_WEIGHT = 0.35

# Words that mark an alternative version of a track. A candidate whose
# title contains one of these while the Spotify title doesn't is rejected.
FORBIDDEN_WORDS = (
    "bassboosted",
    "remix",
    "remastered",
    "remaster",
    "reverb",
    "bassboost",
    "live",
    "acoustic",
    "8daudio",
    "concert",
    "acapella",
    "slowed",
    "instrumental",
    "cover",
)

# Channel suffix YouTube appends to auto-generated artist channels
TOPIC_SUFFIX = " - topic"


def accept_all(candidate: SearchCandidate, track: CatalogTrack) -> bool:
    """Default filter: keep every candidate."""
    return True


def keep_order(a: SearchCandidate, b: SearchCandidate, track: CatalogTrack) -> int:
    """Default comparator: no preference, provider order is preserved."""
    return 0


@dataclass(frozen=True)
class SelectionPolicy:
    """
    Per-call candidate selection policy.

    Attributes:
        prioritize_same_duration: Enable the duration fast path.
        filter: Keep/discard predicate. None means accept_all.
        sort: Three-way comparator. None means keep_order.
    """

    prioritize_same_duration: bool = False
    filter: CandidateFilter | None = accept_all
    sort: CandidateSort | None = keep_order

    @property
    def candidate_filter(self) -> CandidateFilter:
        return self.filter or accept_all

    @property
    def candidate_sort(self) -> CandidateSort:
        return self.sort or keep_order


DEFAULT_POLICY = SelectionPolicy()


def closest_duration(a: SearchCandidate, b: SearchCandidate, track: CatalogTrack) -> int:
    """
    Comparator ranking candidates by distance to the Spotify duration.

    Equal distances keep provider order.
    """
    distance_a = abs(a.duration_ms - track.duration_ms)
    distance_b = abs(b.duration_ms - track.duration_ms)
    return (distance_a > distance_b) - (distance_a < distance_b)


def _normalize_text(text: str) -> str:
    """
    Normalize text for comparison.

    Drops bracketed parts (usually version info), punctuation and case.
    """
    text = re.sub(r'\s*[\(\[\{].*?[\)\]\}]\s*', ' ', text)
    text = re.sub(r'[^\w\s]', '', text)
    text = ' '.join(text.split())
    return text.lower().strip()


def _check_forbidden_words(spotify_title: str, candidate_title: str) -> list[str]:
    """
    Return forbidden words present in the candidate title but not in the Spotify title.

    Example:
        # Spotify: "Playing God" vs YouTube: "Playing God (Acoustic)"
        # Returns: ["acoustic"]
    """
    spotify_lower = spotify_title.lower()
    candidate_lower = candidate_title.lower()

    return [
        word for word in FORBIDDEN_WORDS
        if word in candidate_lower and word not in spotify_lower
    ]


def similarity_score(candidate: SearchCandidate, track: CatalogTrack) -> float:
    """
    Weighted title/artist similarity between a candidate and a Spotify track.

    Auto-generated uploads are titled with the bare track name and
    published by "<Artist> - Topic", so the topic suffix is stripped from
    the author before comparing. The title is also compared with the
    primary artist removed, since regular uploads are often titled
    "Artist - Title".

    Returns:
        Score between 0 and 100.
    """
    spotify_title = _normalize_text(track.name)
    spotify_artist = _normalize_text(track.primary_artist)

    author = candidate.author
    if author.lower().endswith(TOPIC_SUFFIX):
        author = author[:-len(TOPIC_SUFFIX)]
    candidate_artist = _normalize_text(author)
    candidate_title = _normalize_text(candidate.title)

    title_score = fuzz.ratio(spotify_title, candidate_title)
    if spotify_artist and spotify_artist in candidate_title:
        stripped = " ".join(candidate_title.replace(spotify_artist, " ").split())
        title_score = max(title_score, fuzz.ratio(spotify_title, stripped))

    artist_score = fuzz.ratio(spotify_artist, candidate_artist)
    if spotify_artist and spotify_artist in candidate_title:
        artist_score = max(artist_score, 100.0)

    return (title_score * TITLE_WEIGHT) + (artist_score * ARTIST_WEIGHT)


def similarity_policy(
    min_score: float = MIN_SIMILARITY_SCORE,
    prioritize_same_duration: bool = True
) -> SelectionPolicy:
    """
    Build a policy that ranks candidates by text similarity.

    Args:
        min_score: Candidates scoring below this (0-100) are discarded.
        prioritize_same_duration: Keep the duration fast path enabled.

    Returns:
        SelectionPolicy whose filter drops alternative versions and weak
        matches, and whose sort puts the highest score first.
    """

    def _filter(candidate: SearchCandidate, track: CatalogTrack) -> bool:
        if _check_forbidden_words(track.name, candidate.title):
            return False
        return similarity_score(candidate, track) >= min_score

    def _sort(a: SearchCandidate, b: SearchCandidate, track: CatalogTrack) -> int:
        score_a = similarity_score(a, track)
        score_b = similarity_score(b, track)
        return (score_a < score_b) - (score_a > score_b)

    return SelectionPolicy(
        prioritize_same_duration=prioritize_same_duration,
        filter=_filter,
        sort=_sort,
    )

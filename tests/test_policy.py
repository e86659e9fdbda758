"""Test candidate selection policies"""

from lavaspot.lavalink.policy import (
    DEFAULT_POLICY,
    SelectionPolicy,
    _check_forbidden_words,
    _normalize_text,
    accept_all,
    closest_duration,
    keep_order,
    similarity_policy,
    similarity_score,
)
from lavaspot.spotify.models import Artist, CatalogTrack
from tests.helpers import make_candidate


class TestDefaults:
    """Test the default policy functions"""

    def test_default_policy(self, catalog_track):
        """Default policy accepts everything and keeps order"""
        candidate = make_candidate()

        assert DEFAULT_POLICY.prioritize_same_duration is False
        assert DEFAULT_POLICY.candidate_filter(candidate, catalog_track) is True
        assert DEFAULT_POLICY.candidate_sort(candidate, candidate, catalog_track) == 0

    def test_none_falls_back(self):
        """Unset functions resolve to the defaults"""
        policy = SelectionPolicy(filter=None, sort=None)

        assert policy.candidate_filter is accept_all
        assert policy.candidate_sort is keep_order


class TestClosestDuration:
    """Test the duration comparator"""

    def test_orders_by_distance(self, catalog_track):
        """Closer duration sorts first"""
        near = make_candidate(length=199000)
        far = make_candidate(length=230000)

        assert closest_duration(near, far, catalog_track) < 0
        assert closest_duration(far, near, catalog_track) > 0

    def test_equal_distance_is_tie(self, catalog_track):
        """Same distance on either side compares equal"""
        below = make_candidate(length=195000)
        above = make_candidate(length=205000)

        assert closest_duration(below, above, catalog_track) == 0


class TestTextHelpers:
    """Test normalization and forbidden word detection"""

    def test_normalize_text(self):
        """Brackets, punctuation and case are dropped"""
        assert _normalize_text("Song X (Official Video)") == "song x"
        assert _normalize_text("  Don't  Stop [Remastered] ") == "dont stop"

    def test_forbidden_word_in_candidate_only(self):
        """Words only in the candidate title are reported"""
        assert _check_forbidden_words("Playing God", "Playing God (Acoustic)") == ["acoustic"]

    def test_forbidden_word_in_both(self):
        """Words present in the Spotify title are allowed"""
        assert _check_forbidden_words("Song X - Live", "Song X (Live)") == []


class TestSimilarityPolicy:
    """Test the bundled rapidfuzz policy"""

    def test_topic_upload_scores_high(self, catalog_track):
        """Auto-generated upload with the bare title is a near-perfect match"""
        candidate = make_candidate(title="Song X", author="Artist A - Topic")

        assert similarity_score(candidate, catalog_track) >= 95

    def test_artist_in_title(self, catalog_track):
        """'Artist - Title' uploads on other channels still score well"""
        candidate = make_candidate(title="Artist A - Song X (Official Audio)", author="SomeChannel")

        assert similarity_score(candidate, catalog_track) >= 90

    def test_unrelated_scores_low(self, catalog_track):
        """Different song and artist scores below the threshold"""
        candidate = make_candidate(title="Completely Different", author="Nobody")

        assert similarity_score(candidate, catalog_track) < 70

    def test_filter_rejects_alternative_versions(self, catalog_track):
        """Remixes are filtered out even when the text matches"""
        policy = similarity_policy()
        remix = make_candidate(title="Song X (Remix)", author="Artist A - Topic")
        original = make_candidate(title="Song X", author="Artist A - Topic")

        assert policy.candidate_filter(remix, catalog_track) is False
        assert policy.candidate_filter(original, catalog_track) is True

    def test_sort_highest_score_first(self, catalog_track):
        """Higher similarity compares before lower"""
        policy = similarity_policy()
        best = make_candidate(title="Song X", author="Artist A - Topic")
        worse = make_candidate(title="Song X lyrics", author="Random Uploader")

        assert policy.candidate_sort(best, worse, catalog_track) < 0
        assert policy.candidate_sort(worse, best, catalog_track) > 0

    def test_fast_path_flag(self):
        """The duration fast path can be switched off"""
        assert similarity_policy().prioritize_same_duration is True
        assert similarity_policy(prioritize_same_duration=False).prioritize_same_duration is False

    def test_min_score(self):
        """A stricter threshold rejects partial matches"""
        track = CatalogTrack(name="Song X", artists=(Artist("Artist A"),), duration_ms=1)
        candidate = make_candidate(title="Song X", author="Other Artist")

        assert similarity_policy(min_score=99).candidate_filter(candidate, track) is False

"""
Unit tests for best matches and mixable groups.
"""

import pytest

from mixflow.analyze.camelot import Strictness
from mixflow.generate.cache import ScoreCache
from mixflow.generate.matches import best_matches, mixable_groups
from mixflow.generate.scoring import DEFAULT_SCORING, ScoringParams

from conftest import make_track


@pytest.fixture
def library():
    return [
        make_track("a", "8A", 120.0),
        make_track("b", "9A", 121.0),
        make_track("c", "8B", 122.0),
        make_track("d", "2A", 150.0),
        make_track("e", "10A", 120.0),
        make_track("f", None, 120.0),
    ]


class TestBestMatches:
    """Test ranking next tracks for one track."""

    def test_ranked_best_first(self, library):
        matches = best_matches(library[0], library, ScoreCache(DEFAULT_SCORING))
        assert [m.to_id for m in matches] == ["b", "c", "e", "d"]
        scores = [m.total_score for m in matches]
        assert scores == sorted(scores, reverse=True)

    def test_skips_self_and_incomplete(self, library):
        matches = best_matches(library[0], library, ScoreCache(DEFAULT_SCORING))
        ids = {m.to_id for m in matches}
        assert "a" not in ids
        assert "f" not in ids

    def test_limit(self, library):
        matches = best_matches(library[0], library, ScoreCache(DEFAULT_SCORING), limit=2)
        assert len(matches) == 2

    def test_incomplete_track(self, library):
        assert best_matches(library[5], library, ScoreCache(DEFAULT_SCORING)) == []

    def test_memoized_per_params(self, library):
        cache = ScoreCache(DEFAULT_SCORING)
        first = best_matches(library[0], library, cache)
        assert best_matches(library[0], library, cache) is first

        cache.use_params(ScoringParams(strictness=Strictness.CREATIVE))
        creative = best_matches(library[0], library, cache)
        assert creative is not first
        # 8A -> 10A becomes an energy+2 move
        assert [m.to_id for m in creative][:3] == ["b", "c", "e"]
        assert next(m for m in creative if m.to_id == "e").key_relation == "energy+2"


class TestMixableGroups:
    """Test BPM band + key neighborhood grouping."""

    def test_groups(self, library):
        groups = mixable_groups(library, Strictness.NORMAL)
        # Band 120: a(8A), b(9A), c(8B), e(10A); d is alone in band 148
        assert groups[0].tracks[0].id == "a"
        assert {t.id for t in groups[0].tracks} == {"a", "b", "c"}
        assert groups[0].bpm_range == (120.0, 122.0)
        assert groups[0].label == "8A/9A/8B @ 120–122"

    def test_sorted_by_size(self, library):
        sizes = [len(g.tracks) for g in mixable_groups(library)]
        assert sizes == sorted(sizes, reverse=True)

    def test_groups_unique(self, library):
        track_sets = [frozenset(t.id for t in g.tracks) for g in mixable_groups(library)]
        assert len(track_sets) == len(set(track_sets))
        assert all(len(s) >= 2 for s in track_sets)

    def test_creative_widens(self, library):
        normal = mixable_groups(library, Strictness.NORMAL)
        creative = mixable_groups(library, Strictness.CREATIVE)
        assert max(len(g.tracks) for g in creative) > max(len(g.tracks) for g in normal)

    def test_no_groups(self):
        tracks = [make_track("a", "8A", 120.0), make_track("b", "2A", 160.0)]
        assert mixable_groups(tracks) == []

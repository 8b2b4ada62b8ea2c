"""
Unit tests for transition scoring.

Tests key relations, tempo scoring with half/double-time, and blending.
"""

import dataclasses

import pytest

from mixflow.analyze.camelot import ALL_CAMELOT_KEYS, Strictness
from mixflow.generate.scoring import (
    DEFAULT_SCORING,
    ScoringParams,
    bpm_score_from_delta,
    compute_bpm_score,
    compute_key_score,
    score_transition,
)


class TestKeyScore:
    """Test harmonic key scoring."""

    def test_same_key(self):
        """Same key scores 1.0 for every position and strictness."""
        for camelot in ALL_CAMELOT_KEYS:
            for strictness in Strictness:
                assert compute_key_score(camelot, camelot, strictness) == (1.0, "same")

    def test_adjacent(self):
        assert compute_key_score("8A", "9A") == (0.9, "adjacent")
        assert compute_key_score("9A", "8A") == (0.9, "adjacent")
        assert compute_key_score("12B", "1B") == (0.9, "adjacent")

    def test_relative(self):
        assert compute_key_score("8A", "8B") == (0.85, "relative")

    def test_energy_boost_creative_only(self):
        """+-2 steps are rewarded only in Creative mode."""
        assert compute_key_score("8A", "10A", Strictness.CREATIVE) == (0.7, "energy+2")
        assert compute_key_score("8A", "6A", Strictness.CREATIVE) == (0.7, "energy+2")
        assert compute_key_score("8A", "10A", Strictness.NORMAL) == (0.2, "other")

    def test_other_by_strictness(self):
        assert compute_key_score("8A", "2A", Strictness.STRICT) == (0.0, "other")
        assert compute_key_score("8A", "2A", Strictness.NORMAL) == (0.2, "other")
        assert compute_key_score("8A", "2A", Strictness.CREATIVE) == (0.2, "other")

    def test_diagonal_is_other(self):
        """Adjacent number on the other ring is not harmonic."""
        assert compute_key_score("8A", "9B").relation == "other"

    def test_string_strictness(self):
        assert compute_key_score("8A", "2A", "Strict") == (0.0, "other")


class TestBpmScore:
    """Test tempo scoring."""

    def test_close_tempo(self):
        result = compute_bpm_score(120, 121, bpm_tolerance=6)
        assert result.score == 1.0
        assert result.mode == "direct"
        assert result.delta == pytest.approx(1.0)

    def test_double_time(self):
        """A 240 BPM track is double-time of 120."""
        result = compute_bpm_score(120, 240, half_double_enabled=True)
        assert result.mode == "double"
        assert result.delta == 0
        assert result.score == 1.0

    def test_half_time(self):
        """A 60 BPM track is half-time of 120."""
        result = compute_bpm_score(120, 60, half_double_enabled=True)
        assert result.mode == "half"
        assert result.delta == 0

    def test_half_double_disabled(self):
        """Without half/double matching the raw delta is used."""
        result = compute_bpm_score(120, 240, half_double_enabled=False)
        assert result.mode == "direct"
        assert result.delta == 120
        assert result.score == 0.1

    def test_direct_wins_ties(self):
        """Only strictly smaller deltas override direct."""
        result = compute_bpm_score(100, 100)
        assert result.mode == "direct"

    @pytest.mark.parametrize(
        "delta,expected",
        [(0, 1.0), (1, 1.0), (2, 0.85), (3, 0.85), (5, 0.65), (6, 0.65), (8, 0.35), (10, 0.35), (11, 0.1)],
    )
    def test_breakpoints_default_tolerance(self, delta, expected):
        assert bpm_score_from_delta(delta, 6) == expected

    def test_breakpoints_scale_with_tolerance(self):
        """Tolerance 12 doubles every breakpoint; 3 halves them."""
        assert bpm_score_from_delta(2, 12) == 1.0
        assert bpm_score_from_delta(20, 12) == 0.35
        assert bpm_score_from_delta(1, 3) == 0.85
        assert bpm_score_from_delta(5.5, 3) == 0.1


class TestScoringParams:
    """Test ScoringParams value type."""

    def test_defaults(self):
        assert DEFAULT_SCORING.key_weight == 0.65
        assert DEFAULT_SCORING.bpm_tolerance == 6
        assert DEFAULT_SCORING.half_double_enabled is True
        assert DEFAULT_SCORING.strictness is Strictness.NORMAL

    def test_string_strictness_coerced(self):
        assert ScoringParams(strictness="Creative").strictness is Strictness.CREATIVE

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_SCORING.key_weight = 0.5

    def test_cache_key_differs(self):
        assert ScoringParams().cache_key() != ScoringParams(strictness="Strict").cache_key()


class TestScoreTransition:
    """Test blended transition scoring."""

    def test_blend(self):
        insight = score_transition("a", "b", "8A", "9A", 120, 121, DEFAULT_SCORING)
        assert insight.key_relation == "adjacent"
        assert insight.key_score == 0.9
        assert insight.bpm_score == 1.0
        assert insight.total_score == pytest.approx(0.65 * 0.9 + 0.35 * 1.0)
        assert insight.from_id == "a"
        assert insight.to_id == "b"

    def test_key_weight_extremes(self):
        key_only = score_transition("a", "b", "8A", "2A", 120, 120, ScoringParams(key_weight=1.0))
        assert key_only.total_score == pytest.approx(0.2)
        bpm_only = score_transition("a", "b", "8A", "2A", 120, 120, ScoringParams(key_weight=0.0))
        assert bpm_only.total_score == pytest.approx(1.0)

    def test_explanation_direct(self):
        insight = score_transition("a", "b", "8A", "8B", 120, 123.5, DEFAULT_SCORING)
        assert insight.explanation == "Key: relative (8A→8B), BPM Δ=3.5"

    def test_explanation_half_double(self):
        insight = score_transition("a", "b", "8A", "8A", 87, 174, DEFAULT_SCORING)
        assert insight.bpm_mode == "double"
        assert insight.explanation == "Key: same (8A→8A), BPM double-time Δ=0.0"

    def test_deterministic(self):
        first = score_transition("a", "b", "3A", "7B", 92, 140, DEFAULT_SCORING)
        second = score_transition("a", "b", "3A", "7B", 92, 140, DEFAULT_SCORING)
        assert first == second

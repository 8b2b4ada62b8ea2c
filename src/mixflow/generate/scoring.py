"""
Transition Scoring: key + tempo compatibility between two tracks.

Key relation (first match wins):
- same       (8A -> 8A)   = 1.0
- adjacent   (8A -> 9A)   = 0.9
- relative   (8A -> 8B)   = 0.85
- energy+2   (8A -> 10A)  = 0.7  (Creative only)
- other                   = 0.2  (0.0 when Strict)

Tempo: smallest of direct / half-time / double-time delta, mapped through
breakpoints scaled by bpm_tolerance / 6.

Total: key_weight * key_score + (1 - key_weight) * bpm_score
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple, Union

from ..analyze.camelot import (
    Strictness,
    camelot_distance,
    get_camelot_letter,
    get_camelot_number,
)

logger = logging.getLogger(__name__)

# Key relation tags
SAME = "same"
ADJACENT = "adjacent"
RELATIVE = "relative"
ENERGY_PLUS_TWO = "energy+2"
OTHER = "other"

# Tempo matching modes
DIRECT = "direct"
HALF = "half"
DOUBLE = "double"

# (delta, score) at bpm_tolerance == 6
BPM_BREAKPOINTS = (
    (1.0, 1.0),
    (3.0, 0.85),
    (6.0, 0.65),
    (10.0, 0.35),
)
BPM_FLOOR_SCORE = 0.1
BPM_TOLERANCE_REFERENCE = 6.0


@dataclass(frozen=True)
class ScoringParams:
    """
    Scoring configuration. Replace wholesale on change, never mutate.

    Args:
        key_weight: Weight of key score vs tempo score, 0..1
        bpm_tolerance: Tempo delta scale, 1..12 (larger relaxes tempo scoring)
        half_double_enabled: Also compare against half/double tempo
        strictness: Strict, Normal or Creative
    """

    key_weight: float = 0.65
    bpm_tolerance: float = 6.0
    half_double_enabled: bool = True
    strictness: Strictness = Strictness.NORMAL

    def __post_init__(self):
        # Accept plain strings ("Creative") from config files and CLI flags
        object.__setattr__(self, "strictness", Strictness(self.strictness))

    def cache_key(self) -> tuple:
        """Tuple identifying these params in score caches."""
        return (self.key_weight, self.bpm_tolerance, self.half_double_enabled, self.strictness.value)


DEFAULT_SCORING = ScoringParams()


class KeyScore(NamedTuple):
    score: float
    relation: str


class BpmScore(NamedTuple):
    score: float
    delta: float
    mode: str


@dataclass(frozen=True)
class TransitionInsight:
    """Scored relationship from one track to another."""

    from_id: str
    to_id: str
    key_relation: str
    bpm_delta: float
    bpm_mode: str
    key_score: float
    bpm_score: float
    total_score: float
    explanation: str


def compute_key_score(
    from_key: str,
    to_key: str,
    strictness: Union[Strictness, str] = Strictness.NORMAL,
) -> KeyScore:
    """
    Score harmonic compatibility of two Camelot keys.

    Args:
        from_key: Current track's Camelot key (e.g., "8A")
        to_key: Candidate track's Camelot key
        strictness: Key strictness setting

    Returns:
        KeyScore(score, relation)
    """
    strictness = Strictness(strictness)
    same_number = get_camelot_number(from_key) == get_camelot_number(to_key)
    same_letter = get_camelot_letter(from_key) == get_camelot_letter(to_key)
    distance = camelot_distance(from_key, to_key).numeric_distance

    if same_number and same_letter:
        return KeyScore(1.0, SAME)
    if distance == 1 and same_letter:
        return KeyScore(0.9, ADJACENT)
    if same_number and not same_letter:
        return KeyScore(0.85, RELATIVE)
    if distance == 2 and same_letter and strictness is Strictness.CREATIVE:
        return KeyScore(0.7, ENERGY_PLUS_TWO)

    return KeyScore(0.0 if strictness is Strictness.STRICT else 0.2, OTHER)


def bpm_score_from_delta(delta: float, tolerance: float) -> float:
    """
    Map a tempo delta to a score.

    Args:
        delta: Absolute tempo difference in BPM
        tolerance: bpm_tolerance; breakpoints scale by tolerance / 6

    Returns:
        Score in {1.0, 0.85, 0.65, 0.35, 0.1}
    """
    scale = tolerance / BPM_TOLERANCE_REFERENCE
    for threshold, score in BPM_BREAKPOINTS:
        if delta <= threshold * scale:
            return score
    return BPM_FLOOR_SCORE


def compute_bpm_score(
    bpm1: float,
    bpm2: float,
    bpm_tolerance: float = 6.0,
    half_double_enabled: bool = True,
) -> BpmScore:
    """
    Score tempo compatibility of two tracks.

    Only bpm2 is rescaled; the scorer is always called with the current
    track first. The mode names bpm2 relative to bpm1: "half" when bpm2 * 2
    matches (60 -> 120), "double" when bpm2 / 2 matches (240 -> 120).

    Args:
        bpm1: Current track tempo
        bpm2: Candidate track tempo
        bpm_tolerance: Tempo delta scale (1..12)
        half_double_enabled: Also consider bpm2 * 2 and bpm2 / 2

    Returns:
        BpmScore(score, delta, mode); ties keep the earlier of direct, half, double
    """
    best_delta, best_mode = abs(bpm1 - bpm2), DIRECT

    if half_double_enabled:
        for delta, mode in ((abs(bpm1 - bpm2 * 2), HALF), (abs(bpm1 - bpm2 / 2), DOUBLE)):
            if delta < best_delta:
                best_delta, best_mode = delta, mode

    return BpmScore(bpm_score_from_delta(best_delta, bpm_tolerance), best_delta, best_mode)


def score_transition(
    from_id: str,
    to_id: str,
    from_key: str,
    to_key: str,
    from_bpm: float,
    to_bpm: float,
    params: ScoringParams = DEFAULT_SCORING,
) -> TransitionInsight:
    """
    Score a transition between two complete tracks.

    Callers must pass resolved keys and tempos; incomplete tracks are
    filtered out before scoring.

    Args:
        from_id: Current track ID
        to_id: Candidate track ID
        from_key: Current track Camelot key
        to_key: Candidate track Camelot key
        from_bpm: Current track tempo
        to_bpm: Candidate track tempo
        params: ScoringParams

    Returns:
        TransitionInsight with sub-scores, blended score and explanation
    """
    key_score, relation = compute_key_score(from_key, to_key, params.strictness)
    bpm_score, delta, mode = compute_bpm_score(
        from_bpm, to_bpm, params.bpm_tolerance, params.half_double_enabled
    )
    total = params.key_weight * key_score + (1 - params.key_weight) * bpm_score

    mode_label = "" if mode == DIRECT else f" {mode}-time"
    explanation = f"Key: {relation} ({from_key}→{to_key}), BPM{mode_label} Δ={delta:.1f}"

    return TransitionInsight(
        from_id=from_id,
        to_id=to_id,
        key_relation=relation,
        bpm_delta=delta,
        bpm_mode=mode,
        key_score=key_score,
        bpm_score=bpm_score,
        total_score=total,
        explanation=explanation,
    )

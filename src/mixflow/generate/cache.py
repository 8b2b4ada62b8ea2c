"""
Score Cache: memoized pairwise transition scores and per-track top matches.

One cache instance belongs to one scoring context (a ScoringParams value and
an active track set). Call invalidate() whenever either changes; the cache
also invalidates itself when asked for scores under different params.
Single-threaded: no locks, no concurrent writers.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .scoring import DEFAULT_SCORING, ScoringParams, TransitionInsight, score_transition

logger = logging.getLogger(__name__)


class ScoreCache:
    """Pairwise (from_id, to_id) -> TransitionInsight cache."""

    def __init__(self, params: ScoringParams = DEFAULT_SCORING):
        """
        Args:
            params: ScoringParams every cached score was computed with
        """
        self.params = params
        self._transitions: Dict[Tuple[str, str], TransitionInsight] = {}
        self._matches: Dict[tuple, List[TransitionInsight]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._transitions)

    def invalidate(self, params: Optional[ScoringParams] = None) -> None:
        """
        Drop every cached score.

        Args:
            params: New ScoringParams to score with from now on (optional)
        """
        dropped = len(self._transitions) + len(self._matches)
        self._transitions.clear()
        self._matches.clear()
        self.hits = 0
        self.misses = 0
        if params is not None:
            self.params = params
        logger.debug(f"Score cache invalidated ({dropped} entries dropped)")

    def use_params(self, params: ScoringParams) -> None:
        """Switch to params, invalidating if they differ from the current ones."""
        if params != self.params:
            logger.info("Scoring params changed; invalidating score cache")
            self.invalidate(params)

    def get_transition(self, from_track, to_track) -> TransitionInsight:
        """
        Get the cached transition score between two complete tracks.

        Args:
            from_track: Current Track (complete)
            to_track: Candidate Track (complete)

        Returns:
            TransitionInsight under self.params
        """
        pair = (from_track.id, to_track.id)
        insight = self._transitions.get(pair)
        if insight is not None:
            self.hits += 1
            return insight

        self.misses += 1
        insight = score_transition(
            from_track.id,
            to_track.id,
            from_track.camelot,
            to_track.camelot,
            from_track.bpm,
            to_track.bpm,
            self.params,
        )
        self._transitions[pair] = insight
        return insight

    def get_matches(self, track_id: str) -> Optional[List[TransitionInsight]]:
        """Cached top matches for a track under the current params, or None."""
        return self._matches.get((track_id,) + self.params.cache_key())

    def set_matches(self, track_id: str, matches: List[TransitionInsight]) -> None:
        self._matches[(track_id,) + self.params.cache_key()] = matches

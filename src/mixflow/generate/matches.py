"""
Track Matching: best next tracks for one track, and mixable groups.

- best_matches: top-N transitions from a track, memoized per scoring params
- mixable_groups: tracks sharing a BPM band and Camelot neighborhood
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..analyze.camelot import Strictness, get_neighbors
from .cache import ScoreCache
from .scoring import TransitionInsight

logger = logging.getLogger(__name__)

DEFAULT_MATCH_LIMIT = 10
DEFAULT_BPM_BAND = 4


@dataclass(frozen=True)
class MixGroup:
    """Tracks that mix together: close tempo, neighboring keys."""

    label: str
    camelots: Tuple[str, ...]
    bpm_range: Tuple[float, float]
    tracks: Tuple


def best_matches(
    track,
    tracks: Sequence,
    cache: ScoreCache,
    limit: int = DEFAULT_MATCH_LIMIT,
) -> List[TransitionInsight]:
    """
    Rank the best transitions out of a track.

    Args:
        track: Source Track
        tracks: Candidate tracks (incomplete ones and the track itself are skipped)
        cache: ScoreCache holding the active ScoringParams
        limit: Maximum number of matches

    Returns:
        TransitionInsights sorted by total score, best first; [] if track is incomplete
    """
    if not track.is_complete:
        return []

    cached = cache.get_matches(track.id)
    if cached is not None:
        return cached

    others = [t for t in tracks if t.id != track.id and t.is_complete]
    scored = [cache.get_transition(track, other) for other in others]
    scored.sort(key=lambda insight: insight.total_score, reverse=True)

    top = scored[:limit]
    cache.set_matches(track.id, top)

    logger.debug(f"Best matches for {track.title!r}: {len(top)} of {len(others)} candidates")
    return top


def _bpm_band(bpm: float, band: int) -> int:
    return int(math.floor(bpm / band) * band)


def mixable_groups(
    tracks: Sequence,
    strictness: Strictness = Strictness.NORMAL,
    bpm_band: int = DEFAULT_BPM_BAND,
) -> List[MixGroup]:
    """
    Group complete tracks by BPM band and Camelot neighborhood.

    For each BPM band (ascending) and each distinct key in the collection,
    a group holds the band's tracks whose key neighbors that key. Groups
    with fewer than 2 tracks or an already-seen track set are dropped.

    Args:
        tracks: Tracks (incomplete ones are skipped)
        strictness: Key strictness (Creative widens neighborhoods to +-2)
        bpm_band: BPM band width

    Returns:
        MixGroups, largest first
    """
    complete = [t for t in tracks if t.is_complete]

    bands: Dict[int, List] = {}
    for track in complete:
        bands.setdefault(_bpm_band(track.bpm, bpm_band), []).append(track)

    all_camelots = list(dict.fromkeys(t.camelot for t in complete))

    groups = []
    seen = set()

    for band in sorted(bands):
        band_tracks = bands[band]
        for camelot in all_camelots:
            neighbors = get_neighbors(camelot, strictness)
            group_tracks = [t for t in band_tracks if t.camelot in neighbors]
            if len(group_tracks) < 2:
                continue

            track_set = tuple(sorted(t.id for t in group_tracks))
            if track_set in seen:
                continue
            seen.add(track_set)

            bpm_min = min(t.bpm for t in group_tracks)
            bpm_max = max(t.bpm for t in group_tracks)
            present = tuple(n for n in neighbors if n in all_camelots)

            groups.append(
                MixGroup(
                    label=f"{'/'.join(present[:3])} @ {round(bpm_min)}–{round(bpm_max)}",
                    camelots=present,
                    bpm_range=(bpm_min, bpm_max),
                    tracks=tuple(group_tracks),
                )
            )

    groups.sort(key=lambda g: len(g.tracks), reverse=True)
    logger.debug(f"Found {len(groups)} mixable groups across {len(bands)} BPM bands")
    return groups

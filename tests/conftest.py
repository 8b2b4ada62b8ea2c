"""Shared fixtures for mixflow tests."""

import pytest

from mixflow.collection import SAMPLE_XML, Track, parse_collection


def make_track(track_id, camelot, bpm, title=None, artist="Test Artist"):
    """Build a Track directly, bypassing XML ingestion."""
    return Track(
        id=track_id,
        title=title or f"Track {track_id}",
        artist=artist,
        bpm=bpm,
        raw_key=camelot,
        canonical_key=camelot,
        camelot=camelot,
        pretty_key=camelot or "",
    )


@pytest.fixture
def sample_collection():
    """Parsed built-in sample collection (8 tracks, one without key)."""
    return parse_collection(SAMPLE_XML)


@pytest.fixture
def sample_tracks(sample_collection):
    return sample_collection.all_tracks

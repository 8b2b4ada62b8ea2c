"""
Unit tests for set exports (CSV, M3U, JSON transition plan).
"""

import json
from unittest.mock import patch

import pytest

from mixflow.collection import Track
from mixflow.generate.playlist import (
    export_filename,
    variant_to_csv,
    variant_to_dict,
    variant_to_m3u,
    write_csv,
    write_m3u,
    write_transitions,
)
from mixflow.generate.selector import generate_variants


@pytest.fixture
def variant():
    """Balanced Flow over two tracks."""
    tracks = [
        Track(
            id="t1", title='Say "Hi"', artist="Artist One", bpm=120.0,
            raw_key="Am", canonical_key="A MINOR", camelot="8A", pretty_key="Am",
        ),
        Track(
            id="t2", title="Second", artist="Artist Two", bpm=121.25,
            raw_key="9A", canonical_key="9A", camelot="9A", pretty_key="9A",
        ),
    ]
    return generate_variants(tracks)[1]


class TestRenderers:
    """Test string renderers."""

    def test_filename(self, variant):
        assert export_filename(variant, "m3u") == "Balanced_Flow.m3u"
        assert export_filename(variant, ".csv") == "Balanced_Flow.csv"

    def test_csv(self, variant):
        lines = variant_to_csv(variant).split("\n")
        assert lines[0] == "Title,Artist,BPM,Camelot,OriginalKey"
        assert lines[1] == '"Say ""Hi""","Artist One",120.0,8A,Am'
        assert lines[2] == '"Second","Artist Two",121.2,9A,9A'

    def test_m3u(self, variant):
        lines = variant_to_m3u(variant).split("\n")
        assert lines[0] == "#EXTM3U"
        assert lines[1] == '#EXTINF:7200,Artist One - Say "Hi"'
        assert lines[2] == 'Say "Hi".mp3'
        assert len(lines) == 5

    def test_dict(self, variant):
        plan = variant_to_dict(variant)
        assert plan["label"] == "Balanced Flow"
        assert [t["id"] for t in plan["tracks"]] == ["t1", "t2"]
        assert plan["tracks"][0]["position"] == 0
        assert len(plan["transitions"]) == 1
        assert plan["transitions"][0]["key_relation"] == "adjacent"
        json.dumps(plan)


class TestWriters:
    """Test file writers."""

    def test_write_m3u(self, variant, tmp_path):
        path = tmp_path / "out" / "set.m3u"
        assert write_m3u(variant, path) is True
        assert path.read_text(encoding="utf-8").startswith("#EXTM3U\n")

    def test_write_csv(self, variant, tmp_path):
        path = tmp_path / "set.csv"
        assert write_csv(variant, path) is True
        assert "Artist Two" in path.read_text(encoding="utf-8")

    def test_write_transitions(self, variant, tmp_path):
        path = tmp_path / "set.json"
        assert write_transitions(variant, path) is True
        plan = json.loads(path.read_text(encoding="utf-8"))
        assert plan["total_score"] == pytest.approx(variant.total_score, abs=1e-4)

    def test_write_failure(self, variant, tmp_path):
        """I/O errors are logged and reported as False."""
        with patch("builtins.open", side_effect=OSError("disk full")):
            assert write_m3u(variant, tmp_path / "set.m3u") is False

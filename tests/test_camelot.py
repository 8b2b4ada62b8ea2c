"""
Unit tests for Camelot wheel geometry.

Tests parsing, circular distance and neighbor derivation.
"""

import pytest

from mixflow.analyze.camelot import (
    ALL_CAMELOT_KEYS,
    Strictness,
    camelot_distance,
    get_camelot_letter,
    get_camelot_number,
    get_neighbors,
    is_camelot_key,
)


class TestParsing:
    """Test Camelot key parsing."""

    def test_all_keys(self):
        """The wheel has 24 positions."""
        assert len(ALL_CAMELOT_KEYS) == 24
        assert len(set(ALL_CAMELOT_KEYS)) == 24

    def test_number_and_letter(self):
        """Number and letter are split correctly."""
        assert get_camelot_number("8A") == 8
        assert get_camelot_letter("8A") == "A"
        assert get_camelot_number("12B") == 12
        assert get_camelot_letter("12b") == "B"

    @pytest.mark.parametrize("value", ["1A", "9b", "10A", "12B"])
    def test_valid_keys(self, value):
        assert is_camelot_key(value) is True

    @pytest.mark.parametrize("value", ["", "0A", "13B", "8C", "A8", "8", "Am"])
    def test_invalid_keys(self, value):
        assert is_camelot_key(value) is False


class TestDistance:
    """Test circular wheel distance."""

    def test_same_key(self):
        assert camelot_distance("8A", "8A") == (0, True)

    def test_adjacent(self):
        distance = camelot_distance("8A", "9A")
        assert distance.numeric_distance == 1
        assert distance.same_letter is True

    def test_relative(self):
        assert camelot_distance("8A", "8B") == (0, False)

    def test_wraparound(self):
        """12 and 1 are adjacent."""
        assert camelot_distance("12B", "1B").numeric_distance == 1
        assert camelot_distance("1A", "11A").numeric_distance == 2

    def test_opposite_side(self):
        """Maximum distance is 6."""
        assert camelot_distance("8A", "2A").numeric_distance == 6

    def test_symmetric(self):
        for a in ALL_CAMELOT_KEYS:
            for b in ("1A", "6B", "12A"):
                assert camelot_distance(a, b) == camelot_distance(b, a)


class TestNeighbors:
    """Test neighbor derivation."""

    def test_normal_neighbors(self):
        """Self, two adjacent, relative."""
        assert get_neighbors("8A", Strictness.NORMAL) == ["8A", "7A", "9A", "8B"]

    def test_strict_same_as_normal(self):
        assert get_neighbors("8A", Strictness.STRICT) == get_neighbors("8A", Strictness.NORMAL)

    def test_creative_adds_energy_steps(self):
        """Creative adds the +-2 keys on the same ring."""
        assert get_neighbors("8A", Strictness.CREATIVE) == ["8A", "7A", "9A", "8B", "6A", "10A"]

    def test_wraparound(self):
        assert get_neighbors("1B") == ["1B", "12B", "2B", "1A"]
        assert get_neighbors("12A", "Creative") == ["12A", "11A", "1A", "12B", "10A", "2A"]

    def test_deduplicated(self):
        neighbors = get_neighbors("5B", Strictness.CREATIVE)
        assert len(neighbors) == len(set(neighbors))
